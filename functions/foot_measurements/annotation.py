import cv2
import numpy as np

REGION_COLORS = [(0, 200, 0), (255, 128, 0)]  # BGR, primary then secondary region
LENGTH_COLOR = (0, 0, 255)
WIDTH_COLOR = (255, 255, 0)
QR_COLOR = (255, 0, 255)
TEXT_COLOR = (0, 255, 0)
OVERLAY_ALPHA = 0.35


def _pt(point):
    return int(round(point[0])), int(round(point[1]))


def overlay_regions(image, contours, alpha=OVERLAY_ALPHA):
    """Fill the top two contours with translucent colours and outline them."""
    filled = image.copy()
    for candidate, color in zip(contours[:2], REGION_COLORS):
        cv2.fillPoly(filled, [candidate.as_cv_contour()], color)
    blended = cv2.addWeighted(filled, alpha, image, 1 - alpha, 0)
    for candidate, color in zip(contours[:2], REGION_COLORS):
        cv2.polylines(blended, [candidate.as_cv_contour()], isClosed=True, color=color, thickness=2)
    return blended


def draw_qr(image, detection, calibration, scale):
    if detection.points is None or len(detection.points) != 4:
        return
    quad = np.asarray(detection.points, dtype=np.float64).reshape(-1, 1, 2).round().astype(np.int32)
    cv2.polylines(image, [quad], isClosed=True, color=QR_COLOR, thickness=max(2, scale))
    if calibration.qr_size_pixels_raw > 0:
        cv2.circle(image, _pt(calibration.qr_center), 3 * scale, QR_COLOR, -1)


def draw_measurement_lines(image, measurements, scale):
    m = measurements
    cv2.line(image, _pt(m.heel_point), _pt(m.toe_point), LENGTH_COLOR, 2 * scale, lineType=cv2.LINE_AA)
    cv2.line(image, _pt(m.left_point), _pt(m.right_point), WIDTH_COLOR, 2 * scale, lineType=cv2.LINE_AA)
    for point, color in ((m.heel_point, LENGTH_COLOR), (m.toe_point, LENGTH_COLOR),
                         (m.left_point, WIDTH_COLOR), (m.right_point, WIDTH_COLOR)):
        cv2.circle(image, _pt(point), 5 * scale, color, -1)


def draw_summary(image, measurements, calibration, scale):
    m = measurements
    status = "Calibrated" if m.is_calibrated else "Estimated"
    lines = [
        f"Length: {m.length_cm:.1f} cm",
        f"Width: {m.width_cm:.1f} cm",
        f"Heel-Arch: {m.heel_to_arch_cm:.1f} cm",
        f"Arch-Toe: {m.arch_to_toe_cm:.1f} cm",
        f"Big toe: {m.big_toe_length_cm:.1f} cm",
        f"{status} ({calibration.pixels_per_cm:.1f} px/cm)" if m.is_calibrated else status,
    ]
    font_scale = 0.7 * scale
    line_height = int(30 * scale)
    for i, text in enumerate(lines):
        cv2.putText(image, text, (10, line_height * (i + 1)), cv2.FONT_HERSHEY_SIMPLEX,
                    font_scale, TEXT_COLOR, 2 * scale)


def render_preview(report):
    """
    Draw the measurement preview for a MeasurementReport.

    Args:
        report (MeasurementReport): Pipeline output.

    Returns:
        numpy.ndarray: Annotated BGR image.
    """
    image = report.image
    if image.ndim == 2:
        image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    # Line widths scale with resolution
    scale = max(1, min(image.shape[:2]) // 1000)

    preview = overlay_regions(image, report.contours)
    draw_qr(preview, report.detection, report.calibration, scale)
    if report.contours:
        draw_measurement_lines(preview, report.measurements, scale)
    draw_summary(preview, report.measurements, report.calibration, scale)
    return preview


def encode_png(image):
    """Encode an image as PNG bytes."""
    success, buffer = cv2.imencode(".png", image)
    if not success:
        raise ValueError("PNG encoding failed")
    return buffer.tobytes()
