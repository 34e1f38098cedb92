"""
Scale calibration from a QR code of known physical size.

The detector output (corners, decoded text and the rectified code image) is
turned into a pixels-per-centimeter ratio. Every rejection produces an
uncalibrated CalibrationData carrying the reason; nothing here raises.
"""

import logging

import cv2
import numpy as np

from .config import DEFAULT_CONFIG
from .models import CalibrationData, QRDetection

logger = logging.getLogger(__name__)


def detect_qr(image):
    """
    Detect, decode and rectify a QR code with OpenCV.

    OpenCV rectifies the code at about one pixel per module, so the module
    count read from its rectified image rarely lands in the valid range.
    With this detector photos effectively always fall back to the
    resolution based estimate; pass another detector to FootMeasurer to
    calibrate from the QR code.

    Args:
        image (numpy.ndarray): BGR or grayscale image.

    Returns:
        QRDetection: Empty detection when nothing is found or OpenCV fails.
    """
    detector = cv2.QRCodeDetector()
    try:
        text, points, rectified = detector.detectAndDecode(image)
    except cv2.error as e:
        logger.warning("QR detection failed: %s", e)
        return QRDetection()

    if points is not None:
        points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    return QRDetection(points=points, decoded_text=text or "", rectified_image=rectified)


def standard_module_counts(config=DEFAULT_CONFIG):
    """Side lengths in modules of QR versions 1 to 40 (21, 25, ..., 177)."""
    return range(config.qr_min_modules, config.qr_max_modules + 1, config.qr_module_step)


def binarize_rectified(rectified, config=DEFAULT_CONFIG):
    """Binarize the rectified code: fixed threshold for gray input, Otsu after conversion."""
    if rectified.ndim == 3:
        code = cv2.COLOR_BGRA2GRAY if rectified.shape[2] == 4 else cv2.COLOR_BGR2GRAY
        gray = cv2.cvtColor(rectified, code)
        _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    else:
        _, binary = cv2.threshold(rectified, config.qr_binarize_threshold, 255, cv2.THRESH_BINARY)
    return binary


def count_row_transitions(binary):
    """Number of polarity changes along the middle row."""
    row = binary[binary.shape[0] // 2]
    return int(np.count_nonzero(row[1:] != row[:-1]))


def snap_module_count(estimate, config=DEFAULT_CONFIG):
    """Snap to the nearest standard size when strictly within the tolerance."""
    nearest = min(standard_module_counts(config), key=lambda size: abs(size - estimate))
    if abs(nearest - estimate) < config.qr_module_snap_tolerance:
        return nearest
    return estimate


def estimate_module_count(rectified, config=DEFAULT_CONFIG):
    """
    Estimate the QR side length in modules from the rectified code.

    Args:
        rectified (numpy.ndarray): Rectified QR image, possibly None or empty.
        config (MeasurementConfig): Heuristic constants.

    Returns:
        int: Snapped module estimate, or 0 without a rectified image.
    """
    if rectified is None or rectified.size == 0:
        return 0
    transitions = count_row_transitions(binarize_rectified(rectified, config))
    return snap_module_count((transitions + 1) // 2, config)


def quad_center(points):
    return tuple(float(v) for v in points.mean(axis=0))


def mean_side_length(points):
    """Mean of the four cyclic edge lengths of the detected quadrilateral."""
    edges = points - np.roll(points, -1, axis=0)
    return float(np.linalg.norm(edges, axis=1).mean())


def in_open_range(value, bounds):
    low, high = bounds
    return low < value < high


def _estimate(detection, qr_real_size_cm, config):
    if not detection.decoded_text or detection.points is None:
        return CalibrationData(rejection_reason="no QR code decoded")

    points = np.asarray(detection.points, dtype=np.float64).reshape(-1, 2)
    if len(points) != 4:
        return CalibrationData(
            qr_content=detection.decoded_text,
            rejection_reason=f"expected 4 QR corners, got {len(points)}",
        )

    modules = estimate_module_count(detection.rectified_image, config)
    if not config.qr_min_modules <= modules <= config.qr_max_modules:
        return CalibrationData(
            qr_modules=modules,
            qr_content=detection.decoded_text,
            rejection_reason=f"invalid module count {modules}",
        )

    if qr_real_size_cm <= 0:
        return CalibrationData(
            qr_modules=modules,
            qr_content=detection.decoded_text,
            rejection_reason=f"invalid QR real size {qr_real_size_cm}",
        )

    center = quad_center(points)
    raw_size = mean_side_length(points)

    if detection.has_rectified_image:
        rows, cols = detection.rectified_image.shape[:2]
        corrected_size = float(min(rows, cols))
        perspective_ratio = corrected_size / raw_size
    else:
        corrected_size = raw_size
        perspective_ratio = 1.0

    pixels_per_cm = corrected_size / qr_real_size_cm
    fields = dict(
        pixels_per_cm=pixels_per_cm,
        qr_center=center,
        qr_size_pixels_raw=raw_size,
        qr_size_pixels_corrected=corrected_size,
        qr_modules=modules,
        perspective_ratio=perspective_ratio,
        qr_content=detection.decoded_text,
    )

    if not in_open_range(perspective_ratio, config.perspective_ratio_range):
        return CalibrationData(
            rejection_reason=f"perspective ratio {perspective_ratio:.4f} out of range", **fields
        )
    if not in_open_range(pixels_per_cm, config.pixels_per_cm_range):
        return CalibrationData(
            rejection_reason=f"pixel density {pixels_per_cm:.2f} px/cm out of range", **fields
        )
    return CalibrationData(is_calibrated=True, **fields)


def estimate_calibration(detection, qr_real_size_cm, config=DEFAULT_CONFIG):
    """
    Turn a QR detection into a validated pixels-per-centimeter calibration.

    Args:
        detection (QRDetection): Detector output.
        qr_real_size_cm (float): Physical QR edge length in centimeters.
        config (MeasurementConfig): Heuristic constants.

    Returns:
        CalibrationData: is_calibrated is False when any check fails.
    """
    try:
        return _estimate(detection, qr_real_size_cm, config)
    except (ValueError, TypeError, IndexError, ZeroDivisionError, cv2.error) as e:
        logger.warning("Malformed QR detection, continuing uncalibrated: %s", e)
        return CalibrationData(rejection_reason=f"malformed detection: {e}")
