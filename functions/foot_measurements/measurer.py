import logging
import math
import os

import cv2
import numpy as np

from .adaptive_params import select_adaptive_params
from .annotation import encode_png, render_preview
from .calibration import detect_qr, estimate_calibration
from .config import DEFAULT_CONFIG, TEMP_IMAGES_FOLDER
from .contours import select_foot_contours
from .measurement import extract_measurements
from .models import MeasurementReport
from .morphology import create_kernel
from .results import FailureKind, Outcome
from .segmentation import load_image, segment_foot, to_blurred_gray

logger = logging.getLogger(__name__)

EMPTY_CONTOUR = np.empty((0, 2), dtype=np.int32)


class FootMeasurer:
    """
    Pipeline orchestrator: decode, segment, calibrate and measure one image
    per call. Holds configuration only, so one instance can serve many
    requests.
    """

    def __init__(self, temp_folder=TEMP_IMAGES_FOLDER, config=DEFAULT_CONFIG,
                 qr_detector=detect_qr, verbose=False):
        """
        Initialize the FootMeasurer.

        Args:
            temp_folder (str): Directory for intermediate images.
            config (MeasurementConfig): Heuristic constants.
            qr_detector (callable): image -> QRDetection.
            verbose (bool): If True, save intermediate images to temp_folder.
        """
        self.temp_folder = temp_folder
        self.config = config
        self.qr_detector = qr_detector
        self.verbose = verbose
        if self.verbose:
            self.setup_directories()

    def setup_directories(self):
        """Create the temporary images directory if it doesn't exist and clean it."""
        if not os.path.exists(self.temp_folder):
            os.makedirs(self.temp_folder)
            return
        for filename in os.listdir(self.temp_folder):
            file_path = os.path.join(self.temp_folder, filename)
            if os.path.isfile(file_path):
                os.unlink(file_path)

    def save_image(self, image, filename):
        """Save an intermediate image when running verbose."""
        if not self.verbose:
            return
        cv2.imwrite(os.path.join(self.temp_folder, filename), image)

    @staticmethod
    def _validate_path(image_path):
        if not image_path or not isinstance(image_path, (str, os.PathLike)):
            return Outcome.failed(FailureKind.INVALID_INPUT, "Missing image path")
        return None

    @staticmethod
    def _validate_qr_size(qr_real_size_cm):
        try:
            size = float(qr_real_size_cm)
        except (TypeError, ValueError):
            return Outcome.failed(FailureKind.INVALID_INPUT, f"Invalid QR size: {qr_real_size_cm!r}")
        if not math.isfinite(size) or size <= 0:
            return Outcome.failed(FailureKind.INVALID_INPUT, f"QR size must be positive, got {size}")
        return None

    def _guard(self, operation, func, *args):
        """Run an operation, turning unexpected exceptions into INTERNAL_ERROR."""
        try:
            return func(*args)
        except Exception as e:
            logger.exception("%s failed unexpectedly", operation)
            return Outcome.failed(FailureKind.INTERNAL_ERROR, f"{operation}: {e}")

    def _segment(self, image_path):
        loaded = load_image(image_path)
        if not loaded.ok:
            logger.warning(loaded.message)
            return loaded
        image = loaded.value
        height, width = image.shape[:2]

        params = select_adaptive_params(width, height, self.config)
        logger.debug("Adaptive params for %dx%d: %s", width, height, params)

        segmentation = segment_foot(image, params, self.config)
        logger.debug(
            "Background %s (border mean %.1f, otsu %.1f)",
            segmentation['polarity'].value, segmentation['background_intensity'], segmentation['otsu'],
        )
        self.save_image(segmentation['blurred'], "blurred.png")
        self.save_image(segmentation['binary'], "binary_mask.png")

        contours = select_foot_contours(segmentation['candidates'], width, height, params, self.config)
        logger.debug("%d of %d contours kept", len(contours), len(segmentation['candidates']))
        return Outcome.success((image, params, contours))

    def _process(self, image_path, qr_real_size_cm):
        segmented = self._segment(image_path)
        if not segmented.ok:
            return segmented
        image, params, contours = segmented.value
        height, width = image.shape[:2]

        detection = self.qr_detector(image)
        calibration = estimate_calibration(detection, float(qr_real_size_cm), self.config)
        if calibration.is_calibrated:
            logger.info(
                "QR calibration accepted: %.2f px/cm, %d modules, perspective ratio %.4f",
                calibration.pixels_per_cm, calibration.qr_modules, calibration.perspective_ratio,
            )
        else:
            logger.info("QR calibration unavailable: %s", calibration.rejection_reason)

        foot = contours[0].points if contours else EMPTY_CONTOUR
        if not contours:
            logger.warning("No usable foot contour in %s", image_path)
        measurements = extract_measurements(foot, calibration, width, height, self.config)
        logger.info(
            "Foot %.2f x %.2f cm (%s)",
            measurements.length_cm, measurements.width_cm,
            "calibrated" if measurements.is_calibrated else "estimated",
        )

        return Outcome.success(MeasurementReport(
            image=image,
            params=params,
            calibration=calibration,
            measurements=measurements,
            detection=detection,
            contours=contours,
        ))

    def process_image(self, image_path, qr_real_size_cm):
        """
        Run the full measurement pipeline on one image.

        A missing foot contour is not a failure here: the report carries an
        empty contour list and zeroed measurements.

        Args:
            image_path (str): Path to the photograph.
            qr_real_size_cm (float): Physical QR edge length in centimeters.

        Returns:
            Outcome: MeasurementReport on success.
        """
        invalid = self._validate_path(image_path) or self._validate_qr_size(qr_real_size_cm)
        if invalid is not None:
            return invalid
        return self._guard("process_image", self._process, image_path, qr_real_size_cm)

    def measure_foot(self, image_path, qr_real_size_cm):
        """
        Measure the foot and render the annotated preview.

        Returns:
            Outcome: PNG bytes on success.
        """
        processed = self.process_image(image_path, qr_real_size_cm)
        if not processed.ok:
            return processed
        if not processed.value.contours:
            return Outcome.failed(FailureKind.NO_USABLE_CONTOUR, f"No foot found in {image_path}")
        return self.render_report(processed.value)

    def _render(self, report):
        preview = render_preview(report)
        self.save_image(preview, "preview.png")
        return Outcome.success(encode_png(preview))

    def render_report(self, report):
        """
        Encode the annotated preview of an already processed image.

        Returns:
            Outcome: PNG bytes on success.
        """
        return self._guard("render_report", self._render, report)

    def extract_measurement_vector(self, image_path, qr_real_size_cm):
        """
        Measure the foot and return the 6-element measurement vector.

        Returns:
            Outcome: [length, width, heel_to_arch, arch_to_toe, big_toe, calibrated].
        """
        processed = self.process_image(image_path, qr_real_size_cm)
        if not processed.ok:
            return processed
        return Outcome.success(processed.value.measurements.as_vector())

    def _detect_edges(self, image_path):
        segmented = self._segment(image_path)
        if not segmented.ok:
            return segmented
        image, params, contours = segmented.value

        blurred = to_blurred_gray(image, self.config)
        edges = cv2.Canny(blurred, self.config.canny_low_threshold, self.config.canny_high_threshold)
        if contours:
            region = np.zeros_like(edges)
            cv2.drawContours(region, [contours[0].as_cv_contour()], -1, 255, cv2.FILLED)
            kernel = create_kernel(params.kernel_size, self.config.kernel_shape)
            region = cv2.dilate(region, kernel, iterations=2)
            edges = cv2.bitwise_and(edges, region)
        self.save_image(edges, "edges.png")
        return Outcome.success(encode_png(edges))

    def detect_edges(self, image_path):
        """
        Canny edge map, restricted to the foot region when one is found.

        Returns:
            Outcome: PNG bytes on success.
        """
        invalid = self._validate_path(image_path)
        if invalid is not None:
            return invalid
        return self._guard("detect_edges", self._detect_edges, image_path)

    def _remove_background(self, image_path):
        segmented = self._segment(image_path)
        if not segmented.ok:
            return segmented
        image, _, contours = segmented.value
        if not contours:
            return Outcome.failed(FailureKind.NO_USABLE_CONTOUR, f"No foot found in {image_path}")

        alpha = np.zeros(image.shape[:2], dtype=np.uint8)
        cv2.drawContours(alpha, [contours[0].as_cv_contour()], -1, 255, cv2.FILLED)
        cutout = cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
        cutout[:, :, 3] = alpha
        self.save_image(cutout, "foreground.png")
        return Outcome.success(encode_png(cutout))

    def remove_background(self, image_path):
        """
        Cut the foot out of the photograph as a transparent PNG.

        Returns:
            Outcome: PNG bytes (BGRA) on success.
        """
        invalid = self._validate_path(image_path)
        if invalid is not None:
            return invalid
        return self._guard("remove_background", self._remove_background, image_path)
