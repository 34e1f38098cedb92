import logging
import math

import numpy as np

from .config import DEFAULT_CONFIG
from .models import FootMeasurements

logger = logging.getLogger(__name__)


def find_extreme_points(points):
    """
    Heel (max y), toe (min y), left (min x) and right (max x) of a contour.
    Ties keep the first point in contour order.
    """
    heel = points[np.argmax(points[:, 1])]
    toe = points[np.argmin(points[:, 1])]
    left = points[np.argmin(points[:, 0])]
    right = points[np.argmax(points[:, 0])]
    return tuple((float(p[0]), float(p[1])) for p in (heel, toe, left, right))


def fallback_pixels_per_cm(width, height, config=DEFAULT_CONFIG):
    """Resolution-tiered pixel density used when no QR calibration exists."""
    total = width * height
    for min_pixels, pixels_per_cm in config.fallback_pixels_per_cm_tiers:
        if total > min_pixels:
            return pixels_per_cm
    return config.fallback_pixels_per_cm


def effective_pixels_per_cm(calibration, heel_point, width, height, config=DEFAULT_CONFIG):
    """
    Calibrated density, corrected when the foot is far from a tilted QR code.

    Args:
        calibration (CalibrationData): Accepted calibration.
        heel_point (tuple): Heel coordinates.
        width (int): Image width.
        height (int): Image height.
        config (MeasurementConfig): Heuristic constants.

    Returns:
        float: Pixels per centimeter to apply to the foot.
    """
    ratio = calibration.pixels_per_cm
    if calibration.perspective_ratio != 1.0:
        distance_factor = math.dist(heel_point, calibration.qr_center) / max(width, height)
        if distance_factor > config.distance_factor_cutoff:
            ratio *= 1 + (distance_factor - config.distance_factor_cutoff) * config.distance_correction_gain
    return ratio


def with_segments(length_cm, width_cm, is_calibrated, points, config=DEFAULT_CONFIG):
    heel, toe, left, right = points
    return FootMeasurements(
        length_cm=length_cm,
        width_cm=width_cm,
        heel_to_arch_cm=length_cm * config.heel_to_arch_ratio,
        arch_to_toe_cm=length_cm * config.arch_to_toe_ratio,
        big_toe_length_cm=length_cm * config.big_toe_ratio,
        is_calibrated=is_calibrated,
        heel_point=heel,
        toe_point=toe,
        left_point=left,
        right_point=right,
    )


def _measure(contour, calibration, width, height, config):
    points = np.asarray(contour, dtype=np.float64).reshape(-1, 2)
    if len(points) == 0:
        # The calibration flag is reported even though nothing was measured.
        return FootMeasurements(is_calibrated=calibration.is_calibrated)

    heel, toe, left, right = find_extreme_points(points)
    length_px = math.dist(heel, toe)
    width_px = math.dist(left, right)

    if calibration.is_calibrated:
        pixels_per_cm = effective_pixels_per_cm(calibration, heel, width, height, config)
    else:
        pixels_per_cm = fallback_pixels_per_cm(width, height, config)

    return with_segments(
        length_px / pixels_per_cm,
        width_px / pixels_per_cm,
        calibration.is_calibrated,
        (heel, toe, left, right),
        config,
    )


def extract_measurements(contour, calibration, width, height, config=DEFAULT_CONFIG):
    """
    Convert a foot contour into centimeter measurements.

    Args:
        contour (numpy.ndarray): Contour points, (N, 2) or OpenCV (N, 1, 2).
        calibration (CalibrationData): QR calibration, possibly uncalibrated.
        width (int): Image width.
        height (int): Image height.
        config (MeasurementConfig): Heuristic constants.

    Returns:
        FootMeasurements: Zeroed measurements for empty or malformed input.
    """
    try:
        return _measure(contour, calibration, width, height, config)
    except (ValueError, TypeError, IndexError, ZeroDivisionError) as e:
        logger.warning("Malformed contour geometry, returning zeroed measurements: %s", e)
        return FootMeasurements(is_calibrated=calibration.is_calibrated)
