import logging
import os

import cv2
import numpy as np
from PIL import Image, ImageOps

from .background import BackgroundPolarity, classify_background
from .config import DEFAULT_CONFIG
from .models import ContourCandidate
from .morphology import clean_foot_mask
from .results import FailureKind, Outcome

logger = logging.getLogger(__name__)


def load_image(image_path):
    """
    Decode an image file into a BGR array, applying the EXIF orientation.

    Phone cameras store portrait shots as rotated pixels plus an orientation
    tag, so the tag is applied before any geometry is measured.

    Args:
        image_path (str): Path to the image file.

    Returns:
        Outcome: BGR numpy.ndarray on success, DECODE_FAILURE otherwise.
    """
    if not os.path.isfile(image_path):
        return Outcome.failed(FailureKind.DECODE_FAILURE, f"File not found: {image_path}")
    try:
        with Image.open(image_path) as img:
            rgb = ImageOps.exif_transpose(img).convert("RGB")
            array = np.asarray(rgb)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        return Outcome.failed(FailureKind.DECODE_FAILURE, f"Cannot decode {image_path}: {e}")

    if array.size == 0:
        return Outcome.failed(FailureKind.DECODE_FAILURE, f"Empty image: {image_path}")
    return Outcome.success(cv2.cvtColor(array, cv2.COLOR_RGB2BGR))


def to_blurred_gray(image, config=DEFAULT_CONFIG):
    """Convert to grayscale (if needed) and apply the Gaussian blur."""
    if image.ndim == 3:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    else:
        gray = image
    return cv2.GaussianBlur(gray, tuple(config.blur_kernel_size), 0)


def otsu_threshold_value(blurred):
    """Return the Otsu threshold of a grayscale image."""
    value, _ = cv2.threshold(blurred, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    return float(value)


def threshold_foot(blurred, polarity):
    """Otsu threshold with the foot as foreground for the given polarity."""
    mode = cv2.THRESH_BINARY_INV if polarity is BackgroundPolarity.LIGHT else cv2.THRESH_BINARY
    _, binary = cv2.threshold(blurred, 0, 255, mode + cv2.THRESH_OTSU)
    return binary


def find_contour_candidates(binary):
    """Extract outer contours of a binary mask as ContourCandidate objects."""
    contours, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_NONE)
    return [ContourCandidate.from_contour(c) for c in contours]


def segment_foot(image, params, config=DEFAULT_CONFIG):
    """
    Run the segmentation chain up to contour extraction.

    Args:
        image (numpy.ndarray): BGR or grayscale image.
        params (AdaptiveParams): Parameters chosen for this image.
        config (MeasurementConfig): Heuristic constants.

    Returns:
        dict: 'blurred', 'polarity', 'background_intensity', 'otsu',
        'binary' and 'candidates'.
    """
    blurred = to_blurred_gray(image, config)
    otsu = otsu_threshold_value(blurred)
    polarity, intensity = classify_background(blurred, params.border_width, otsu, config)
    binary = threshold_foot(blurred, polarity)
    binary = clean_foot_mask(binary, params.kernel_size, config.kernel_shape)
    return {
        'blurred': blurred,
        'polarity': polarity,
        'background_intensity': intensity,
        'otsu': otsu,
        'binary': binary,
        'candidates': find_contour_candidates(binary),
    }
