from enum import Enum

import numpy as np
from scipy import ndimage

from .config import DEFAULT_CONFIG


class BackgroundPolarity(Enum):
    DARK = "dark"  # foot brighter than background, default threshold
    LIGHT = "light"  # foot darker than background, inverted threshold


def create_border_mask(shape, border_width):
    """
    Create a mask covering strips of border_width along all four image edges.

    Args:
        shape (tuple): Image shape (height, width[, channels]).
        border_width (int): Strip width in pixels, at least one pixel is used.

    Returns:
        numpy.ndarray: uint8 mask with 1 on the border strips and 0 inside.
    """
    height, width = shape[:2]
    bw = max(1, int(border_width))
    mask = np.zeros((height, width), dtype=np.uint8)
    mask[:bw, :] = 1
    mask[height - bw:, :] = 1
    mask[:, :bw] = 1
    mask[:, width - bw:] = 1
    return mask


def is_light_background(background_intensity, otsu, config=DEFAULT_CONFIG):
    """Light background iff the border is bright and Otsu sits close to it."""
    return (
        background_intensity > config.background_intensity_midpoint
        and otsu > config.otsu_background_factor * background_intensity
    )


def measure_background_intensity(blurred, border_width):
    """Mean gray value of the blurred image under the border mask."""
    mask = create_border_mask(blurred.shape, border_width)
    return float(ndimage.mean(blurred, labels=mask))


def classify_background(blurred, border_width, otsu, config=DEFAULT_CONFIG):
    """
    Decide the threshold polarity from the image border.

    Args:
        blurred (numpy.ndarray): Blurred grayscale image.
        border_width (int): Width of the sampled border strips.
        otsu (float): Otsu threshold computed on the same image.
        config (MeasurementConfig): Heuristic constants.

    Returns:
        tuple: (BackgroundPolarity, background intensity)
    """
    intensity = measure_background_intensity(blurred, border_width)
    if is_light_background(intensity, otsu, config):
        return BackgroundPolarity.LIGHT, intensity
    return BackgroundPolarity.DARK, intensity
