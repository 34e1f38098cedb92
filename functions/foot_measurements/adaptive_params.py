from .config import DEFAULT_CONFIG
from .models import AdaptiveParams


def select_adaptive_params(width, height, config=DEFAULT_CONFIG):
    """
    Choose segmentation parameters from the image resolution.

    Args:
        width (int): Image width in pixels.
        height (int): Image height in pixels.
        config (MeasurementConfig): Heuristic constants.

    Returns:
        AdaptiveParams: Kernel size, contour area window and border width.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

    shortest_side = min(width, height)
    k = max(config.kernel_min_size, shortest_side // config.kernel_size_divisor)

    if width * height > config.large_image_pixels:
        min_ratio = config.min_contour_area_ratio_large
    else:
        min_ratio = config.min_contour_area_ratio

    return AdaptiveParams(
        kernel_size=(k, k),
        min_contour_area_ratio=min_ratio,
        max_contour_area_ratio=config.max_contour_area_ratio,
        border_width=shortest_side // config.border_width_divisor,
    )
