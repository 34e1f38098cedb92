from .config import DEFAULT_CONFIG


def is_near_border(bounding_box, width, height, border_width):
    """True when the bounding box comes within border_width of any image edge."""
    x, y, w, h = bounding_box
    return (
        x <= border_width
        or y <= border_width
        or x + w >= width - border_width
        or y + h >= height - border_width
    )


def select_foot_contours(candidates, width, height, params, config=DEFAULT_CONFIG):
    """
    Filter and rank contour candidates as foot regions.

    Candidates outside the adaptive area window are dropped, as are
    candidates touching the border unless they cover more than the
    exemption share of the image (a foot filling the frame).

    Args:
        candidates (list): ContourCandidate objects.
        width (int): Image width.
        height (int): Image height.
        params (AdaptiveParams): Parameters chosen for this image.
        config (MeasurementConfig): Heuristic constants.

    Returns:
        list: Surviving candidates sorted by decreasing area. Empty when no
        usable contour exists.
    """
    total_area = width * height
    min_area = total_area * params.min_contour_area_ratio
    max_area = total_area * params.max_contour_area_ratio
    exemption_area = total_area * config.near_border_exemption_ratio

    selected = []
    for candidate in candidates:
        if not min_area < candidate.area < max_area:
            continue
        near_border = is_near_border(candidate.bounding_box, width, height, params.border_width)
        if near_border and candidate.area <= exemption_area:
            continue
        selected.append(candidate)

    return sorted(selected, key=lambda c: c.area, reverse=True)
