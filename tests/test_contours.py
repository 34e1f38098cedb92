import numpy as np
import pytest

from foot_measurements import ContourCandidate, select_adaptive_params, select_foot_contours
from foot_measurements.contours import is_near_border

WIDTH, HEIGHT = 2000, 1000  # 2 MP, min area ratio 0.5%, border width 66
TOTAL = WIDTH * HEIGHT


def candidate(area, bounding_box):
    x, y, w, h = bounding_box
    points = np.array([[x, y], [x + w, y], [x + w, y + h], [x, y + h]], dtype=np.int32)
    return ContourCandidate(points=points, area=float(area), bounding_box=bounding_box)


@pytest.fixture
def params():
    return select_adaptive_params(WIDTH, HEIGHT)


def test_tiny_candidate_is_discarded(params):
    noise = candidate(0.003 * TOTAL, (900, 400, 80, 75))
    assert select_foot_contours([noise], WIDTH, HEIGHT, params) == []


def test_large_border_touching_candidate_is_kept(params):
    foot = candidate(0.4 * TOTAL, (0, 0, 1000, 800))
    assert select_foot_contours([foot], WIDTH, HEIGHT, params) == [foot]


def test_small_border_touching_candidate_is_discarded(params):
    shadow = candidate(0.2 * TOTAL, (10, 100, 800, 500))
    assert select_foot_contours([shadow], WIDTH, HEIGHT, params) == []


def test_border_exemption_is_exclusive(params):
    edge = candidate(0.3 * TOTAL, (0, 100, 1200, 500))
    assert select_foot_contours([edge], WIDTH, HEIGHT, params) == []


def test_area_window_is_exclusive(params):
    at_max = candidate(0.8 * TOTAL, (100, 100, 1800, 800))
    at_min = candidate(0.005 * TOTAL, (900, 400, 100, 100))
    assert select_foot_contours([at_max, at_min], WIDTH, HEIGHT, params) == []


def test_ranked_by_decreasing_area(params):
    heel = candidate(0.05 * TOTAL, (300, 300, 300, 300))
    foot = candidate(0.2 * TOTAL, (700, 200, 800, 600))
    toe = candidate(0.01 * TOTAL, (1600, 400, 100, 200))
    ranked = select_foot_contours([heel, toe, foot], WIDTH, HEIGHT, params)
    assert ranked == [foot, heel, toe]


def test_near_border_margins(params):
    bw = params.border_width
    assert is_near_border((bw, 200, 100, 100), WIDTH, HEIGHT, bw)
    assert not is_near_border((bw + 1, bw + 1, 100, 100), WIDTH, HEIGHT, bw)
    assert is_near_border((500, 500, WIDTH - bw - 500, 100), WIDTH, HEIGHT, bw)
    assert is_near_border((500, 500, 100, HEIGHT - bw - 500), WIDTH, HEIGHT, bw)


def test_candidate_from_opencv_contour():
    contour = np.array([[[10, 10]], [[10, 50]], [[60, 50]], [[60, 10]]], dtype=np.int32)
    c = ContourCandidate.from_contour(contour)
    assert c.area == 2000.0
    assert c.bounding_box == (10, 10, 51, 41)
    assert c.points.shape == (4, 2)
    assert c.as_cv_contour().shape == (4, 1, 2)
