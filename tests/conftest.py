import cv2
import numpy as np
import pytest

from foot_measurements import QRDetection

FOOT_IMAGE_SIZE = (1200, 900)  # (height, width), 1.08 MP
FOOT_CENTER = (450, 600)
FOOT_AXES = (150, 400)  # half width, half length


def draw_foot(background, foot, size=FOOT_IMAGE_SIZE):
    """A foot-like ellipse, 300 px wide and 800 px long, on a uniform background."""
    image = np.full(size + (3,), background, dtype=np.uint8)
    cv2.ellipse(image, FOOT_CENTER, FOOT_AXES, 0, 0, 360, (foot, foot, foot), -1)
    return image


@pytest.fixture
def foot_image_path(tmp_path):
    """Bright foot on a dark floor."""
    path = tmp_path / "foot_dark_floor.png"
    cv2.imwrite(str(path), draw_foot(30, 220))
    return str(path)


@pytest.fixture
def light_background_foot_path(tmp_path):
    """Slightly darker foot on a white sheet of paper."""
    path = tmp_path / "foot_white_paper.png"
    cv2.imwrite(str(path), draw_foot(240, 200))
    return str(path)


@pytest.fixture
def blank_image_path(tmp_path):
    path = tmp_path / "blank.png"
    cv2.imwrite(str(path), np.full((600, 800, 3), 30, dtype=np.uint8))
    return str(path)


def striped_code(rows, cols, stripes, channels=None):
    """Rectified QR stand-in: vertical stripes giving stripes - 1 transitions per row."""
    values = ((np.arange(cols) * stripes // cols) % 2 * 255).astype(np.uint8)
    image = np.tile(values, (rows, 1))
    if channels:
        image = np.dstack([image] * channels)
    return image


def square_corners(side, origin=100.0):
    o = origin
    return np.array([[o, o], [o + side, o], [o + side, o + side], [o, o + side]], dtype=np.float64)


@pytest.fixture
def make_detection():
    """
    Factory for QR detections: square corners of the given side, rectified
    image of the given size whose middle row estimates `modules` modules.
    """
    def factory(side=480.0, rectified_size=500, modules=25, text="FOOT-QR", channels=None):
        rectified = None
        if rectified_size:
            rows, cols = (rectified_size, rectified_size) if np.isscalar(rectified_size) else rectified_size
            rectified = striped_code(rows, cols, stripes=2 * modules, channels=channels)
        return QRDetection(points=square_corners(side), decoded_text=text, rectified_image=rectified)

    return factory
