import numpy as np
import pytest

from foot_measurements import BackgroundPolarity, classify_background, create_border_mask, is_light_background


def test_border_mask_covers_four_strips():
    mask = create_border_mask((100, 80), 10)
    assert mask.shape == (100, 80)
    assert mask.sum() == 100 * 80 - 80 * 60
    assert mask[50, 40] == 0
    assert mask[0, 40] == mask[99, 40] == mask[50, 0] == mask[50, 79] == 1


def test_border_mask_is_at_least_one_pixel():
    mask = create_border_mask((10, 10), 0)
    assert mask[0, 5] == 1
    assert mask[5, 5] == 0


def test_light_background_decision():
    # 110 > 0.7 * 150 = 105
    assert is_light_background(150, 110)


def test_dark_background_decision():
    assert not is_light_background(100, 90)


def test_bright_border_with_low_otsu_stays_default():
    assert not is_light_background(200, 100)


def test_midpoint_is_exclusive():
    assert not is_light_background(128, 127)


def test_classify_samples_only_the_border():
    blurred = np.full((100, 100), 150, dtype=np.uint8)
    blurred[10:90, 10:90] = 0
    polarity, intensity = classify_background(blurred, 10, otsu=110)
    assert intensity == pytest.approx(150.0)
    assert polarity is BackgroundPolarity.LIGHT


def test_classify_dark_floor():
    blurred = np.full((100, 100), 100, dtype=np.uint8)
    blurred[10:90, 10:90] = 255
    polarity, intensity = classify_background(blurred, 10, otsu=90)
    assert intensity == pytest.approx(100.0)
    assert polarity is BackgroundPolarity.DARK
