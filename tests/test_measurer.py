import math
import os

import cv2
import numpy as np
import pytest
from PIL import Image

from foot_measurements import FailureKind, FootMeasurer, QRDetection
from foot_measurements.segmentation import load_image

PNG_SIGNATURE = b"\x89PNG"


def no_qr(image):
    return QRDetection()


@pytest.fixture
def measurer():
    return FootMeasurer(qr_detector=no_qr)


@pytest.fixture
def calibrated_measurer(make_detection):
    detection = make_detection(side=480, rectified_size=500)
    return FootMeasurer(qr_detector=lambda image: detection)


class TestProcessImage:

    def test_uncalibrated_estimate(self, measurer, foot_image_path):
        outcome = measurer.process_image(foot_image_path, 5.0)
        assert outcome.ok
        report = outcome.value
        m = report.measurements
        assert not report.calibration.is_calibrated
        assert not m.is_calibrated
        assert len(report.contours) == 1
        # 900x1200 image -> 120 px/cm fallback
        assert m.length_cm == pytest.approx(800 / 120, rel=0.02)
        assert m.width_cm == pytest.approx(300 / 120, rel=0.02)
        assert m.heel_to_arch_cm == m.length_cm * 0.60

    def test_calibrated_measurement(self, calibrated_measurer, foot_image_path):
        report = calibrated_measurer.process_image(foot_image_path, 10.0).value
        m = report.measurements
        assert report.calibration.is_calibrated
        assert m.is_calibrated
        # perspective ratio != 1.0, heel far from the QR center: corrected density
        distance_factor = math.dist(m.heel_point, report.calibration.qr_center) / 1200
        ratio = 50.0 * (1 + (distance_factor - 0.3) * 0.1)
        assert m.length_cm == pytest.approx(math.dist(m.heel_point, m.toe_point) / ratio)

    def test_light_background(self, measurer, light_background_foot_path):
        report = measurer.process_image(light_background_foot_path, 5.0).value
        assert len(report.contours) == 1
        assert report.measurements.length_cm == pytest.approx(800 / 120, rel=0.02)

    def test_no_foot_is_not_a_failure(self, calibrated_measurer, blank_image_path):
        outcome = calibrated_measurer.process_image(blank_image_path, 10.0)
        assert outcome.ok
        assert outcome.value.contours == []
        assert outcome.value.measurements.length_cm == 0.0

    def test_missing_file(self, measurer, tmp_path):
        outcome = measurer.process_image(str(tmp_path / "missing.jpg"), 5.0)
        assert outcome.failure is FailureKind.DECODE_FAILURE

    def test_undecodable_file(self, measurer, tmp_path):
        path = tmp_path / "notes.jpg"
        path.write_text("not an image")
        assert measurer.process_image(str(path), 5.0).failure is FailureKind.DECODE_FAILURE

    @pytest.mark.parametrize("path,size", [("", 5.0), (None, 5.0)])
    def test_missing_path(self, measurer, path, size):
        assert measurer.process_image(path, size).failure is FailureKind.INVALID_INPUT

    @pytest.mark.parametrize("size", [0, -3.0, float("nan"), "abc", None])
    def test_invalid_qr_size(self, measurer, foot_image_path, size):
        assert measurer.process_image(foot_image_path, size).failure is FailureKind.INVALID_INPUT

    def test_unexpected_error_is_contained(self, foot_image_path):
        def broken_detector(image):
            raise RuntimeError("detector crashed")

        outcome = FootMeasurer(qr_detector=broken_detector).process_image(foot_image_path, 5.0)
        assert outcome.failure is FailureKind.INTERNAL_ERROR
        assert "detector crashed" in outcome.message


class TestOperations:

    def test_measure_foot_preview(self, calibrated_measurer, foot_image_path):
        outcome = calibrated_measurer.measure_foot(foot_image_path, 10.0)
        assert outcome.ok
        assert outcome.value.startswith(PNG_SIGNATURE)
        preview = cv2.imdecode(np.frombuffer(outcome.value, np.uint8), cv2.IMREAD_COLOR)
        assert preview.shape == (1200, 900, 3)

    def test_render_report_reuses_processed_image(self, measurer, foot_image_path):
        report = measurer.process_image(foot_image_path, 5.0).value
        outcome = measurer.render_report(report)
        assert outcome.ok
        assert outcome.value.startswith(PNG_SIGNATURE)

    def test_measure_foot_without_contour(self, measurer, blank_image_path):
        outcome = measurer.measure_foot(blank_image_path, 5.0)
        assert outcome.failure is FailureKind.NO_USABLE_CONTOUR

    def test_measurement_vector(self, measurer, foot_image_path):
        vector = measurer.extract_measurement_vector(foot_image_path, 5.0).value
        assert len(vector) == 6
        assert vector[0] == pytest.approx(800 / 120, rel=0.02)
        assert vector[5] == 0.0

    def test_detect_edges(self, measurer, foot_image_path):
        outcome = measurer.detect_edges(foot_image_path)
        edges = cv2.imdecode(np.frombuffer(outcome.value, np.uint8), cv2.IMREAD_GRAYSCALE)
        assert edges.shape == (1200, 900)
        assert edges.any()
        # foot outline survives, the far corner stays empty
        assert not edges[:100, :100].any()

    def test_remove_background(self, measurer, foot_image_path):
        outcome = measurer.remove_background(foot_image_path)
        cutout = cv2.imdecode(np.frombuffer(outcome.value, np.uint8), cv2.IMREAD_UNCHANGED)
        assert cutout.shape == (1200, 900, 4)
        assert cutout[600, 450, 3] == 255
        assert cutout[10, 10, 3] == 0

    def test_remove_background_without_foot(self, measurer, blank_image_path):
        assert measurer.remove_background(blank_image_path).failure is FailureKind.NO_USABLE_CONTOUR

    def test_verbose_saves_intermediate_images(self, foot_image_path, tmp_path):
        folder = tmp_path / "debug"
        verbose = FootMeasurer(temp_folder=str(folder), qr_detector=no_qr, verbose=True)
        assert verbose.measure_foot(foot_image_path, 5.0).ok
        assert {"blurred.png", "binary_mask.png", "preview.png"} <= set(os.listdir(folder))


def test_load_image_applies_exif_orientation(tmp_path):
    path = tmp_path / "portrait.jpg"
    exif = Image.Exif()
    exif[0x0112] = 6  # rotated 90 degrees clockwise
    Image.new("RGB", (40, 20), (10, 20, 30)).save(path, exif=exif)
    outcome = load_image(str(path))
    assert outcome.ok
    assert outcome.value.shape == (40, 20, 3)
