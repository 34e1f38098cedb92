"""
Data model for the foot measurement pipeline.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import cv2
import numpy as np

Point2D = Tuple[float, float]


@dataclass(frozen=True)
class AdaptiveParams:
    """Segmentation parameters derived from the image size."""
    kernel_size: Tuple[int, int]
    min_contour_area_ratio: float
    max_contour_area_ratio: float
    border_width: int


@dataclass(frozen=True, eq=False)
class QRDetection:
    """Raw output of the QR detector: corners, decoded text and rectified code."""
    points: Optional[np.ndarray] = None
    decoded_text: str = ""
    rectified_image: Optional[np.ndarray] = None

    @property
    def has_rectified_image(self) -> bool:
        return self.rectified_image is not None and self.rectified_image.size > 0


@dataclass(frozen=True)
class CalibrationData:
    """Pixels-per-centimeter calibration derived from a QR code."""
    pixels_per_cm: float = 0.0
    qr_center: Point2D = (0.0, 0.0)
    qr_size_pixels_raw: float = 0.0
    qr_size_pixels_corrected: float = 0.0
    is_calibrated: bool = False
    qr_modules: int = 0
    perspective_ratio: float = 1.0
    qr_content: str = ""
    rejection_reason: str = ""


@dataclass(frozen=True, eq=False)
class ContourCandidate:
    """An external contour with its area and bounding box (x, y, w, h)."""
    points: np.ndarray
    area: float
    bounding_box: Tuple[int, int, int, int]

    @classmethod
    def from_contour(cls, contour: np.ndarray) -> "ContourCandidate":
        """Build a candidate from an OpenCV contour of shape (N, 1, 2)."""
        x, y, w, h = cv2.boundingRect(contour)
        return cls(
            points=contour.reshape(-1, 2),
            area=float(cv2.contourArea(contour)),
            bounding_box=(int(x), int(y), int(w), int(h)),
        )

    def as_cv_contour(self) -> np.ndarray:
        return self.points.reshape(-1, 1, 2).astype(np.int32)


@dataclass(frozen=True)
class FootMeasurements:
    """Foot dimensions in centimeters plus the extreme points they came from."""
    length_cm: float = 0.0
    width_cm: float = 0.0
    heel_to_arch_cm: float = 0.0
    arch_to_toe_cm: float = 0.0
    big_toe_length_cm: float = 0.0
    is_calibrated: bool = False
    heel_point: Point2D = (0.0, 0.0)
    toe_point: Point2D = (0.0, 0.0)
    left_point: Point2D = (0.0, 0.0)
    right_point: Point2D = (0.0, 0.0)

    def as_vector(self) -> List[float]:
        """[length, width, heel_to_arch, arch_to_toe, big_toe, calibrated flag]"""
        return [
            float(self.length_cm),
            float(self.width_cm),
            float(self.heel_to_arch_cm),
            float(self.arch_to_toe_cm),
            float(self.big_toe_length_cm),
            1.0 if self.is_calibrated else 0.0,
        ]


@dataclass
class MeasurementReport:
    """Everything the pipeline produced for one image."""
    image: np.ndarray
    params: AdaptiveParams
    calibration: CalibrationData
    measurements: FootMeasurements
    detection: QRDetection = field(default_factory=QRDetection)
    contours: List[ContourCandidate] = field(default_factory=list)
