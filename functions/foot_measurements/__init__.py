"""
Foot Measurements Library
Foot length, width and derived segments from a photograph with a QR code
of known size as the scale reference.
"""

from .config import DEFAULT_CONFIG, MeasurementConfig

from .models import (
    AdaptiveParams,
    CalibrationData,
    ContourCandidate,
    FootMeasurements,
    MeasurementReport,
    QRDetection
)

from .results import FailureKind, Outcome

from .adaptive_params import select_adaptive_params

from .background import (
    BackgroundPolarity,
    classify_background,
    create_border_mask,
    is_light_background
)

from .calibration import (
    detect_qr,
    estimate_calibration,
    estimate_module_count,
    snap_module_count
)

from .contours import select_foot_contours

from .measurement import (
    extract_measurements,
    fallback_pixels_per_cm
)

from .measurer import FootMeasurer

from .bindings import OwnedBuffer, release

__version__ = '1.0.0'

__all__ = [
    'DEFAULT_CONFIG',
    'MeasurementConfig',
    'AdaptiveParams',
    'CalibrationData',
    'ContourCandidate',
    'FootMeasurements',
    'MeasurementReport',
    'QRDetection',
    'FailureKind',
    'Outcome',
    'select_adaptive_params',
    'BackgroundPolarity',
    'classify_background',
    'create_border_mask',
    'is_light_background',
    'detect_qr',
    'estimate_calibration',
    'estimate_module_count',
    'snap_module_count',
    'select_foot_contours',
    'extract_measurements',
    'fallback_pixels_per_cm',
    'FootMeasurer',
    'OwnedBuffer',
    'release',
]
