# Configuration file for Foot Measurements project
from dataclasses import dataclass

TEMP_IMAGES_FOLDER = "tempImages"  # Folder to save intermediate images in verbose mode

# Adaptive segmentation parameters
KERNEL_MIN_SIZE = 3  # Smallest morphological kernel side (pixels)
KERNEL_SIZE_DIVISOR = 200  # Kernel side = min(width, height) // divisor
KERNEL_SHAPE = "elliptical"  # Shape of the kernel: "rectangular", "elliptical", "cross"
LARGE_IMAGE_PIXELS = 1_000_000  # Above this, smaller contours are accepted
MIN_CONTOUR_AREA_RATIO_LARGE = 0.005  # Minimum contour area ratio for large images
MIN_CONTOUR_AREA_RATIO = 0.01  # Minimum contour area ratio otherwise
MAX_CONTOUR_AREA_RATIO = 0.8  # Maximum contour area ratio
BORDER_WIDTH_DIVISOR = 15  # Border width = min(width, height) // divisor

# Preprocessing
BLUR_KERNEL_SIZE = (5, 5)  # Gaussian blur kernel
CANNY_LOW_THRESHOLD = 100  # Legacy edge detection thresholds
CANNY_HIGH_THRESHOLD = 200

# Background polarity
BACKGROUND_INTENSITY_MIDPOINT = 128  # Border mean above this may be a light background
OTSU_BACKGROUND_FACTOR = 0.7  # Otsu must exceed this fraction of the border mean

# Contour selection
NEAR_BORDER_EXEMPTION_RATIO = 0.3  # Border-touching contours larger than this are kept

# QR calibration
QR_BINARIZE_THRESHOLD = 127  # Threshold for single channel rectified QR images
QR_MIN_MODULES = 21  # Version 1
QR_MAX_MODULES = 177  # Version 40
QR_MODULE_STEP = 4  # Modules added per QR version
QR_MODULE_SNAP_TOLERANCE = 2  # Snap only when strictly closer than this
PERSPECTIVE_RATIO_RANGE = (0.5, 2.0)  # Exclusive bounds
PIXELS_PER_CM_RANGE = (30.0, 800.0)  # Exclusive bounds

# Distance correction for calibrated measurements
DISTANCE_FACTOR_CUTOFF = 0.3  # Heel-to-QR distance as fraction of the largest image side
DISTANCE_CORRECTION_GAIN = 0.1

# Uncalibrated fallback, (min total pixels exclusive, pixels per cm), highest first
FALLBACK_PIXELS_PER_CM_TIERS = ((2_000_000, 150.0), (1_000_000, 120.0))
FALLBACK_PIXELS_PER_CM = 90.0

# Derived foot segments as fractions of the foot length
HEEL_TO_ARCH_RATIO = 0.60
ARCH_TO_TOE_RATIO = 0.40
BIG_TOE_RATIO = 0.15


@dataclass(frozen=True)
class MeasurementConfig:
    """Every heuristic used by the measurement pipeline, in one place."""
    kernel_min_size: int = KERNEL_MIN_SIZE
    kernel_size_divisor: int = KERNEL_SIZE_DIVISOR
    kernel_shape: str = KERNEL_SHAPE
    large_image_pixels: int = LARGE_IMAGE_PIXELS
    min_contour_area_ratio_large: float = MIN_CONTOUR_AREA_RATIO_LARGE
    min_contour_area_ratio: float = MIN_CONTOUR_AREA_RATIO
    max_contour_area_ratio: float = MAX_CONTOUR_AREA_RATIO
    border_width_divisor: int = BORDER_WIDTH_DIVISOR

    blur_kernel_size: tuple = BLUR_KERNEL_SIZE
    canny_low_threshold: int = CANNY_LOW_THRESHOLD
    canny_high_threshold: int = CANNY_HIGH_THRESHOLD

    background_intensity_midpoint: float = BACKGROUND_INTENSITY_MIDPOINT
    otsu_background_factor: float = OTSU_BACKGROUND_FACTOR

    near_border_exemption_ratio: float = NEAR_BORDER_EXEMPTION_RATIO

    qr_binarize_threshold: int = QR_BINARIZE_THRESHOLD
    qr_min_modules: int = QR_MIN_MODULES
    qr_max_modules: int = QR_MAX_MODULES
    qr_module_step: int = QR_MODULE_STEP
    qr_module_snap_tolerance: int = QR_MODULE_SNAP_TOLERANCE
    perspective_ratio_range: tuple = PERSPECTIVE_RATIO_RANGE
    pixels_per_cm_range: tuple = PIXELS_PER_CM_RANGE

    distance_factor_cutoff: float = DISTANCE_FACTOR_CUTOFF
    distance_correction_gain: float = DISTANCE_CORRECTION_GAIN

    fallback_pixels_per_cm_tiers: tuple = FALLBACK_PIXELS_PER_CM_TIERS
    fallback_pixels_per_cm: float = FALLBACK_PIXELS_PER_CM

    heel_to_arch_ratio: float = HEEL_TO_ARCH_RATIO
    arch_to_toe_ratio: float = ARCH_TO_TOE_RATIO
    big_toe_ratio: float = BIG_TOE_RATIO


DEFAULT_CONFIG = MeasurementConfig()
