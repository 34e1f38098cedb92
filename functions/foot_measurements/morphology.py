import cv2
import numpy as np

_KERNEL_SHAPES = {
    "elliptical": cv2.MORPH_ELLIPSE,
    "cross": cv2.MORPH_CROSS,
}


def create_kernel(kernel_size=(5, 5), kernel_shape="elliptical"):
    """
    Create a structuring element for the foot mask cleanup.

    Args:
        kernel_size (tuple): Size of the structuring element.
        kernel_shape (str): "rectangular", "elliptical" or "cross". Unknown
            shapes fall back to rectangular.

    Returns:
        numpy.ndarray: Structuring element.
    """
    shape = _KERNEL_SHAPES.get(kernel_shape)
    if shape is None:
        return np.ones(kernel_size, np.uint8)
    return cv2.getStructuringElement(shape, tuple(kernel_size))


def clean_foot_mask(binary, kernel_size=(5, 5), kernel_shape="elliptical"):
    """
    Close gaps inside the foot, then open to drop speckles around it.

    Args:
        binary (numpy.ndarray): Thresholded image, foreground 255.
        kernel_size (tuple): Size of the structuring element.
        kernel_shape (str): Shape of the structuring element.

    Returns:
        numpy.ndarray: Cleaned binary mask.
    """
    kernel = create_kernel(kernel_size, kernel_shape)
    closed = cv2.morphologyEx(binary, cv2.MORPH_CLOSE, kernel)
    return cv2.morphologyEx(closed, cv2.MORPH_OPEN, kernel)
