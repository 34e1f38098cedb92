"""
Request boundary of the foot measurement pipeline.

Internal stages return Outcome values; this module is the single place where
they are translated into the boundary representation: an OwnedBuffer for
encoded images (null buffer with size 0 on failure) and a fixed 6-element
vector for measurements (all zeros on failure). Nothing raises across it.
"""

import logging

from .measurer import FootMeasurer

logger = logging.getLogger(__name__)

VECTOR_LENGTH = 6


class OwnedBuffer:
    """
    Encoded bytes handed to the caller, who must release them exactly once.
    A buffer built from None is the failure sentinel: null with size 0.
    """

    def __init__(self, data=None):
        self._data = data if data else None
        self._released = False

    @property
    def is_null(self):
        return self._data is None

    @property
    def released(self):
        return self._released

    @property
    def size(self):
        return 0 if self._data is None else len(self._data)

    @property
    def data(self):
        if self._released:
            raise ValueError("Buffer already released")
        return self._data

    def release(self):
        """Drop the payload. Returns False for null or already released buffers."""
        if self._data is None:
            if self._released:
                logger.warning("Buffer released more than once")
            else:
                logger.warning("Releasing a null buffer")
            return False
        self._data = None
        self._released = True
        return True

    def __len__(self):
        return self.size


def _buffer_from(outcome, operation):
    if outcome.ok:
        return OwnedBuffer(outcome.value)
    logger.warning("%s failed (%s): %s", operation, outcome.failure.value, outcome.message)
    return OwnedBuffer()


def measure_foot(image_path, qr_size_cm, measurer=None):
    """Annotated PNG preview, or a null buffer on any failure."""
    measurer = measurer or FootMeasurer()
    return _buffer_from(measurer.measure_foot(image_path, qr_size_cm), "measure_foot")


def extract_measurements(image_path, qr_size_cm, measurer=None):
    """[length, width, heel_to_arch, arch_to_toe, big_toe, calibrated], zeros on failure."""
    measurer = measurer or FootMeasurer()
    outcome = measurer.extract_measurement_vector(image_path, qr_size_cm)
    if outcome.ok:
        return outcome.value
    logger.warning("extract_measurements failed (%s): %s", outcome.failure.value, outcome.message)
    return [0.0] * VECTOR_LENGTH


def edge_detect(image_path, measurer=None):
    """Canny edge map as PNG, or a null buffer."""
    measurer = measurer or FootMeasurer()
    return _buffer_from(measurer.detect_edges(image_path), "edge_detect")


def remove_background(image_path, measurer=None):
    """Transparent foot cut-out as PNG, or a null buffer."""
    measurer = measurer or FootMeasurer()
    return _buffer_from(measurer.remove_background(image_path), "remove_background")


def release(buffer):
    """Release a buffer returned by this module. Safe to call with None."""
    if buffer is None:
        return False
    return buffer.release()
