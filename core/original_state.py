"""
Holder for the pristine image captured at load time.
"""

import logging

from core.errors import InvalidSource
from core.pixel_buffer import PixelBuffer


class OriginalStateManager:
    """Owns the read-only pristine buffer for the lifetime of a loaded image."""

    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger('neural_canvas')
        self._pristine = None

    def load(self, buffer):
        """Capture ``buffer`` as the new pristine image."""
        if not isinstance(buffer, PixelBuffer):
            raise InvalidSource(f"Expected a PixelBuffer, got {type(buffer).__name__}")
        self._pristine = buffer.freeze()
        self.logger.info(f"Captured original image {buffer.width}x{buffer.height}")
        return self._pristine

    @property
    def has_source(self):
        return self._pristine is not None

    @property
    def pristine(self):
        """The read-only original buffer."""
        if self._pristine is None:
            raise InvalidSource("No source image loaded")
        return self._pristine

    def working_copy(self):
        """A fresh writable copy of the original for a pipeline run."""
        return self.pristine.copy()

    def clear(self):
        self._pristine = None
