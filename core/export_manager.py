"""
Export and save functionality for Neural Canvas.
"""

import os
import logging

import numpy as np
from skimage import io

from core.pixel_buffer import PixelBuffer
from utils.helpers import ensure_directory

DEFAULT_FILENAME = 'neural-canvas-art.png'


class ExportManager:
    """Class for managing export and save operations."""

    def __init__(self, logger=None, default_directory='', default_filename=DEFAULT_FILENAME):
        """Initialize export manager."""
        self.logger = logger or logging.getLogger('neural_canvas')
        self.default_directory = default_directory
        self.default_filename = default_filename

    def default_path(self):
        """Path used when the caller does not choose one."""
        return os.path.join(self.default_directory or os.getcwd(), self.default_filename)

    def save_image(self, buffer, file_path=None):
        """Save a pixel buffer to file."""
        file_path = str(file_path or self.default_path())
        self.logger.info(f"Saving image to {file_path}")

        try:
            # Create directory if it doesn't exist
            ensure_directory(os.path.dirname(os.path.abspath(file_path)))

            image = buffer.as_array()

            # JPEG has no alpha channel
            ext = os.path.splitext(file_path)[1].lower()
            if ext in ['.jpg', '.jpeg']:
                image = image[..., :3]

            io.imsave(file_path, np.ascontiguousarray(image), check_contrast=False)
            return True

        except (OSError, ValueError) as e:
            self.logger.error(f"Error saving image: {e}")
            return False

    def build_comparison(self, before, after, gap=8):
        """Place ``before`` and ``after`` side by side with a transparent gap."""
        if (before.width, before.height) != (after.width, after.height):
            raise ValueError("Before and after images must have the same size")

        spacer = np.zeros((before.height, max(0, int(gap)), 4), dtype=np.uint8)
        combined = np.concatenate([before.as_array(), spacer, after.as_array()], axis=1)
        return PixelBuffer.from_array(combined)

    def save_comparison(self, before, after, file_path, gap=8):
        """Save a side-by-side before/after image."""
        self.logger.info(f"Saving comparison to {file_path}")
        try:
            combined = self.build_comparison(before, after, gap)
        except ValueError as e:
            self.logger.error(f"Error building comparison: {e}")
            return False
        return self.save_image(combined, file_path)
