"""
Image loading: decodes files into RGBA pixel buffers for the engine.
"""

import os
import logging

import cv2
import numpy as np
from skimage import io
from tifffile import imread

from core.pixel_buffer import PixelBuffer

TIFF_EXTENSIONS = ('.tif', '.tiff')
IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.bmp', '.gif', '.webp') + TIFF_EXTENSIONS


def fit_within(width, height, max_width, max_height):
    """Scale (width, height) down to fit the canvas, keeping the aspect ratio.

    Width is constrained first, then height, and the result is truncated to
    whole pixels.
    """
    width, height = float(width), float(height)
    if max_width and width > max_width:
        height = height * max_width / width
        width = float(max_width)
    if max_height and height > max_height:
        width = width * max_height / height
        height = float(max_height)
    return max(1, int(width)), max(1, int(height))


class ImageLoader:
    """Decode image files and normalise them to RGBA8."""

    def __init__(self, logger=None, max_width=800, max_height=600):
        """Initialize image loader."""
        self.logger = logger or logging.getLogger('neural_canvas')
        self.max_width = max_width
        self.max_height = max_height

    def load(self, file_path):
        """Load ``file_path`` as a PixelBuffer, or return None on failure."""
        self.logger.info(f"Loading image from {file_path}")

        ext = os.path.splitext(str(file_path))[1].lower()
        if ext not in IMAGE_EXTENSIONS:
            self.logger.error(f"Please select a valid image file, got {file_path}")
            return None

        try:
            if ext in TIFF_EXTENSIONS:
                data = imread(file_path)
            else:
                data = io.imread(file_path)
        except (OSError, ValueError) as e:
            self.logger.error(f"Error loading image: {e}")
            return None

        try:
            rgba = self.to_rgba8(data)
        except ValueError as e:
            self.logger.error(f"Unsupported image layout in {file_path}: {e}")
            return None

        rgba = self.fit_to_canvas(rgba)
        self.logger.info(f"Loaded image with shape {rgba.shape}")
        return PixelBuffer.from_array(rgba)

    def to_rgba8(self, data):
        """Convert gray, RGB, RGBA or high bit-depth arrays to (H, W, 4) uint8."""
        data = np.asarray(data)

        # Animated or multi-page images: keep the first frame
        if data.ndim == 4:
            data = data[0]
        if data.ndim == 3 and data.shape[2] == 2:
            # Gray + alpha
            gray, alpha = data[..., 0], data[..., 1]
            data = np.dstack([gray, gray, gray, alpha])
        if data.ndim not in (2, 3) or (data.ndim == 3 and data.shape[2] not in (3, 4)):
            raise ValueError(f"cannot interpret array of shape {data.shape}")

        data = self._convert_to_8bit(data)

        if data.ndim == 2:
            data = np.stack([data] * 3, axis=-1)
        if data.shape[2] == 3:
            alpha = np.full(data.shape[:2] + (1,), 255, dtype=np.uint8)
            data = np.concatenate([data, alpha], axis=2)
        return np.ascontiguousarray(data)

    def fit_to_canvas(self, rgba):
        """Downscale ``rgba`` so it fits the configured canvas size."""
        height, width = rgba.shape[:2]
        new_width, new_height = fit_within(width, height, self.max_width, self.max_height)
        if (new_width, new_height) == (width, height):
            return rgba

        self.logger.debug(f"Resizing {width}x{height} to {new_width}x{new_height}")
        return cv2.resize(rgba, (new_width, new_height), interpolation=cv2.INTER_AREA)

    def _convert_to_8bit(self, image):
        """Convert image to 8-bit."""
        if image.dtype == np.uint8:
            return image
        if image.dtype == np.bool_:
            return image.astype(np.uint8) * 255
        if np.issubdtype(image.dtype, np.integer):
            # Scale by the full range of the integer type
            max_value = np.iinfo(image.dtype).max
            return np.rint(image.astype(np.float64) / max_value * 255).clip(0, 255).astype(np.uint8)

        # Float images are assumed to be in [0, 1]
        return np.rint(np.clip(image, 0.0, 1.0) * 255).astype(np.uint8)
