"""
RGBA pixel buffer shared by every filter and adjustment.
"""

import numpy as np

from core.errors import InvalidSource

CHANNELS = 4


def clamp_to_uint8(values):
    """Narrow float channel values to bytes.

    Values are clamped to [0, 255] and rounded half to even, matching how an
    8-bit clamped canvas buffer stores fractional results.
    """
    return np.rint(np.clip(values, 0.0, 255.0)).astype(np.uint8)


class PixelBuffer:
    """Raw RGBA8 raster data plus its dimensions.

    ``pixels`` is always a flat ``uint8`` array of length ``width*height*4``
    in R, G, B, A order.
    """

    __slots__ = ('width', 'height', 'pixels')

    def __init__(self, width, height, pixels):
        width = int(width)
        height = int(height)
        if width <= 0 or height <= 0:
            raise InvalidSource(f"Image dimensions must be positive, got {width}x{height}")

        data = np.asarray(pixels)
        if data.dtype != np.uint8:
            if data.size and (data.min() < 0 or data.max() > 255):
                raise InvalidSource("Pixel values must fit in 8 bits")
            data = data.astype(np.uint8)
        data = data.reshape(-1)

        expected = width * height * CHANNELS
        if data.size != expected:
            raise InvalidSource(
                f"Pixel buffer has {data.size} values, expected {expected} for {width}x{height} RGBA"
            )

        self.width = width
        self.height = height
        self.pixels = data

    @classmethod
    def from_array(cls, array):
        """Build a buffer from an (H, W, 4), (H, W, 3) or (H, W) uint8 array."""
        array = np.asarray(array)
        if array.ndim == 2:
            array = np.stack([array] * 3, axis=-1)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise InvalidSource(f"Unsupported image array shape {array.shape}")

        if array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
            array = np.concatenate([array.astype(np.uint8), alpha], axis=2)

        height, width = array.shape[:2]
        return cls(width, height, np.ascontiguousarray(array, dtype=np.uint8).copy())

    @classmethod
    def from_bytes(cls, width, height, data):
        """Build a buffer from raw RGBA bytes."""
        return cls(width, height, np.frombuffer(bytes(data), dtype=np.uint8).copy())

    @property
    def shape(self):
        return (self.height, self.width, CHANNELS)

    @property
    def writeable(self):
        return bool(self.pixels.flags.writeable)

    def as_array(self):
        """Return an (H, W, 4) view over the pixel data."""
        return self.pixels.reshape(self.shape)

    def copy(self):
        """Return an independent, writable copy."""
        return PixelBuffer(self.width, self.height, self.pixels.copy())

    def freeze(self):
        """Return a read-only copy."""
        frozen = self.pixels.copy()
        frozen.flags.writeable = False
        return PixelBuffer(self.width, self.height, frozen)

    def to_bytes(self):
        return self.pixels.tobytes()

    def __len__(self):
        return self.pixels.size

    def __eq__(self, other):
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (self.width == other.width and self.height == other.height
                and np.array_equal(self.pixels, other.pixels))

    __hash__ = None

    def __repr__(self):
        return f"PixelBuffer({self.width}x{self.height})"
