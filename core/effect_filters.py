"""
Stylistic effect filters.

Every filter is a pure function ``PixelBuffer x intensity -> PixelBuffer``.
Intensity is a percentage in [0, 100] and is normalised to ``t`` in [0, 1].
Arithmetic is done in float64 and narrowed back with ``clamp_to_uint8``.
Alpha is always carried over unchanged.
"""

import logging
from enum import Enum

import numpy as np
from scipy import ndimage

from core.errors import UnknownFilter
from core.pixel_buffer import PixelBuffer, clamp_to_uint8

logger = logging.getLogger('neural_canvas')

SEPIA_MATRIX = np.array([
    [0.393, 0.769, 0.189],
    [0.349, 0.686, 0.168],
    [0.272, 0.534, 0.131],
])

LUMA_WEIGHTS = (0.299, 0.587, 0.114)


class FilterKind(Enum):
    """Closed set of selectable effects. Values are the selector names."""

    NONE = 'none'
    VINTAGE = 'vintage'
    OIL_PAINT = 'oil'
    WATERCOLOR = 'watercolor'
    SKETCH = 'sketch'
    NEON = 'neon'
    DRAMATIC = 'dramatic'
    DREAMY = 'dreamy'

    @classmethod
    def from_name(cls, name):
        """Resolve a selector such as ``'vintage'`` or ``'OIL_PAINT'``."""
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            raise UnknownFilter(name)

        key = name.strip().lower()
        if key in _ALIASES:
            return _ALIASES[key]
        for kind in cls:
            if key == kind.value or key == kind.name.lower():
                return kind
        raise UnknownFilter(name)

    @property
    def label(self):
        return _LABELS[self]


_ALIASES = {
    'oilpaint': FilterKind.OIL_PAINT,
    'oil-paint': FilterKind.OIL_PAINT,
}

_LABELS = {
    FilterKind.NONE: 'Original',
    FilterKind.VINTAGE: 'Vintage',
    FilterKind.OIL_PAINT: 'Oil Paint',
    FilterKind.WATERCOLOR: 'Watercolor',
    FilterKind.SKETCH: 'Sketch',
    FilterKind.NEON: 'Neon',
    FilterKind.DRAMATIC: 'Dramatic',
    FilterKind.DREAMY: 'Dreamy',
}


def _normalise_intensity(intensity):
    return min(100, max(0, int(intensity))) / 100


def _split(buffer):
    """Return (rgb as float64, alpha as uint8) for a buffer."""
    array = buffer.as_array()
    return array[..., :3].astype(np.float64), array[..., 3]


def _merge(buffer, rgb, alpha):
    out = np.empty(buffer.shape, dtype=np.uint8)
    out[..., :3] = clamp_to_uint8(rgb)
    out[..., 3] = alpha
    return PixelBuffer(buffer.width, buffer.height, out)


def apply_none(buffer, intensity=100):
    """Identity: a byte-identical copy of the input."""
    return buffer.copy()


def apply_vintage(buffer, intensity=100):
    """Blend each pixel toward its sepia transform."""
    t = _normalise_intensity(intensity)
    rgb, alpha = _split(buffer)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    out = np.empty_like(rgb)
    for channel, (wr, wg, wb) in enumerate(SEPIA_MATRIX):
        target = wr * r + wg * g + wb * b
        orig = rgb[..., channel]
        out[..., channel] = np.minimum(255.0, orig + (target - orig) * t)

    return _merge(buffer, out, alpha)


def apply_oil_paint(buffer, intensity=100):
    """Mean of the 3x3 neighbourhood per channel.

    Border pixels average only the neighbours that exist. The radius is
    fixed at 1; ``intensity`` is accepted but does not change it.
    """
    array = buffer.as_array()
    kernel = np.ones((3, 3), dtype=np.int64)

    counts = ndimage.convolve(np.ones(array.shape[:2], dtype=np.int64), kernel,
                              mode='constant', cval=0)
    out = np.empty(array.shape[:2] + (3,), dtype=np.float64)
    for channel in range(3):
        sums = ndimage.convolve(array[..., channel].astype(np.int64), kernel,
                                mode='constant', cval=0)
        out[..., channel] = sums / counts

    return _merge(buffer, out, array[..., 3])


def apply_watercolor(buffer, intensity=100):
    """Soften colours toward white by up to 10%."""
    t = _normalise_intensity(intensity)
    rgb, alpha = _split(buffer)
    return _merge(buffer, rgb + (255.0 - rgb) * 0.1 * t, alpha)


def apply_sketch(buffer, intensity=100):
    """Pencil sketch from a 4-neighbour luma gradient.

    The luma plane is stored as 8-bit values before the gradient is taken.
    Only interior pixels are rewritten; the one pixel border keeps its
    original colour.
    """
    t = _normalise_intensity(intensity)
    array = buffer.as_array()
    out = array.copy()

    height, width = array.shape[:2]
    if width < 3 or height < 3:
        return PixelBuffer(buffer.width, buffer.height, out)

    wr, wg, wb = LUMA_WEIGHTS
    rgb = array[..., :3].astype(np.float64)
    luma = rgb[..., 0] * wr + rgb[..., 1] * wg + rgb[..., 2] * wb
    gray = clamp_to_uint8(luma).astype(np.float64)

    center = gray[1:-1, 1:-1]
    edge = (np.abs(center - gray[1:-1, :-2]) + np.abs(center - gray[1:-1, 2:])
            + np.abs(center - gray[:-2, 1:-1]) + np.abs(center - gray[2:, 1:-1]))
    edge_value = np.minimum(255.0, edge * t)

    sketch = clamp_to_uint8(255.0 - edge_value)
    for channel in range(3):
        out[1:-1, 1:-1, channel] = sketch

    return PixelBuffer(buffer.width, buffer.height, out)


def apply_neon(buffer, intensity=100):
    """Multiplicative boost of up to 50%."""
    t = _normalise_intensity(intensity)
    rgb, alpha = _split(buffer)
    return _merge(buffer, np.minimum(255.0, rgb * (1 + t * 0.5)), alpha)


def apply_dramatic(buffer, intensity=100):
    """Contrast stretch around mid-gray."""
    t = _normalise_intensity(intensity)
    rgb, alpha = _split(buffer)
    return _merge(buffer, (rgb - 128.0) * (1 + t) + 128.0, alpha)


def apply_dreamy(buffer, intensity=100):
    """Soft glow toward white by up to 20%."""
    t = _normalise_intensity(intensity)
    rgb, alpha = _split(buffer)
    return _merge(buffer, rgb + (255.0 - rgb) * 0.2 * t, alpha)


EFFECTS = {
    FilterKind.NONE: apply_none,
    FilterKind.VINTAGE: apply_vintage,
    FilterKind.OIL_PAINT: apply_oil_paint,
    FilterKind.WATERCOLOR: apply_watercolor,
    FilterKind.SKETCH: apply_sketch,
    FilterKind.NEON: apply_neon,
    FilterKind.DRAMATIC: apply_dramatic,
    FilterKind.DREAMY: apply_dreamy,
}


def apply_effect(kind, buffer, intensity=100):
    """Apply the effect selected by ``kind`` (a FilterKind or selector name)."""
    kind = FilterKind.from_name(kind)
    logger.debug(f"Applying {kind.value} filter at intensity {intensity}")
    return EFFECTS[kind](buffer, intensity)
