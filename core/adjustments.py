"""
Tonal adjustments and box blur applied after the effect filter.

Order is fixed: brightness, contrast, saturation, then blur. Brightness is
clamped on its own; contrast is not clamped before saturation is computed
from the post-contrast values; the final tonal value is clamped once.
"""

import logging
import math
from dataclasses import dataclass, fields, replace
from numbers import Real

import numpy as np
from scipy import ndimage

from core.errors import ParamOutOfRange
from core.pixel_buffer import PixelBuffer, clamp_to_uint8

logger = logging.getLogger('neural_canvas')

MAX_BLUR_RADIUS = 20

PARAM_RANGES = {
    'intensity': (0, 100),
    'contrast': (-100, 100),
    'brightness': (-100, 100),
    'saturation': (-100, 100),
    'blur': (0, MAX_BLUR_RADIUS),
}


@dataclass(frozen=True)
class AdjustmentParams:
    """Slider values driving a pipeline run.

    ``intensity`` feeds the effect filter; the other four feed the
    adjustment pass. ``blur`` is a pixel radius.
    """

    intensity: int = 100
    contrast: int = 0
    brightness: int = 0
    saturation: int = 0
    blur: int = 0

    def with_value(self, field, value):
        """Return a copy with ``field`` set to ``value`` clamped to its range."""
        if field not in PARAM_RANGES:
            raise ParamOutOfRange(f"Unknown adjustment {field!r}; expected one of {sorted(PARAM_RANGES)}")
        if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value):
            raise ParamOutOfRange(f"Adjustment {field!r} needs a finite number, got {value!r}")
        if field == 'blur' and value < 0:
            raise ParamOutOfRange(f"Blur radius cannot be negative, got {value}")

        low, high = PARAM_RANGES[field]
        clamped = min(high, max(low, int(round(value))))
        if clamped != value:
            logger.debug(f"Clamped {field} from {value} to {clamped}")
        return replace(self, **{field: clamped})

    def clamped(self):
        """Return a copy with every field forced into its declared range."""
        values = {}
        for f in fields(self):
            low, high = PARAM_RANGES[f.name]
            values[f.name] = min(high, max(low, int(getattr(self, f.name))))
        return AdjustmentParams(**values)

    @property
    def is_identity(self):
        """True when the adjustment pass leaves every pixel unchanged."""
        return self.contrast == 0 and self.brightness == 0 and self.saturation == 0 and self.blur == 0

    def as_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}


def apply_tonal(buffer, brightness=0, contrast=0, saturation=0):
    """Brightness, contrast and saturation in a single float pass."""
    array = buffer.as_array()
    rgb = array[..., :3].astype(np.float64)

    c = contrast / 100 + 1
    s = saturation / 100 + 1

    rgb = np.clip(rgb + brightness, 0.0, 255.0)
    rgb = ((rgb / 255 - 0.5) * c + 0.5) * 255

    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    gray = (0.299 * r + 0.587 * g + 0.114 * b)[..., np.newaxis]
    rgb = gray + (rgb - gray) * s

    out = np.empty(buffer.shape, dtype=np.uint8)
    out[..., :3] = clamp_to_uint8(rgb)
    out[..., 3] = array[..., 3]
    return PixelBuffer(buffer.width, buffer.height, out)


def box_blur(buffer, radius):
    """Square box blur over R, G, B and A.

    Only pixels whose whole ``(2r+1)x(2r+1)`` window lies inside the image
    are recomputed; pixels within ``radius`` of any edge are copied as-is.
    """
    radius = int(radius)
    if radius < 0:
        raise ParamOutOfRange(f"Blur radius cannot be negative, got {radius}")

    array = buffer.as_array()
    out = array.copy()
    height, width = array.shape[:2]
    if radius == 0 or width <= 2 * radius or height <= 2 * radius:
        return PixelBuffer(buffer.width, buffer.height, out)

    side = 2 * radius + 1
    count = side * side
    inner = (slice(radius, height - radius), slice(radius, width - radius))

    for channel in range(4):
        sums = _window_sums(array[..., channel], side)
        out[inner + (channel,)] = clamp_to_uint8(sums / count)

    return PixelBuffer(buffer.width, buffer.height, out)


def _window_sums(plane, side):
    """Exact sums of every fully in-bounds ``side x side`` window.

    The square kernel is applied as two 1-D passes in integer arithmetic.
    Result shape is ``(H - side + 1, W - side + 1)``.
    """
    height, width = plane.shape
    radius = side // 2
    weights = np.ones(side, dtype=np.int64)
    sums = ndimage.convolve1d(plane.astype(np.int64), weights, axis=0, mode='constant', cval=0)
    sums = ndimage.convolve1d(sums, weights, axis=1, mode='constant', cval=0)
    return sums[radius:height - radius, radius:width - radius]


def apply_adjustments(buffer, params):
    """Run the full adjustment pass for ``params`` over ``buffer``."""
    params = params.clamped()
    result = apply_tonal(buffer, params.brightness, params.contrast, params.saturation)
    if params.blur > 0:
        result = box_blur(result, params.blur)
    return result
