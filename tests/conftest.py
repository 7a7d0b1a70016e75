import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]

# Make the flat ``core``/``utils`` packages importable without installing.
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.pixel_buffer import PixelBuffer  # noqa: E402


def make_buffer(pixels):
    """Build a buffer from a nested list of rows of (r, g, b, a) tuples."""
    return PixelBuffer.from_array(np.array(pixels, dtype=np.uint8))


@pytest.fixture
def quad_buffer() -> PixelBuffer:
    """2x2 red, green / blue, white."""
    return make_buffer([
        [(255, 0, 0, 255), (0, 255, 0, 255)],
        [(0, 0, 255, 255), (255, 255, 255, 255)],
    ])


@pytest.fixture
def random_buffer() -> PixelBuffer:
    rng = np.random.default_rng(1234)
    data = rng.integers(0, 256, size=(9, 11, 4), dtype=np.uint8)
    return PixelBuffer.from_array(data)
