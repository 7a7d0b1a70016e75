"""
Error types raised by the filter pipeline.
"""


class NeuralCanvasError(Exception):
    """Base class for pipeline errors."""


class InvalidSource(NeuralCanvasError, ValueError):
    """Raised when a pixel buffer has bad dimensions or length, or no source is loaded."""


class UnknownFilter(NeuralCanvasError, ValueError):
    """Raised when a filter selector is not one of the known filter kinds."""

    def __init__(self, name):
        super().__init__(f"Unknown filter: {name!r}")
        self.name = name


class ParamOutOfRange(NeuralCanvasError, ValueError):
    """Raised for adjustment values that are outside the caller contract."""
