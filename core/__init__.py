"""
Core functionality for Neural Canvas.

This package contains the pixel buffer, the effect filters, the adjustment
pipeline and the engine that composes them, plus the image loading and
export collaborators.
"""

__all__ = ['pixel_buffer', 'errors', 'effect_filters', 'adjustments',
           'original_state', 'filter_engine', 'image_loader', 'export_manager']
