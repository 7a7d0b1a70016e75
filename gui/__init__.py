"""
GUI components for Neural Canvas.

This package contains the interactive preview window and its control panel.
"""

__all__ = ['main_window', 'controls_panel']
