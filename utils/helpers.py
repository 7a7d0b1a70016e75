"""
Helper functions for Neural Canvas.

This module contains various utility functions used across the application.
"""

import os
import time
import functools
import logging
import platform
from pathlib import Path


def get_application_dir():
    """Get the application data directory based on the platform."""
    if platform.system() == 'Windows':
        app_dir = Path(os.environ.get('APPDATA', os.path.expanduser('~'))) / 'NeuralCanvas'
    elif platform.system() == 'Darwin':  # macOS
        app_dir = Path(os.path.expanduser('~')) / 'Library' / 'Application Support' / 'NeuralCanvas'
    else:  # Linux and others
        app_dir = Path(os.path.expanduser('~')) / '.neural_canvas'

    # Create directory if it doesn't exist
    app_dir.mkdir(parents=True, exist_ok=True)

    return app_dir


def ensure_directory(directory):
    """Ensure a directory exists, create it if it doesn't."""
    if directory and not os.path.exists(directory):
        os.makedirs(directory)
    return directory


def time_function(func):
    """Decorator that logs the execution time of a function at DEBUG level."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = time.perf_counter() - start_time
        logging.getLogger('neural_canvas').debug(f"{func.__name__} took {elapsed:.4f} seconds")
        return result

    return wrapper
