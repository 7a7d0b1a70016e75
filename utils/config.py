"""
Configuration management for the application.
"""

import copy
import json
import logging
from pathlib import Path

from utils.helpers import get_application_dir

# Default configuration
DEFAULT_CONFIG = {
    "appearance": {
        "window_size": [1100, 760],
        "window_position": [100, 100]
    },
    "engine": {
        "debounce_ms": 100,
        "max_blur_radius": 20
    },
    "canvas": {
        "max_width": 800,
        "max_height": 600
    },
    "export": {
        "default_directory": "",
        "default_filename": "neural-canvas-art.png",
        "comparison_gap": 8
    },
    "logging": {
        "debug": False,
        "log_to_file": True
    }
}


def get_config_path(custom_path=None):
    """Get the path to the configuration file."""
    if custom_path:
        return Path(custom_path)

    return get_application_dir() / "config.json"


def load_config(custom_path=None):
    """Load configuration from file or return default if file doesn't exist."""
    logger = logging.getLogger('neural_canvas')
    config_path = get_config_path(custom_path)

    # Start with default configuration
    config = copy.deepcopy(DEFAULT_CONFIG)

    # Try to load from file
    if config_path.exists():
        try:
            with open(config_path, 'r') as f:
                loaded_config = json.load(f)

            # Update default config with loaded values
            _recursive_update(config, loaded_config)
            logger.info(f"Configuration loaded from {config_path}")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading configuration: {e}")
            logger.info("Using default configuration")
    else:
        logger.info(f"Configuration file not found at {config_path}")
        logger.info("Using default configuration")

    return config


def save_config(config, custom_path=None):
    """Save configuration to file."""
    logger = logging.getLogger('neural_canvas')
    config_path = get_config_path(custom_path)

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=4)
        logger.info(f"Configuration saved to {config_path}")
        return True
    except OSError as e:
        logger.error(f"Error saving configuration: {e}")
        return False


def _recursive_update(d, u):
    """Recursively update a nested dictionary."""
    for k, v in u.items():
        if isinstance(v, dict) and k in d and isinstance(d[k], dict):
            _recursive_update(d[k], v)
        else:
            d[k] = v


def reset_to_defaults(custom_path=None):
    """Reset configuration to defaults."""
    logger = logging.getLogger('neural_canvas')
    config_path = get_config_path(custom_path)

    try:
        with open(config_path, 'w') as f:
            json.dump(DEFAULT_CONFIG, f, indent=4)
        logger.info("Configuration reset to defaults")
    except OSError as e:
        logger.error(f"Error resetting configuration: {e}")
    return copy.deepcopy(DEFAULT_CONFIG)
