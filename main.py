#!/usr/bin/env python3
"""
Main entry point for Neural Canvas.

Renders a filtered image from the command line, or opens the interactive
preview window.
"""

import sys
import argparse
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parent
sys.path.insert(0, str(project_root))

from core.adjustments import PARAM_RANGES
from core.effect_filters import FilterKind
from core.errors import NeuralCanvasError
from core.export_manager import ExportManager
from core.filter_engine import FilterEngine
from core.image_loader import ImageLoader
from utils.logger import setup_logger, LogCapture
from utils.config import load_config, save_config

ADJUSTMENT_FIELDS = ['intensity', 'contrast', 'brightness', 'saturation', 'blur']


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Neural Canvas image filters')

    parser.add_argument('input', nargs='?', type=str, help='Path to the source image')
    parser.add_argument('--output', '-o', type=str, help='Write the filtered image here instead of opening the preview')
    parser.add_argument('--filter', '-f', type=str, default='none',
                        help=f"Effect to apply: {', '.join(kind.value for kind in FilterKind)}")
    for field in ADJUSTMENT_FIELDS:
        low, high = PARAM_RANGES[field]
        parser.add_argument(f'--{field}', type=int, default=None, help=f'{field.capitalize()} ({low} to {high})')
    parser.add_argument('--compare', type=str, help='Also write a side-by-side before/after image')
    parser.add_argument('--gui', action='store_true', help='Open the interactive preview window')
    parser.add_argument('--debug', '-d', action='store_true', help='Enable debug mode')
    parser.add_argument('--config', '-c', type=str, help='Path to configuration file')

    return parser.parse_args(argv)


def render(args, config, logger):
    """Run the pipeline once and export the result. Returns an exit code."""
    loader = ImageLoader(logger, max_width=config['canvas']['max_width'],
                         max_height=config['canvas']['max_height'])
    exporter = ExportManager(logger, default_directory=config['export']['default_directory'],
                             default_filename=config['export']['default_filename'])
    engine = FilterEngine(debounce_interval=config['engine']['debounce_ms'] / 1000.0, logger=logger)

    with LogCapture(logger, f"render {args.input}"):
        buffer = loader.load(args.input)
        if buffer is None:
            return 1

        try:
            engine.set_source(buffer)
            engine.select_filter(args.filter)
            for field in ADJUSTMENT_FIELDS:
                value = getattr(args, field)
                if value is not None:
                    engine.set_adjustment(field, value)
            result = engine.recompute()
        except NeuralCanvasError as e:
            logger.error(f"Cannot render: {e}")
            return 1
        finally:
            engine.close()

        if not exporter.save_image(result.buffer, args.output):
            return 1
        if args.compare:
            before, after = engine.compare()
            if not exporter.save_comparison(before, after, args.compare, config['export']['comparison_gap']):
                return 1

    return 0


def run_gui(args, config, logger):
    """Open the preview window and run the Qt event loop."""
    from PyQt6.QtWidgets import QApplication
    import pyqtgraph as pg
    from gui.main_window import MainWindow

    app = QApplication(sys.argv)
    app.setApplicationName("Neural Canvas")

    # Set pyqtgraph configuration
    pg.setConfigOptions(imageAxisOrder='row-major', antialias=True)

    window = MainWindow(config, logger)
    window.show()

    if args.input:
        window.load_image(args.input)

    exit_code = app.exec()

    # Save configuration on exit
    save_config(config, args.config)
    return exit_code


def main(argv=None):
    """Application entry point."""
    args = parse_arguments(argv)

    # Load configuration
    config = load_config(args.config)

    # Setup logging
    debug_mode = args.debug or config['logging']['debug']
    logger = setup_logger(debug_mode, log_to_file=config['logging']['log_to_file'])
    logger.info("Starting Neural Canvas")

    if args.output and not args.gui:
        if not args.input:
            logger.error("An input image is required with --output")
            return 2
        exit_code = render(args, config, logger)
    else:
        exit_code = run_gui(args, config, logger)

    logger.info(f"Application exiting with code {exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
