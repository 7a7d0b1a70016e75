"""
Logging configuration for the application.
"""

import sys
import logging
import logging.handlers
import traceback
from datetime import datetime
from pathlib import Path

from utils.helpers import get_application_dir

LOGGER_NAME = 'neural_canvas'


class LogHandler:
    """Handler for application logs with console and file outputs."""

    def __init__(self, debug=False, log_to_file=True, log_dir=None):
        self.logger = logging.getLogger(LOGGER_NAME)
        self.debug = debug
        self.log_to_file = log_to_file
        self.log_dir = log_dir
        self.log_file = None
        self.setup_logger()

        # Register global exception handler
        sys.excepthook = self.handle_exception

    def setup_logger(self):
        """Set up logger with console and, optionally, file handlers."""
        # Clear any existing handlers
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        # Set logging level based on debug mode
        level = logging.DEBUG if self.debug else logging.INFO
        self.logger.setLevel(level)

        # Create console handler
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        console_handler.setLevel(level)
        self.logger.addHandler(console_handler)

        if self.log_to_file:
            log_dir = self._get_log_directory()
            self.log_file = log_dir / f"neural_canvas_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

            file_handler = logging.handlers.RotatingFileHandler(
                self.log_file, maxBytes=10*1024*1024, backupCount=5
            )
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(threadName)s - %(filename)s:%(lineno)d - %(message)s'
            ))
            file_handler.setLevel(level)
            self.logger.addHandler(file_handler)

        self.logger.info(f"Logging initialized. Debug mode: {self.debug}")
        if self.log_file:
            self.logger.info(f"Log file: {self.log_file}")

    def _get_log_directory(self):
        """Create and return the log directory."""
        log_dir = Path(self.log_dir) if self.log_dir else get_application_dir() / 'logs'
        log_dir.mkdir(parents=True, exist_ok=True)
        return log_dir

    def handle_exception(self, exc_type, exc_value, exc_traceback):
        """Handle uncaught exceptions."""
        if issubclass(exc_type, KeyboardInterrupt):
            # Don't log keyboard interrupt
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        tb_text = ''.join(traceback.format_exception(exc_type, exc_value, exc_traceback))
        self.logger.critical(f"Unhandled exception:\n{tb_text}")

        print(f"An unexpected error occurred: {exc_value}", file=sys.stderr)


def setup_logger(debug=False, log_to_file=True, log_dir=None):
    """Initialize and return the application logger."""
    handler = LogHandler(debug, log_to_file=log_to_file, log_dir=log_dir)
    return handler.logger


class LogCapture:
    """Context manager to capture logs during a specific operation."""

    def __init__(self, logger, operation_name):
        self.logger = logger
        self.operation_name = operation_name
        self.log_records = []

    def __enter__(self):
        self.handler = LogCaptureHandler(self.log_records)
        self.logger.addHandler(self.handler)
        self.logger.info(f"Starting: {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.logger.error(f"Error in {self.operation_name}: {exc_val}")
        else:
            self.logger.info(f"Completed: {self.operation_name}")
        self.logger.removeHandler(self.handler)
        return False

    def get_logs(self):
        """Return captured log messages."""
        return [record.getMessage() for record in self.log_records]


class LogCaptureHandler(logging.Handler):
    """Handler to capture log records in a list."""

    def __init__(self, records):
        super().__init__(level=logging.DEBUG)
        self.records = records

    def emit(self, record):
        self.records.append(record)
