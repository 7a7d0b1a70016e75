"""
Main window for the Neural Canvas interactive preview.
"""

import logging

import pyqtgraph as pg

from PyQt6.QtWidgets import (QMainWindow, QFileDialog, QMessageBox,
                             QStatusBar, QDockWidget, QWidget, QVBoxLayout)
from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QAction, QKeySequence

from core.errors import NeuralCanvasError
from core.export_manager import ExportManager
from core.filter_engine import FilterEngine
from core.image_loader import ImageLoader, IMAGE_EXTENSIONS

from gui.controls_panel import ControlsPanel


class MainWindow(QMainWindow):
    """Main application window."""

    # Emitted from the engine's worker thread; delivered on the GUI thread
    result_ready = pyqtSignal(object)

    def __init__(self, config, logger=None):
        """Initialize main window."""
        super().__init__()

        self.logger = logger or logging.getLogger('neural_canvas')
        self.config = config

        # Initialize core components
        self.image_loader = ImageLoader(
            self.logger,
            max_width=self.config['canvas']['max_width'],
            max_height=self.config['canvas']['max_height'],
        )
        self.export_manager = ExportManager(
            self.logger,
            default_directory=self.config['export']['default_directory'],
            default_filename=self.config['export']['default_filename'],
        )
        self.engine = FilterEngine(
            debounce_interval=self.config['engine']['debounce_ms'] / 1000.0,
            on_result=self.result_ready.emit,
            logger=self.logger,
        )
        self.comparing = False

        # Set up UI
        self.init_ui()

        # Connect signals
        self.connect_signals()

        self.logger.info("Main window initialized")

    def init_ui(self):
        """Initialize the user interface."""
        self.setWindowTitle("Neural Canvas")
        self.resize(*self.config['appearance']['window_size'])
        self.move(*self.config['appearance']['window_position'])

        # Central image view
        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        self.view = pg.ImageView()
        self.view.ui.roiBtn.hide()
        self.view.ui.menuBtn.hide()
        self.view.ui.histogram.hide()
        layout.addWidget(self.view)
        self.setCentralWidget(central)

        # Controls dock
        self.controls_dock = QDockWidget("Controls", self)
        self.controls_dock.setAllowedAreas(Qt.DockWidgetArea.LeftDockWidgetArea |
                                           Qt.DockWidgetArea.RightDockWidgetArea)
        self.controls_panel = ControlsPanel(self, max_blur_radius=self.config['engine']['max_blur_radius'])
        self.controls_dock.setWidget(self.controls_panel)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self.controls_dock)

        self.create_menu()

        self.statusBar = QStatusBar(self)
        self.setStatusBar(self.statusBar)
        self.statusBar.showMessage("Open an image to get started")

    def create_menu(self):
        """Create the File menu."""
        file_menu = self.menuBar().addMenu("&File")

        open_action = QAction("&Open Image...", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self.open_image_dialog)
        file_menu.addAction(open_action)

        export_action = QAction("&Export...", self)
        export_action.setShortcut(QKeySequence.StandardKey.Save)
        export_action.triggered.connect(self.export_image_dialog)
        file_menu.addAction(export_action)

        file_menu.addSeparator()
        quit_action = QAction("&Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

    def connect_signals(self):
        """Wire controls to the engine."""
        self.result_ready.connect(self.display_result)
        self.controls_panel.filter_selected.connect(self.handle_filter_selected)
        self.controls_panel.adjustment_changed.connect(self.handle_adjustment_changed)
        self.controls_panel.reset_requested.connect(self.reset_image)
        self.controls_panel.compare_toggled.connect(self.toggle_comparison)
        self.controls_panel.open_requested.connect(self.open_image_dialog)
        self.controls_panel.export_requested.connect(self.export_image_dialog)

    # Image loading and export

    def load_image(self, file_path):
        """Load ``file_path`` and make it the new original."""
        buffer = self.image_loader.load(file_path)
        if buffer is None:
            QMessageBox.warning(self, "Open Image", f"Could not load {file_path}.\nPlease select a valid image file.")
            return False

        self.controls_panel.reset_controls()
        self.comparing = False
        self.engine.set_source(buffer)
        self.controls_panel.set_controls_enabled(True)
        self.statusBar.showMessage(f"Loaded {file_path} ({buffer.width}x{buffer.height})")
        return True

    def open_image_dialog(self):
        patterns = ' '.join(f"*{ext}" for ext in IMAGE_EXTENSIONS)
        file_path, _ = QFileDialog.getOpenFileName(self, "Open Image", "", f"Images ({patterns})")
        if file_path:
            self.load_image(file_path)

    def export_image_dialog(self):
        result = self.engine.current_result
        if result is None:
            return

        file_path, _ = QFileDialog.getSaveFileName(
            self, "Export Image", self.export_manager.default_path(), "PNG Image (*.png);;JPEG Image (*.jpg)"
        )
        if not file_path:
            return

        if self.export_manager.save_image(result.buffer, file_path):
            self.statusBar.showMessage(f"Exported to {file_path}")
        else:
            QMessageBox.critical(self, "Export", f"Could not export to {file_path}")

    # Engine interaction

    def handle_filter_selected(self, name):
        self._run_engine_call(self.engine.select_filter, name)

    def handle_adjustment_changed(self, field, value):
        self._run_engine_call(self.engine.set_adjustment, field, value)

    def _run_engine_call(self, method, *args):
        if not self.engine.has_source:
            return
        try:
            method(*args)
        except NeuralCanvasError as e:
            self.logger.error(f"Engine rejected request: {e}")
            QMessageBox.warning(self, "Neural Canvas", str(e))
            return
        self.statusBar.showMessage("Processing...")

    def reset_image(self):
        if not self.engine.has_source:
            return
        self.controls_panel.reset_controls()
        self.comparing = False
        self.engine.reset()

    def toggle_comparison(self, enabled):
        self.comparing = enabled
        if self.engine.current_result is not None:
            self.display_result(self.engine.current_result)

    def display_result(self, result):
        """Show a finished pipeline result, or the before/after pair."""
        if self.comparing:
            before, after = self.engine.compare()
            gap = self.config['export']['comparison_gap']
            image = self.export_manager.build_comparison(before, after, gap).as_array()
        else:
            image = result.buffer.as_array()

        self.view.setImage(image, autoLevels=False, levels=(0, 255), autoRange=False)
        self.view.autoRange()

        params = result.params
        self.statusBar.showMessage(
            f"{result.filter_kind.label} | intensity {params.intensity}% | contrast {params.contrast}% | "
            f"brightness {params.brightness} | saturation {params.saturation}% | blur {params.blur}px"
        )

    def closeEvent(self, event):
        """Stop pending work and remember the window geometry."""
        self.engine.close()
        self.config['appearance']['window_size'] = [self.width(), self.height()]
        self.config['appearance']['window_position'] = [self.x(), self.y()]
        self.logger.info("Main window closed")
        super().closeEvent(event)
