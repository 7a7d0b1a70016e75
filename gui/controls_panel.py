"""
Controls panel for the Neural Canvas preview window.
"""

import logging
from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QGroupBox, QGridLayout,
                             QSlider, QLabel, QPushButton, QButtonGroup)
from PyQt6.QtCore import Qt, pyqtSignal

from core.adjustments import AdjustmentParams, PARAM_RANGES
from core.effect_filters import FilterKind

SLIDERS = [
    ('intensity', "Intensity:"),
    ('contrast', "Contrast:"),
    ('brightness', "Brightness:"),
    ('saturation', "Saturation:"),
    ('blur', "Blur:"),
]


class ControlsPanel(QWidget):
    """Filter buttons, adjustment sliders and image actions."""

    # Custom signals
    filter_selected = pyqtSignal(str)
    adjustment_changed = pyqtSignal(str, int)
    reset_requested = pyqtSignal()
    compare_toggled = pyqtSignal(bool)
    open_requested = pyqtSignal()
    export_requested = pyqtSignal()

    def __init__(self, parent=None, max_blur_radius=None):
        """Initialize the controls panel."""
        super().__init__(parent)

        self.logger = logging.getLogger('neural_canvas')
        self.max_blur_radius = min(max_blur_radius or PARAM_RANGES['blur'][1], PARAM_RANGES['blur'][1])
        self.sliders = {}
        self.value_labels = {}
        self.filter_buttons = {}

        # Set up UI
        self.init_ui()
        self.set_controls_enabled(False)

    def init_ui(self):
        """Initialize the user interface."""
        layout = QVBoxLayout(self)

        # Filters group
        filters_group = QGroupBox("Filters")
        filters_layout = QGridLayout()
        self.filter_group = QButtonGroup(self)
        self.filter_group.setExclusive(True)

        for index, kind in enumerate(FilterKind):
            button = QPushButton(kind.label)
            button.setCheckable(True)
            button.clicked.connect(lambda checked, k=kind: self.filter_selected.emit(k.value))
            self.filter_group.addButton(button)
            self.filter_buttons[kind] = button
            filters_layout.addWidget(button, index // 2, index % 2)

        self.filter_buttons[FilterKind.NONE].setChecked(True)
        filters_group.setLayout(filters_layout)

        # Adjustments group
        adjust_group = QGroupBox("Adjustments")
        adjust_layout = QGridLayout()
        defaults = AdjustmentParams()

        for row, (field, title) in enumerate(SLIDERS):
            low, high = PARAM_RANGES[field]
            if field == 'blur':
                high = self.max_blur_radius

            adjust_layout.addWidget(QLabel(title), row, 0)
            slider = QSlider(Qt.Orientation.Horizontal)
            slider.setMinimum(low)
            slider.setMaximum(high)
            slider.setValue(getattr(defaults, field))
            slider.valueChanged.connect(lambda value, f=field: self.handle_slider(f, value))
            adjust_layout.addWidget(slider, row, 1)

            value_label = QLabel(self._format_value(field, getattr(defaults, field)))
            adjust_layout.addWidget(value_label, row, 2)

            self.sliders[field] = slider
            self.value_labels[field] = value_label

        adjust_group.setLayout(adjust_layout)

        # Actions group
        actions_group = QGroupBox("Image")
        actions_layout = QGridLayout()

        self.open_button = QPushButton("Open...")
        self.open_button.clicked.connect(self.open_requested.emit)
        actions_layout.addWidget(self.open_button, 0, 0)

        self.reset_button = QPushButton("Reset")
        self.reset_button.clicked.connect(self.reset_requested.emit)
        actions_layout.addWidget(self.reset_button, 0, 1)

        self.compare_button = QPushButton("Compare")
        self.compare_button.setCheckable(True)
        self.compare_button.toggled.connect(self.compare_toggled.emit)
        actions_layout.addWidget(self.compare_button, 1, 0)

        self.export_button = QPushButton("Export...")
        self.export_button.clicked.connect(self.export_requested.emit)
        actions_layout.addWidget(self.export_button, 1, 1)

        actions_group.setLayout(actions_layout)

        layout.addWidget(filters_group)
        layout.addWidget(adjust_group)
        layout.addWidget(actions_group)
        layout.addStretch()

    def handle_slider(self, field, value):
        """Update the value label and forward the change."""
        self.value_labels[field].setText(self._format_value(field, value))
        self.adjustment_changed.emit(field, value)

    def reset_controls(self):
        """Put every control back to its default without emitting changes."""
        defaults = AdjustmentParams()
        for field, slider in self.sliders.items():
            slider.blockSignals(True)
            slider.setValue(getattr(defaults, field))
            slider.blockSignals(False)
            self.value_labels[field].setText(self._format_value(field, getattr(defaults, field)))

        self.filter_buttons[FilterKind.NONE].setChecked(True)
        self.compare_button.blockSignals(True)
        self.compare_button.setChecked(False)
        self.compare_button.blockSignals(False)

    def set_controls_enabled(self, enabled):
        """Enable everything except Open, which is always available."""
        for button in self.filter_buttons.values():
            button.setEnabled(enabled)
        for slider in self.sliders.values():
            slider.setEnabled(enabled)
        self.reset_button.setEnabled(enabled)
        self.compare_button.setEnabled(enabled)
        self.export_button.setEnabled(enabled)

    @staticmethod
    def _format_value(field, value):
        if field == 'blur':
            return f"{value}px"
        return f"{value}%"
