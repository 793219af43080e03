"""
Toolbar widget with navigation and theme controls using Fluent Design.
"""

from typing import Optional
from PyQt6.QtWidgets import QWidget, QHBoxLayout
from PyQt6.QtCore import pyqtSignal
from qfluentwidgets import SubtitleLabel, TransparentToolButton, FluentIcon as FIF

THEME_TOOLTIPS = {
    "light": "Theme: Light",
    "dark": "Theme: Dark",
    "system": "Theme: System",
}


class Toolbar(QWidget):
    """Toolbar with back, refresh and theme buttons."""

    back_clicked = pyqtSignal()
    refresh_clicked = pyqtSignal()
    theme_clicked = pyqtSignal()

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._setup_ui()

    def _setup_ui(self):
        layout = QHBoxLayout(self)
        layout.setContentsMargins(5, 5, 5, 5)
        layout.setSpacing(4)

        self.back_btn = TransparentToolButton(FIF.CARE_LEFT_SOLID, self)
        self.back_btn.setFixedSize(28, 28)
        self.back_btn.setToolTip("Back to list")
        self.back_btn.clicked.connect(self.back_clicked)
        self.back_btn.setVisible(False)
        layout.addWidget(self.back_btn)

        self.title_label = SubtitleLabel("Crypto Quick")
        layout.addWidget(self.title_label)

        layout.addStretch()

        self.refresh_btn = TransparentToolButton(FIF.SYNC, self)
        self.refresh_btn.setFixedSize(28, 28)
        self.refresh_btn.setToolTip("Refresh")
        self.refresh_btn.clicked.connect(self.refresh_clicked)
        layout.addWidget(self.refresh_btn)

        self.theme_btn = TransparentToolButton(FIF.BRUSH, self)
        self.theme_btn.setFixedSize(28, 28)
        self.theme_btn.clicked.connect(self.theme_clicked)
        layout.addWidget(self.theme_btn)

    def set_back_visible(self, visible: bool):
        self.back_btn.setVisible(visible)

    def set_theme_mode(self, theme_mode: str):
        self.theme_btn.setToolTip(THEME_TOOLTIPS.get(theme_mode, theme_mode))
