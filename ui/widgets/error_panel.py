"""
Error panel with rate-limit countdown, retry and back-to-list actions.
"""

from typing import Optional

from PyQt6.QtCore import QTimer, pyqtSignal
from PyQt6.QtWidgets import QHBoxLayout, QVBoxLayout, QWidget
from qfluentwidgets import BodyLabel, CardWidget, PushButton, StrongBodyLabel, FluentIcon as FIF

from core.errors import CoinGeckoError
from core.utils import format_time_until_reset

RATE_LIMIT_TITLE = "API Rate Limit Exceeded"
WAIT_MESSAGE = "Please wait a moment before trying again."


class ErrorPanel(CardWidget):
    retry_clicked = pyqtSignal()
    back_clicked = pyqtSignal()

    def __init__(self, title: str = "Error", show_back: bool = False, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._default_title = title
        self._reset_at: Optional[float] = None

        self._countdown_timer = QTimer(self)
        self._countdown_timer.setInterval(1000)
        self._countdown_timer.timeout.connect(self._update_countdown)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 14, 16, 14)
        layout.setSpacing(8)

        self.title_label = StrongBodyLabel(title)
        self.message_label = BodyLabel("")
        self.message_label.setWordWrap(True)
        self.countdown_label = BodyLabel("")
        layout.addWidget(self.title_label)
        layout.addWidget(self.message_label)
        layout.addWidget(self.countdown_label)

        buttons = QHBoxLayout()
        self.retry_btn = PushButton(FIF.SYNC, "Retry", self)
        self.retry_btn.clicked.connect(self.retry_clicked)
        buttons.addWidget(self.retry_btn)

        self.back_btn = PushButton(FIF.CARE_LEFT_SOLID, "Back to Coin List", self)
        self.back_btn.clicked.connect(self.back_clicked)
        self.back_btn.setVisible(show_back)
        buttons.addWidget(self.back_btn)
        buttons.addStretch()
        layout.addLayout(buttons)

    def show_error(self, error: CoinGeckoError, message: Optional[str] = None):
        """Display an error; rate-limit errors get a live countdown when the reset time is known."""
        self.title_label.setText(RATE_LIMIT_TITLE if error.is_rate_limited else self._default_title)
        self.message_label.setText(message or error.message)

        self._reset_at = error.reset_at if error.is_rate_limited else None
        if self._reset_at:
            self._update_countdown()
            self._countdown_timer.start()
        else:
            self._countdown_timer.stop()
            self.countdown_label.setText(WAIT_MESSAGE if error.is_rate_limited else "")
            self.countdown_label.setVisible(error.is_rate_limited)

        self.show()

    def clear(self):
        self._countdown_timer.stop()
        self._reset_at = None
        self.hide()

    def _update_countdown(self):
        remaining = format_time_until_reset(self._reset_at)
        self.countdown_label.setVisible(True)
        if remaining:
            self.countdown_label.setText(f"You can try again {remaining}.")
        else:
            self.countdown_label.setText(WAIT_MESSAGE)

        if remaining == "now":
            self._countdown_timer.stop()
