"""
Coin card widget for the list page using Fluent Design.
"""

from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QColor, QMouseEvent
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QVBoxLayout, QWidget
from qfluentwidgets import CaptionLabel, CardWidget, StrongBodyLabel, TransparentToolButton, FluentIcon as FIF

from core.models import Coin
from core.utils import format_change, format_market_cap, format_price
from ui.styles.theme import change_color, colors
from ui.widgets.remote_image import RemoteImageLabel


def favorite_icon(is_favorite: bool):
    if is_favorite:
        return FIF.HEART.icon(color=QColor(colors()["favorite"]))
    return FIF.HEART


class CoinCard(CardWidget):
    """Card showing one coin's rank, price, change and market cap."""

    open_requested = pyqtSignal(str)  # Emits coin id
    favorite_toggled = pyqtSignal(str)  # Emits coin id

    def __init__(self, coin: Coin, rank: int, is_favorite: bool, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.coin = coin
        self.rank = rank
        self._setup_ui()
        self.set_favorite(is_favorite)

    def _setup_ui(self):
        self.setBorderRadius(8)
        self.setCursor(Qt.CursorShape.PointingHandCursor)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(12, 10, 12, 10)
        layout.setSpacing(10)

        self.rank_label = CaptionLabel(f"#{self.rank}")
        self.rank_label.setFixedWidth(28)
        layout.addWidget(self.rank_label)

        self.icon_label = RemoteImageLabel(32, self)
        self.icon_label.load(self.coin.image)
        layout.addWidget(self.icon_label)

        name_layout = QVBoxLayout()
        name_layout.setSpacing(2)
        self.name_label = StrongBodyLabel(self.coin.name)
        self.symbol_label = CaptionLabel(self.coin.symbol)
        name_layout.addWidget(self.name_label)
        name_layout.addWidget(self.symbol_label)
        layout.addLayout(name_layout, 1)

        price_layout = QVBoxLayout()
        price_layout.setSpacing(2)
        self.price_label = StrongBodyLabel(format_price(self.coin.current_price))
        self.price_label.setAlignment(Qt.AlignmentFlag.AlignRight)

        change = self.coin.price_change_percentage_24h
        self.change_label = QLabel(format_change(change))
        self.change_label.setAlignment(Qt.AlignmentFlag.AlignRight)
        self.change_label.setStyleSheet(f"font-size: 13px; color: {change_color(change)};")

        self.market_cap_label = CaptionLabel(f"MCap {format_market_cap(self.coin.market_cap)}")
        self.market_cap_label.setAlignment(Qt.AlignmentFlag.AlignRight)

        price_layout.addWidget(self.price_label)
        price_layout.addWidget(self.change_label)
        price_layout.addWidget(self.market_cap_label)
        layout.addLayout(price_layout)

        self.favorite_btn = TransparentToolButton(FIF.HEART, self)
        self.favorite_btn.setFixedSize(28, 28)
        self.favorite_btn.clicked.connect(lambda: self.favorite_toggled.emit(self.coin.id))
        layout.addWidget(self.favorite_btn)

    def set_favorite(self, is_favorite: bool):
        self.favorite_btn.setIcon(favorite_icon(is_favorite))
        self.favorite_btn.setToolTip(
            "Remove from watchlist" if is_favorite else "Add to watchlist"
        )

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.LeftButton:
            self.open_requested.emit(self.coin.id)
        super().mouseReleaseEvent(event)
