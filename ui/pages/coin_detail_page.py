"""
Detail page for a single coin.
"""

import re
from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QGridLayout, QHBoxLayout, QLabel, QVBoxLayout, QWidget
from qfluentwidgets import (
    BodyLabel, CaptionLabel, CardWidget, PushButton, ScrollArea,
    StrongBodyLabel, SubtitleLabel, TitleLabel, FluentIcon as FIF
)

from core.market_data_controller import CoinDetailController, DetailState
from core.models import AdjacentCoins, RankedCoin
from core.storage import StorageChange
from core.utils import format_change, format_market_cap, format_price
from core.watchlist import WatchlistStore
from ui.styles.theme import change_color
from ui.widgets.coin_card import favorite_icon
from ui.widgets.error_panel import ErrorPanel
from ui.widgets.remote_image import RemoteImageLabel

_TAG = re.compile(r"<[^>]+>")


def plain_description(text: str) -> str:
    """CoinGecko descriptions contain HTML links; keep only their text."""
    return _TAG.sub("", text).strip()


class CoinDetailPage(QWidget):
    back_requested = pyqtSignal()
    coin_selected = pyqtSignal(str)

    def __init__(
        self,
        controller: CoinDetailController,
        watchlist: WatchlistStore,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self._controller = controller
        self._watchlist = watchlist
        self._coin_id = ""
        self._adjacent = AdjacentCoins()
        self._setup_ui()

        self._controller.loading_started.connect(self._on_loading)
        self._controller.detail_changed.connect(self.render)
        self._controller.adjacent_changed.connect(self._on_adjacent_changed)
        self._unsubscribe = self._watchlist.subscribe(self._on_watchlist_changed)

    def _setup_ui(self):
        outer = QVBoxLayout(self)
        outer.setContentsMargins(10, 0, 10, 8)

        self.scroll_area = ScrollArea(self)
        self.scroll_area.setWidgetResizable(True)
        self.scroll_area.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.scroll_area.setStyleSheet("QScrollArea { border: none; background: transparent; }")
        outer.addWidget(self.scroll_area)

        content = QWidget()
        content.setStyleSheet("background: transparent;")
        layout = QVBoxLayout(content)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(10)
        self.scroll_area.setWidget(content)

        self.cached_notice = QLabel(
            "Showing cached data. Live data could not be loaded; values may be out of date."
        )
        self.cached_notice.setObjectName("cachedNotice")
        self.cached_notice.setWordWrap(True)
        self.cached_notice.hide()
        layout.addWidget(self.cached_notice)

        self.status_label = BodyLabel("")
        self.status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.status_label.setWordWrap(True)
        self.status_label.hide()
        layout.addWidget(self.status_label)

        self.error_panel = ErrorPanel("Error Loading Coin Details", show_back=True, parent=self)
        self.error_panel.retry_clicked.connect(self.reload)
        self.error_panel.back_clicked.connect(self.back_requested)
        self.error_panel.hide()
        layout.addWidget(self.error_panel)

        self.detail_card = CardWidget(self)
        card_layout = QVBoxLayout(self.detail_card)
        card_layout.setContentsMargins(16, 14, 16, 14)
        card_layout.setSpacing(10)

        header = QHBoxLayout()
        self.image_label = RemoteImageLabel(48, self.detail_card)
        header.addWidget(self.image_label)
        names = QVBoxLayout()
        self.name_label = TitleLabel("")
        self.symbol_label = CaptionLabel("")
        names.addWidget(self.name_label)
        names.addWidget(self.symbol_label)
        header.addLayout(names, 1)
        self.favorite_btn = PushButton(FIF.HEART, "Add to watchlist", self.detail_card)
        self.favorite_btn.clicked.connect(self._toggle_favorite)
        header.addWidget(self.favorite_btn)
        card_layout.addLayout(header)

        stats = QGridLayout()
        stats.setHorizontalSpacing(16)
        self.price_value = SubtitleLabel("")
        self.change_value = QLabel("")
        self.market_cap_value = StrongBodyLabel("")
        self.rank_caption = CaptionLabel("Market Cap Rank")
        self.rank_value = StrongBodyLabel("")
        stats.addWidget(CaptionLabel("Price"), 0, 0)
        stats.addWidget(self.price_value, 1, 0)
        stats.addWidget(CaptionLabel("24h Change"), 0, 1)
        stats.addWidget(self.change_value, 1, 1)
        stats.addWidget(CaptionLabel("Market Cap"), 2, 0)
        stats.addWidget(self.market_cap_value, 3, 0)
        stats.addWidget(self.rank_caption, 2, 1)
        stats.addWidget(self.rank_value, 3, 1)
        card_layout.addLayout(stats)

        self.about_title = StrongBodyLabel("")
        self.description_label = BodyLabel("")
        self.description_label.setWordWrap(True)
        self.description_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        card_layout.addWidget(self.about_title)
        card_layout.addWidget(self.description_label)

        layout.addWidget(self.detail_card)

        nav = QHBoxLayout()
        self.prev_btn = PushButton(FIF.CARE_LEFT_SOLID, "", self)
        self.prev_btn.clicked.connect(lambda: self._go_to(self._adjacent.previous))
        self.next_btn = PushButton(FIF.CARE_RIGHT_SOLID, "", self)
        self.next_btn.clicked.connect(lambda: self._go_to(self._adjacent.next))
        nav.addWidget(self.prev_btn)
        nav.addStretch()
        nav.addWidget(self.next_btn)
        layout.addLayout(nav)
        layout.addStretch()

        self._set_adjacent(AdjacentCoins())
        self.detail_card.hide()

    def show_coin(self, coin_id: str):
        """Start loading a coin and its neighbours in the ranking."""
        self._coin_id = coin_id
        self._set_adjacent(AdjacentCoins())
        self._controller.request_detail(coin_id)
        self._controller.request_adjacent(coin_id)

    def reload(self):
        if self._coin_id:
            self._controller.request_detail(self._coin_id)

    def _on_loading(self, coin_id: str):
        self.cached_notice.hide()
        self.error_panel.clear()
        self.detail_card.hide()
        self.status_label.setText("Loading coin details...")
        self.status_label.show()

    def render(self, state: DetailState):
        if state.coin_id != self._coin_id:
            return

        self.status_label.hide()
        self.cached_notice.setVisible(state.is_cached)

        if state.not_found:
            self.error_panel.clear()
            self.detail_card.hide()
            self.status_label.setText(f'Coin "{state.coin_id}" was not found.')
            self.status_label.show()
            return

        if state.error is not None:
            self.detail_card.hide()
            message = None
            if state.error.is_rate_limited:
                message = (
                    "The CoinGecko API rate limit has been exceeded. This happens when "
                    "too many requests are made in a short period."
                )
            self.error_panel.show_error(state.error, message)
            return

        self.error_panel.clear()
        coin = state.coin
        market = coin.market_data

        self.image_label.load(coin.image.large)
        self.name_label.setText(coin.name)
        self.symbol_label.setText(coin.symbol.upper())
        self.price_value.setText(format_price(market.current_price_usd))

        change = market.price_change_percentage_24h
        self.change_value.setText(format_change(change))
        self.change_value.setStyleSheet(f"font-size: 16px; font-weight: 600; color: {change_color(change)};")

        self.market_cap_value.setText(format_market_cap(market.market_cap_usd))
        has_rank = market.market_cap_rank is not None
        self.rank_caption.setVisible(has_rank)
        self.rank_value.setVisible(has_rank)
        if has_rank:
            self.rank_value.setText(f"#{market.market_cap_rank}")

        description = plain_description(coin.description)
        self.about_title.setText(f"About {coin.name}")
        self.about_title.setVisible(bool(description))
        self.description_label.setText(description)
        self.description_label.setVisible(bool(description))

        self._update_favorite_button()
        self.detail_card.show()

    def _on_adjacent_changed(self, coin_id: str, adjacent: AdjacentCoins):
        if coin_id == self._coin_id:
            self._set_adjacent(adjacent)

    def _set_adjacent(self, adjacent: AdjacentCoins):
        self._adjacent = adjacent
        for button, ranked in ((self.prev_btn, adjacent.previous), (self.next_btn, adjacent.next)):
            button.setVisible(ranked is not None)
            if ranked is not None:
                button.setText(f"#{ranked.rank} {ranked.coin.name}")

    def _go_to(self, ranked: Optional[RankedCoin]):
        if ranked is not None:
            self.coin_selected.emit(ranked.coin.id)

    def _toggle_favorite(self):
        if self._coin_id:
            self._watchlist.toggle(self._coin_id)

    def _on_watchlist_changed(self, _change: StorageChange):
        self._update_favorite_button()

    def _update_favorite_button(self):
        is_favorite = self._watchlist.contains(self._coin_id)
        self.favorite_btn.setIcon(favorite_icon(is_favorite))
        self.favorite_btn.setText("In watchlist" if is_favorite else "Add to watchlist")

    def shutdown(self):
        self._unsubscribe()
