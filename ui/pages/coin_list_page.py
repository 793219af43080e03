"""
List page: search, favorites filter and the top coins.
"""

from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QVBoxLayout, QWidget
from qfluentwidgets import BodyLabel, LineEdit, ScrollArea, SwitchButton

from core.market_data_controller import CoinListController
from ui.widgets.coin_card import CoinCard
from ui.widgets.error_panel import ErrorPanel

CACHED_NOTICE = (
    "Showing cached data. Unable to fetch fresh data due to API rate limits. "
    "Showing previously saved data."
)


class CoinListPage(QWidget):
    coin_selected = pyqtSignal(str)

    def __init__(self, controller: CoinListController, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._controller = controller
        self._setup_ui()

        self._controller.loading_started.connect(self.render)
        self._controller.state_changed.connect(self.render)

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(10, 0, 10, 8)
        layout.setSpacing(8)

        self.cached_notice = QLabel(CACHED_NOTICE)
        self.cached_notice.setObjectName("cachedNotice")
        self.cached_notice.setWordWrap(True)
        self.cached_notice.hide()
        layout.addWidget(self.cached_notice)

        search_row = QHBoxLayout()
        self.search_edit = LineEdit(self)
        self.search_edit.setPlaceholderText("Search coins...")
        self.search_edit.setClearButtonEnabled(True)
        self.search_edit.textChanged.connect(self._on_search_changed)
        search_row.addWidget(self.search_edit, 1)

        self.favorites_switch = SwitchButton(self)
        self.favorites_switch.setOnText("Favorites")
        self.favorites_switch.setOffText("All")
        self.favorites_switch.checkedChanged.connect(self._on_favorites_toggled)
        search_row.addWidget(self.favorites_switch)
        layout.addLayout(search_row)

        self.loading_label = BodyLabel("Loading coins...")
        self.loading_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.loading_label.hide()
        layout.addWidget(self.loading_label)

        self.error_panel = ErrorPanel("Error", parent=self)
        self.error_panel.retry_clicked.connect(self._controller.request_load)
        self.error_panel.hide()
        layout.addWidget(self.error_panel)

        self.empty_label = BodyLabel("")
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.empty_label.hide()
        layout.addWidget(self.empty_label)

        self.scroll_area = ScrollArea(self)
        self.scroll_area.setWidgetResizable(True)
        self.scroll_area.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.scroll_area.setStyleSheet("QScrollArea { border: none; background: transparent; }")

        self.cards_container = QWidget()
        self.cards_container.setStyleSheet("background: transparent;")
        self.cards_layout = QVBoxLayout(self.cards_container)
        self.cards_layout.setContentsMargins(0, 0, 0, 0)
        self.cards_layout.setSpacing(8)
        self.cards_layout.addStretch()

        self.scroll_area.setWidget(self.cards_container)
        layout.addWidget(self.scroll_area, 1)

    def _on_search_changed(self, text: str):
        self._controller.search_query = text

    def _on_favorites_toggled(self, checked: bool):
        self._controller.favorites_only = checked

    def render(self):
        controller = self._controller

        self.loading_label.setVisible(controller.loading)
        self.cached_notice.setVisible(controller.is_showing_cached and not controller.loading)

        if controller.error is not None and not controller.loading:
            self.error_panel.show_error(controller.error)
        else:
            self.error_panel.clear()

        self._clear_cards()
        if controller.loading or controller.error is not None:
            self.empty_label.hide()
            return

        coins = controller.filtered_coins()
        watchlist = set(controller.watchlist)
        ranks = {coin.id: i + 1 for i, coin in enumerate(controller.coins)}

        for coin in coins:
            card = CoinCard(coin, ranks[coin.id], coin.id in watchlist)
            card.open_requested.connect(self.coin_selected)
            card.favorite_toggled.connect(controller.toggle_favorite)
            self.cards_layout.insertWidget(self.cards_layout.count() - 1, card)

        if not coins:
            if controller.favorites_only:
                self.empty_label.setText("No favorite coins found.")
            else:
                self.empty_label.setText(f'No coins found matching "{controller.search_query}"')
        self.empty_label.setVisible(not coins)

    def _clear_cards(self):
        while self.cards_layout.count() > 1:  # Keep the stretch
            item = self.cards_layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
