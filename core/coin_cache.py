"""
Offline cache of the most recently fetched coin list.

Descriptions collected on detail pages are merged into the cached coins and
survive later list refreshes. Entries never expire on their own.
"""

import json
import logging
from dataclasses import replace
from typing import Optional

from core.models import Coin, CoinDetail, CoinImage, MarketData
from core.storage import KeyValueStorage

logger = logging.getLogger(__name__)

COINS_CACHE_KEY = "cryptoquick_coins_cache"


class CoinCacheStore:
    def __init__(self, storage: Optional[KeyValueStorage]):
        self._storage = storage

    def save(self, coins: list[Coin]) -> None:
        """Persist a freshly fetched list, keeping previously cached descriptions."""
        if self._storage is None:
            return

        descriptions = {
            coin.id: coin.description
            for coin in (self.get() or [])
            if coin.description
        }

        merged = []
        for coin in coins:
            if not coin.description and coin.id in descriptions:
                coin = replace(coin, description=descriptions[coin.id])
            merged.append(coin)

        self._write(merged, "saving coins to cache")

    def get(self) -> Optional[list[Coin]]:
        """Return the cached list, or None if absent, unreadable or empty."""
        if self._storage is None:
            return None

        try:
            stored = self._storage.get(COINS_CACHE_KEY)
            if not stored:
                return None
            parsed = json.loads(stored)
            if not isinstance(parsed, list):
                return None
            coins = [Coin.from_dict(item) for item in parsed]
        except (OSError, ValueError, TypeError, KeyError) as e:
            logger.debug(f"Error reading cached coins: {e}")
            return None

        return coins or None

    def update_description(self, detail: CoinDetail) -> None:
        """Store a detail's description, adding the coin if it is not cached yet."""
        if self._storage is None or not detail.description:
            return

        coins = self.get() or []
        for coin in coins:
            if coin.id == detail.id:
                coin.description = detail.description
                break
        else:
            coins.append(
                Coin(
                    id=detail.id,
                    name=detail.name,
                    symbol=detail.symbol.upper(),
                    current_price=detail.market_data.current_price_usd,
                    price_change_percentage_24h=detail.market_data.price_change_percentage_24h,
                    image=detail.image.large,
                    market_cap=detail.market_data.market_cap_usd,
                    description=detail.description,
                )
            )

        self._write(coins, "updating coin description in cache")

    def get_detail(self, coin_id: str) -> Optional[CoinDetail]:
        """Rebuild a CoinDetail from the cached coin. The market cap rank is unknown."""
        coin = next((c for c in self.get() or [] if c.id == coin_id), None)
        if coin is None:
            return None

        return CoinDetail(
            id=coin.id,
            symbol=coin.symbol.lower(),
            name=coin.name,
            image=CoinImage(thumb=coin.image, small=coin.image, large=coin.image),
            description=coin.description or "",
            market_data=MarketData(
                current_price_usd=coin.current_price,
                market_cap_usd=coin.market_cap,
                market_cap_rank=None,
                price_change_percentage_24h=coin.price_change_percentage_24h,
            ),
        )

    def _write(self, coins: list[Coin], action: str) -> None:
        try:
            self._storage.set(COINS_CACHE_KEY, json.dumps([c.to_dict() for c in coins]))
        except (OSError, ValueError) as e:
            logger.debug(f"Error {action}: {e}")
            return
        self._storage.notify(COINS_CACHE_KEY)
