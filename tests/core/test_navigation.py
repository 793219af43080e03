from unittest.mock import MagicMock

import pytest

from core.coin_cache import CoinCacheStore
from core.errors import CoinGeckoError, ErrorKind
from core.models import Coin
from core.navigation import get_adjacent_coins
from core.storage import MemoryStorage

COIN_IDS = [
    "bitcoin", "ethereum", "tether", "binancecoin", "solana",
    "usd-coin", "ripple", "dogecoin", "cardano", "tron",
]


def make_coins(ids=COIN_IDS) -> list[Coin]:
    return [
        Coin(
            id=coin_id,
            name=coin_id.title(),
            symbol=coin_id[:3].upper(),
            current_price=1.0,
            price_change_percentage_24h=0.0,
            image="",
            market_cap=1e9,
        )
        for coin_id in ids
    ]


class TestAdjacentCoins:
    @pytest.fixture
    def cache(self):
        cache = CoinCacheStore(MemoryStorage())
        cache.save(make_coins())
        return cache

    @pytest.fixture
    def client(self):
        return MagicMock()

    def test_first_coin(self, cache, client):
        adjacent = get_adjacent_coins("bitcoin", cache, client)

        assert adjacent.previous is None
        assert adjacent.next.coin.id == "ethereum"
        assert adjacent.next.rank == 2
        client.fetch_coins.assert_not_called()

    def test_last_coin(self, cache, client):
        adjacent = get_adjacent_coins("tron", cache, client)

        assert adjacent.previous.coin.id == "cardano"
        assert adjacent.previous.rank == 9
        assert adjacent.next is None

    def test_middle_coin(self, cache, client):
        adjacent = get_adjacent_coins("solana", cache, client)

        assert adjacent.previous.coin.id == "binancecoin"
        assert adjacent.previous.rank == 4
        assert adjacent.next.coin.id == "usd-coin"
        assert adjacent.next.rank == 6

    def test_unknown_coin(self, cache, client):
        adjacent = get_adjacent_coins("shiba-inu", cache, client)

        assert adjacent.previous is None
        assert adjacent.next is None

    def test_fetches_when_cache_empty(self, client):
        client.fetch_coins.return_value = make_coins(["bitcoin", "ethereum", "tether"])

        adjacent = get_adjacent_coins("ethereum", CoinCacheStore(MemoryStorage()), client)

        client.fetch_coins.assert_called_once()
        assert adjacent.previous.coin.id == "bitcoin"
        assert adjacent.previous.rank == 1
        assert adjacent.next.coin.id == "tether"
        assert adjacent.next.rank == 3

    def test_fetch_failure_gives_no_neighbours(self, client):
        client.fetch_coins.side_effect = CoinGeckoError("offline", ErrorKind.NETWORK)

        adjacent = get_adjacent_coins("bitcoin", CoinCacheStore(None), client)

        assert adjacent.previous is None
        assert adjacent.next is None

    def test_single_coin_list(self, client):
        client.fetch_coins.return_value = make_coins(["bitcoin"])

        adjacent = get_adjacent_coins("bitcoin", CoinCacheStore(None), client)

        assert adjacent.previous is None
        assert adjacent.next is None
