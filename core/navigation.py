import logging

from core.coin_cache import CoinCacheStore
from core.coingecko_client import CoinGeckoClient
from core.errors import CoinGeckoError
from core.models import AdjacentCoins, RankedCoin

logger = logging.getLogger(__name__)


def get_adjacent_coins(
    coin_id: str, cache: CoinCacheStore, client: CoinGeckoClient
) -> AdjacentCoins:
    """
    Find the coins ranked directly before and after ``coin_id``.

    The cached list is preferred; without one the top list is fetched. Ranks
    are 1-based positions in the whole list. Unknown ids and fetch failures
    give no neighbours.
    """
    coins = cache.get()

    if not coins:
        try:
            coins = client.fetch_coins()
        except CoinGeckoError as e:
            logger.debug(f"Could not load coins for navigation: {e}")
            return AdjacentCoins()

    index = next((i for i, coin in enumerate(coins) if coin.id == coin_id), -1)
    if index == -1:
        return AdjacentCoins()

    previous = RankedCoin(coins[index - 1], rank=index) if index > 0 else None
    following = (
        RankedCoin(coins[index + 1], rank=index + 2) if index < len(coins) - 1 else None
    )
    return AdjacentCoins(previous=previous, next=following)
