"""
Client-side filtering of the coin list.
"""

from typing import Iterable

from core.models import Coin


def matches(coin: Coin, query: str) -> bool:
    """Case-insensitive substring match on name or symbol. A blank query matches."""
    query = query.lower().strip()
    if not query:
        return True
    return query in coin.name.lower() or query in coin.symbol.lower()


def filter_coins(
    coins: list[Coin],
    query: str = "",
    watchlist: Iterable[str] = (),
    favorites_only: bool = False,
) -> list[Coin]:
    """
    Apply the favorites filter, then the search query. Order is preserved.

    Args:
        coins: Coins in rank order.
        query: Search text.
        watchlist: Ids marked as favorites.
        favorites_only: Keep only coins in the watchlist.
    """
    if favorites_only:
        favorites = set(watchlist)
        coins = [coin for coin in coins if coin.id in favorites]

    return [coin for coin in coins if matches(coin, query)]
