"""
Standard data models for the application.
"""

from dataclasses import dataclass, asdict, field
from typing import Any, Optional


def _to_float(value: Any) -> float:
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


@dataclass
class Coin:
    """Flat summary record for one coin, as shown in the list view."""

    id: str
    name: str
    symbol: str
    current_price: float
    price_change_percentage_24h: float
    image: str
    market_cap: float
    description: Optional[str] = None

    @classmethod
    def from_market_record(cls, record: dict) -> "Coin":
        """Build a coin from a /coins/markets record. The symbol is upper-cased."""
        return cls(
            id=record["id"],
            name=record.get("name", ""),
            symbol=str(record.get("symbol", "")).upper(),
            current_price=_to_float(record.get("current_price")),
            price_change_percentage_24h=_to_float(record.get("price_change_percentage_24h")),
            image=record.get("image") or "",
            market_cap=_to_float(record.get("market_cap")),
        )

    @classmethod
    def from_dict(cls, data: dict) -> "Coin":
        """Build a coin from its persisted form."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            symbol=data.get("symbol", ""),
            current_price=_to_float(data.get("current_price")),
            price_change_percentage_24h=_to_float(data.get("price_change_percentage_24h")),
            image=data.get("image") or "",
            market_cap=_to_float(data.get("market_cap")),
            description=data.get("description") or None,
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        if not data["description"]:
            del data["description"]
        return data


@dataclass
class CoinImage:
    thumb: str = ""
    small: str = ""
    large: str = ""


@dataclass
class MarketData:
    """Nested market block of a coin detail."""

    current_price_usd: float = 0.0
    market_cap_usd: float = 0.0
    # None means the rank is unknown (e.g. a detail rebuilt from the cache)
    market_cap_rank: Optional[int] = None
    price_change_percentage_24h: float = 0.0


@dataclass
class CoinDetail:
    """Expanded record for one coin, as shown in the detail view."""

    id: str
    symbol: str
    name: str
    image: CoinImage = field(default_factory=CoinImage)
    description: str = ""
    market_data: MarketData = field(default_factory=MarketData)

    @classmethod
    def from_api(cls, payload: dict) -> "CoinDetail":
        """Build a detail from a raw /coins/{id} payload."""
        image = payload.get("image") or {}
        description = payload.get("description") or {}
        market = payload.get("market_data") or {}

        rank = market.get("market_cap_rank")
        if not isinstance(rank, int) or rank <= 0:
            rank = None

        return cls(
            id=payload["id"],
            symbol=payload.get("symbol", ""),
            name=payload.get("name", ""),
            image=CoinImage(
                thumb=image.get("thumb") or "",
                small=image.get("small") or "",
                large=image.get("large") or "",
            ),
            description=description.get("en") or "",
            market_data=MarketData(
                current_price_usd=_to_float((market.get("current_price") or {}).get("usd")),
                market_cap_usd=_to_float((market.get("market_cap") or {}).get("usd")),
                market_cap_rank=rank,
                price_change_percentage_24h=_to_float(market.get("price_change_percentage_24h")),
            ),
        )


@dataclass
class RankedCoin:
    """A coin annotated with its 1-based position in the ranked list."""

    coin: Coin
    rank: int


@dataclass
class AdjacentCoins:
    previous: Optional[RankedCoin] = None
    next: Optional[RankedCoin] = None
