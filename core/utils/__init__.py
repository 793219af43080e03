"""
Formatting helpers for displaying coin data.
"""

import math
import time
from typing import Optional


def format_price(price: float) -> str:
    """
    Format a USD price.

    Prices below one cent keep 6 decimals (e.g. "$0.000123"); everything
    else gets thousands separators and 2 decimals (e.g. "$1,234.50").
    """
    if price < 0.01:
        return f"${price:.6f}"
    return f"${price:,.2f}"


def format_change(change: float) -> str:
    """Format a percentage change with an explicit sign, e.g. "+5.23%"."""
    sign = "+" if change >= 0 else ""
    return f"{sign}{change:.2f}%"


def format_market_cap(market_cap: float) -> str:
    """Abbreviate a market cap: "$1.23T", "$456.78B", "$789.12M"."""
    if market_cap >= 1e12:
        return f"${market_cap / 1e12:.2f}T"
    if market_cap >= 1e9:
        return f"${market_cap / 1e9:.2f}B"
    if market_cap >= 1e6:
        return f"${market_cap / 1e6:.2f}M"
    return format_price(market_cap)


def format_time_until_reset(reset_at: Optional[float], now: Optional[float] = None) -> str:
    """
    Describe how long until a rate limit resets.

    Args:
        reset_at: Reset time in epoch milliseconds.
        now: Current time in epoch milliseconds (defaults to the clock).

    Returns:
        "" without a reset time, "now" once it has passed, otherwise
        "in N minute(s)" or "in N second(s)".
    """
    if not reset_at:
        return ""

    if now is None:
        now = time.time() * 1000

    diff = reset_at - now
    if diff <= 0:
        return "now"

    seconds = math.floor(diff / 1000)
    minutes = seconds // 60

    if minutes > 0:
        return f"in {minutes} minute{'s' if minutes != 1 else ''}"
    return f"in {seconds} second{'s' if seconds != 1 else ''}"
