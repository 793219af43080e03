"""
Error type raised by the CoinGecko client.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    RATE_LIMIT = "rate_limit"
    API = "api"
    TIMEOUT = "timeout"
    NETWORK = "network"
    UNKNOWN = "unknown"


# Statuses that CoinGecko also sends when throttling a client
PROBABLE_RATE_LIMIT_STATUSES = (403, 503)


class CoinGeckoError(Exception):
    """
    A classified failure of a CoinGecko request.

    Only the client constructs these; callers inspect ``kind``,
    ``status_code`` and ``reset_at`` instead of re-classifying.

    Args:
        message: Human readable description.
        kind: Failure category.
        status_code: HTTP status, if a response was received.
        reset_at: Epoch milliseconds after which a rate-limited client may retry.
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        status_code: Optional[int] = None,
        reset_at: Optional[float] = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code
        self.reset_at = reset_at

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_rate_limited(self) -> bool:
        return (
            self.kind is ErrorKind.RATE_LIMIT
            or self.status_code in PROBABLE_RATE_LIMIT_STATUSES
        )

    def __repr__(self) -> str:
        return (
            f"CoinGeckoError({self.message!r}, kind={self.kind.value}, "
            f"status_code={self.status_code}, reset_at={self.reset_at})"
        )
