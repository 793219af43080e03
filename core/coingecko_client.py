"""
REST client for the public CoinGecko API.

Every failure leaves this module as a classified CoinGeckoError; no request
is retried automatically.
"""

import logging
import time
from typing import Any, Callable, Optional

import requests

from config.settings import DEFAULT_API_BASE_URL, AppSettings
from core.errors import CoinGeckoError, ErrorKind, PROBABLE_RATE_LIMIT_STATUSES
from core.models import Coin, CoinDetail

logger = logging.getLogger(__name__)

TOP_COINS_LIMIT = 10
REQUEST_TIMEOUT_SECONDS = 10.0

# Substrings of transport errors that mean the request never got a response
NETWORK_ERROR_MARKERS = (
    "fetch",
    "NetworkError",
    "Max retries exceeded",
    "Failed to establish a new connection",
    "Connection aborted",
    "Connection reset",
    "Name or service not known",
    "Temporary failure in name resolution",
)

RATE_LIMIT_MESSAGE = "API rate limit exceeded. Please try again later."
PROBABLE_RATE_LIMIT_MESSAGE = (
    "API rate limit exceeded or service unavailable. Please try again later."
)
TIMEOUT_MESSAGE = (
    "Request timeout. The API might be rate limiting. Please wait a moment and try again."
)
NETWORK_MESSAGE = (
    "Network error. This might be due to API rate limiting. "
    "Wait 60 seconds until the rate limit resets and try again."
)


def parse_retry_after(value: Optional[str], now_ms: float) -> Optional[float]:
    """Convert a Retry-After header (seconds) into an epoch-ms reset time."""
    if value is None:
        return None
    try:
        seconds = int(float(value.strip()))
    except (AttributeError, ValueError, OverflowError):
        return None
    return now_ms + seconds * 1000


def classify_response(response: requests.Response, now_ms: float) -> Optional[CoinGeckoError]:
    """Return the error for a non-success response, or None if it succeeded."""
    status = response.status_code

    if status == 429:
        reset_at = parse_retry_after(response.headers.get("Retry-After"), now_ms)
        return CoinGeckoError(RATE_LIMIT_MESSAGE, ErrorKind.RATE_LIMIT, 429, reset_at)

    if 200 <= status < 300:
        return None

    if status in PROBABLE_RATE_LIMIT_STATUSES:
        return CoinGeckoError(PROBABLE_RATE_LIMIT_MESSAGE, ErrorKind.API, status)

    return CoinGeckoError(f"API request failed: {response.reason}", ErrorKind.API, status)


def classify_exception(exc: BaseException) -> CoinGeckoError:
    """Map a failure raised while requesting or decoding into a CoinGeckoError."""
    if isinstance(exc, CoinGeckoError):
        return exc

    # Timeout first: ConnectTimeout is also a ConnectionError
    if isinstance(exc, requests.Timeout):
        return CoinGeckoError(TIMEOUT_MESSAGE, ErrorKind.TIMEOUT)

    message = str(exc)
    if isinstance(exc, requests.ConnectionError) or (
        isinstance(exc, requests.RequestException)
        and any(marker in message for marker in NETWORK_ERROR_MARKERS)
    ):
        return CoinGeckoError(NETWORK_MESSAGE, ErrorKind.NETWORK)

    return CoinGeckoError(message or "An unknown error occurred", ErrorKind.UNKNOWN)


# Raised while mapping a record that lacks a field or has the wrong shape
MALFORMED_RECORD_ERRORS = (KeyError, TypeError, AttributeError)


def _malformed_response(path: str, exc: Exception) -> CoinGeckoError:
    error = CoinGeckoError(
        f"Unexpected data from {path}: {type(exc).__name__}: {exc}", ErrorKind.UNKNOWN
    )
    logger.warning(f"Malformed record from {path}: {error!r}")
    return error


class CoinGeckoClient:
    """Fetches the top coins and coin details from CoinGecko."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "CoinGeckoClient":
        session = requests.Session()
        proxies = settings.proxy.get_proxies()
        if proxies:
            logger.debug(f"Configuring proxy for CoinGeckoClient: {proxies['https']}")
            session.proxies = proxies
        return cls(settings.api_base_url, settings.request_timeout, session)

    def fetch_coins(self) -> list[Coin]:
        """Fetch the top coins by market cap, in API order."""
        data = self._get(
            "/coins/markets",
            params={
                "vs_currency": "usd",
                "order": "market_cap_desc",
                "per_page": TOP_COINS_LIMIT,
                "page": 1,
            },
        )
        if not isinstance(data, list):
            raise CoinGeckoError("Unexpected response shape from /coins/markets")

        try:
            coins = [Coin.from_market_record(record) for record in data]
        except MALFORMED_RECORD_ERRORS as exc:
            raise _malformed_response("/coins/markets", exc) from exc
        logger.info(f"Fetched {len(coins)} coins")
        return coins

    def fetch_coin_detail(self, coin_id: str) -> CoinDetail:
        """
        Fetch a single coin by id.

        A missing coin raises a CoinGeckoError with status 404; telling that
        apart from other failures is left to the caller.
        """
        data = self._get(f"/coins/{coin_id}")
        if not isinstance(data, dict) or "id" not in data:
            raise CoinGeckoError(f"Unexpected response shape for coin {coin_id}")
        try:
            return CoinDetail.from_api(data)
        except MALFORMED_RECORD_ERRORS as exc:
            raise _malformed_response(f"/coins/{coin_id}", exc) from exc

    def _get(self, path: str, params: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.get(
                url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            error = classify_response(response, self._clock() * 1000)
            if error is not None:
                raise error
            return response.json()
        except Exception as exc:
            error = classify_exception(exc)
            logger.warning(f"Request to {url} failed: {error!r}")
            if error is exc:
                raise
            raise error from exc
