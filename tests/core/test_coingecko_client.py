from unittest.mock import MagicMock

import pytest
import requests

from config.settings import AppSettings, ProxyConfig
from core.coingecko_client import (
    CoinGeckoClient,
    classify_exception,
    parse_retry_after,
)
from core.errors import CoinGeckoError, ErrorKind

NOW_SECONDS = 1_700_000_000.0
NOW_MS = NOW_SECONDS * 1000

MARKET_RECORDS = [
    {
        "id": "bitcoin",
        "symbol": "btc",
        "name": "Bitcoin",
        "image": "https://example.com/btc.png",
        "current_price": 65000.5,
        "market_cap": 1.28e12,
        "price_change_percentage_24h": 1.25,
    },
    {
        "id": "ethereum",
        "symbol": "eth",
        "name": "Ethereum",
        "image": "https://example.com/eth.png",
        "current_price": 3200.0,
        "market_cap": 3.8e11,
        "price_change_percentage_24h": -0.8,
    },
    {
        "id": "tether",
        "symbol": "usdt",
        "name": "Tether",
        "image": "https://example.com/usdt.png",
        "current_price": 1.0,
        "market_cap": 1.1e11,
        "price_change_percentage_24h": None,
    },
]

DETAIL_PAYLOAD = {
    "id": "bitcoin",
    "symbol": "btc",
    "name": "Bitcoin",
    "image": {
        "thumb": "https://example.com/thumb.png",
        "small": "https://example.com/small.png",
        "large": "https://example.com/large.png",
    },
    "description": {"en": "The first cryptocurrency."},
    "market_data": {
        "current_price": {"usd": 65000.5, "eur": 60000.0},
        "market_cap": {"usd": 1.28e12},
        "market_cap_rank": 1,
        "price_change_percentage_24h": 1.25,
    },
}


def make_response(status_code=200, json_data=None, headers=None, reason="OK"):
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {}
    response.reason = reason
    response.json.return_value = json_data
    return response


class TestCoinGeckoClient:
    @pytest.fixture
    def session(self):
        return MagicMock()

    @pytest.fixture
    def client(self, session):
        return CoinGeckoClient(
            "https://api.example.com/v3/", session=session, clock=lambda: NOW_SECONDS
        )

    def test_fetch_coins_preserves_order_and_uppercases_symbols(self, client, session):
        session.get.return_value = make_response(json_data=MARKET_RECORDS)

        coins = client.fetch_coins()

        assert [c.id for c in coins] == ["bitcoin", "ethereum", "tether"]
        assert [c.symbol for c in coins] == ["BTC", "ETH", "USDT"]
        assert coins[0].current_price == 65000.5
        assert coins[2].price_change_percentage_24h == 0.0
        assert all(c.description is None for c in coins)

    def test_fetch_coins_request_parameters(self, client, session):
        session.get.return_value = make_response(json_data=[])

        client.fetch_coins()

        args, kwargs = session.get.call_args
        assert args[0] == "https://api.example.com/v3/coins/markets"
        assert kwargs["params"] == {
            "vs_currency": "usd",
            "order": "market_cap_desc",
            "per_page": 10,
            "page": 1,
        }
        assert kwargs["timeout"] == 10.0

    def test_fetch_coin_detail(self, client, session):
        session.get.return_value = make_response(json_data=DETAIL_PAYLOAD)

        detail = client.fetch_coin_detail("bitcoin")

        assert session.get.call_args[0][0] == "https://api.example.com/v3/coins/bitcoin"
        assert detail.id == "bitcoin"
        assert detail.symbol == "btc"
        assert detail.image.small == "https://example.com/small.png"
        assert detail.description == "The first cryptocurrency."
        assert detail.market_data.current_price_usd == 65000.5
        assert detail.market_data.market_cap_rank == 1

    def test_rate_limit_with_retry_after(self, client, session):
        session.get.return_value = make_response(
            status_code=429, headers={"Retry-After": "30"}, reason="Too Many Requests"
        )

        with pytest.raises(CoinGeckoError) as exc_info:
            client.fetch_coins()

        error = exc_info.value
        assert error.kind is ErrorKind.RATE_LIMIT
        assert error.status_code == 429
        assert error.reset_at == pytest.approx(NOW_MS + 30000, abs=1000)
        assert error.is_rate_limited

    def test_rate_limit_without_retry_after(self, client, session):
        session.get.return_value = make_response(status_code=429)

        with pytest.raises(CoinGeckoError) as exc_info:
            client.fetch_coins()

        assert exc_info.value.kind is ErrorKind.RATE_LIMIT
        assert exc_info.value.reset_at is None

    @pytest.mark.parametrize("status", [403, 503])
    def test_probable_rate_limit_statuses(self, client, session, status):
        session.get.return_value = make_response(status_code=status, headers={"Retry-After": "10"})

        with pytest.raises(CoinGeckoError) as exc_info:
            client.fetch_coins()

        error = exc_info.value
        assert error.kind is ErrorKind.API
        assert error.status_code == status
        assert error.reset_at is None
        assert "rate limit" in error.message.lower()
        assert error.is_rate_limited

    def test_not_found_keeps_status(self, client, session):
        session.get.return_value = make_response(status_code=404, reason="Not Found")

        with pytest.raises(CoinGeckoError) as exc_info:
            client.fetch_coin_detail("no-such-coin")

        error = exc_info.value
        assert error.kind is ErrorKind.API
        assert error.status_code == 404
        assert error.is_not_found
        assert not error.is_rate_limited
        assert "Not Found" in error.message

    def test_timeout(self, client, session):
        session.get.side_effect = requests.Timeout("Read timed out.")

        with pytest.raises(CoinGeckoError) as exc_info:
            client.fetch_coins()

        error = exc_info.value
        assert error.kind is ErrorKind.TIMEOUT
        assert error.status_code is None
        assert "rate limiting" in error.message

    def test_connect_timeout_is_a_timeout(self, client, session):
        session.get.side_effect = requests.ConnectTimeout("Connection to host timed out")

        with pytest.raises(CoinGeckoError) as exc_info:
            client.fetch_coins()

        assert exc_info.value.kind is ErrorKind.TIMEOUT

    def test_connection_error(self, client, session):
        session.get.side_effect = requests.ConnectionError("Failed to establish a new connection")

        with pytest.raises(CoinGeckoError) as exc_info:
            client.fetch_coins()

        error = exc_info.value
        assert error.kind is ErrorKind.NETWORK
        assert error.status_code is None
        assert "rate limiting" in error.message

    def test_unclassified_failure_wraps_message(self, client, session):
        session.get.side_effect = RuntimeError("boom")

        with pytest.raises(CoinGeckoError) as exc_info:
            client.fetch_coins()

        error = exc_info.value
        assert error.kind is ErrorKind.UNKNOWN
        assert error.message == "boom"
        assert isinstance(error.__cause__, RuntimeError)

    def test_invalid_json_is_unknown(self, client, session):
        response = make_response()
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
        session.get.return_value = response

        with pytest.raises(CoinGeckoError) as exc_info:
            client.fetch_coins()

        assert exc_info.value.kind is ErrorKind.UNKNOWN

    def test_unexpected_shape(self, client, session):
        session.get.return_value = make_response(json_data={"error": "nope"})

        with pytest.raises(CoinGeckoError):
            client.fetch_coins()

    @pytest.mark.parametrize(
        "records",
        [
            [{"symbol": "btc", "name": "Bitcoin"}],
            [MARKET_RECORDS[0], None],
        ],
    )
    def test_malformed_market_record_is_classified(self, client, session, records):
        session.get.return_value = make_response(json_data=records)

        with pytest.raises(CoinGeckoError) as exc_info:
            client.fetch_coins()

        assert exc_info.value.kind is ErrorKind.UNKNOWN
        assert "/coins/markets" in exc_info.value.message

    @pytest.mark.parametrize(
        "override",
        [
            {"image": "https://example.com/large.png"},
            {"market_data": ["not", "an", "object"]},
            {"description": "plain text"},
        ],
    )
    def test_malformed_detail_is_classified(self, client, session, override):
        session.get.return_value = make_response(json_data={**DETAIL_PAYLOAD, **override})

        with pytest.raises(CoinGeckoError) as exc_info:
            client.fetch_coin_detail("bitcoin")

        assert exc_info.value.kind is ErrorKind.UNKNOWN

    def test_from_settings_applies_proxy(self):
        settings = AppSettings(
            api_base_url="https://proxy.example.com/api",
            request_timeout=5.0,
            proxy=ProxyConfig(enabled=True, host="1.2.3.4", port=8080),
        )

        client = CoinGeckoClient.from_settings(settings)

        assert client.base_url == "https://proxy.example.com/api"
        assert client.timeout == 5.0
        assert client._session.proxies["https"] == "http://1.2.3.4:8080"


class TestClassification:
    def test_classified_error_is_returned_as_is(self):
        original = CoinGeckoError("limited", ErrorKind.RATE_LIMIT, 429, 123.0)

        assert classify_exception(original) is original

    def test_network_marker_on_generic_request_exception(self):
        error = classify_exception(requests.RequestException("NetworkError when attempting to fetch resource"))

        assert error.kind is ErrorKind.NETWORK

    def test_request_exception_without_marker_is_unknown(self):
        error = classify_exception(requests.RequestException("Invalid URL"))

        assert error.kind is ErrorKind.UNKNOWN
        assert error.message == "Invalid URL"

    def test_parse_retry_after(self):
        assert parse_retry_after("30", 1000.0) == 31000.0
        assert parse_retry_after(" 5 ", 0.0) == 5000.0
        assert parse_retry_after(None, 1000.0) is None
        assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT", 1000.0) is None
        assert parse_retry_after("30.5", 1000.0) == 31000.0
        assert parse_retry_after("inf", 1000.0) is None
