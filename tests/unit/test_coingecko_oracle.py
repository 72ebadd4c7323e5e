"""Unit tests for the CoinGecko oracle: response parsing and error handling."""
from __future__ import annotations

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from portfolio_engine.config import CoinGeckoConfig
from portfolio_engine.http import HttpResponse
from portfolio_engine.oracles.coingecko import CoinGeckoOracle


@pytest.fixture()
def oracle(mock_http: MagicMock) -> CoinGeckoOracle:
    return CoinGeckoOracle(
        CoinGeckoConfig(base_url="https://prices.example.com/simple/price", timeout=4),
        mock_http,
    )


class TestCoinGeckoFetchPrices:
    @pytest.mark.asyncio
    async def test_parses_response_correctly(
        self, oracle: CoinGeckoOracle, mock_http: MagicMock
    ) -> None:
        mock_http.get_json.return_value = HttpResponse(
            200, {"ripple": {"usd": 0.5}, "stellar": {"usd": 0.1}}
        )

        prices = await oracle.fetch_prices(["stellar", "ripple"])

        assert prices == {"ripple": Decimal("0.5"), "stellar": Decimal("0.1")}

    @pytest.mark.asyncio
    async def test_single_request_with_sorted_unique_ids(
        self, oracle: CoinGeckoOracle, mock_http: MagicMock
    ) -> None:
        await oracle.fetch_prices(["stellar", "ripple", "stellar"])

        mock_http.get_json.assert_awaited_once()
        args, kwargs = mock_http.get_json.call_args
        assert args == ("https://prices.example.com/simple/price",)
        assert kwargs["params"] == {"ids": "ripple,stellar", "vs_currencies": "usd"}
        assert kwargs["headers"] is None
        assert kwargs["timeout"] == 4

    @pytest.mark.asyncio
    async def test_api_key_header(self, mock_http: MagicMock) -> None:
        oracle = CoinGeckoOracle(CoinGeckoConfig(api_key="demo-key"), mock_http)
        await oracle.fetch_prices(["ripple"])

        _, kwargs = mock_http.get_json.call_args
        assert kwargs["headers"] == {"x-cg-demo-api-key": "demo-key"}

    @pytest.mark.asyncio
    async def test_missing_coin_is_absent(
        self, oracle: CoinGeckoOracle, mock_http: MagicMock
    ) -> None:
        mock_http.get_json.return_value = HttpResponse(200, {"ripple": {"usd": 0.5}})

        prices = await oracle.fetch_prices(["ripple", "tether"])

        assert "tether" not in prices
        assert prices["ripple"] == Decimal("0.5")

    @pytest.mark.asyncio
    async def test_no_ids_makes_no_request(
        self, oracle: CoinGeckoOracle, mock_http: MagicMock
    ) -> None:
        assert await oracle.fetch_prices([]) == {}
        mock_http.get_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_handles_http_error(
        self, oracle: CoinGeckoOracle, mock_http: MagicMock
    ) -> None:
        mock_http.get_json.return_value = HttpResponse(429, {"status": "rate limited"})

        assert await oracle.fetch_prices(["ripple"]) == {}

    @pytest.mark.asyncio
    async def test_handles_network_error(
        self, oracle: CoinGeckoOracle, mock_http: MagicMock
    ) -> None:
        mock_http.get_json = AsyncMock(side_effect=ConnectionError("timeout"))

        assert await oracle.fetch_prices(["ripple"]) == {}

    @pytest.mark.asyncio
    async def test_unparseable_price_skipped(
        self, oracle: CoinGeckoOracle, mock_http: MagicMock
    ) -> None:
        mock_http.get_json.return_value = HttpResponse(
            200, {"ripple": {"usd": "n/a"}, "stellar": {"usd": 0.1}}
        )

        assert await oracle.fetch_prices(["ripple", "stellar"]) == {"stellar": Decimal("0.1")}

    @pytest.mark.asyncio
    async def test_non_dict_quote_skipped(
        self, oracle: CoinGeckoOracle, mock_http: MagicMock
    ) -> None:
        mock_http.get_json.return_value = HttpResponse(
            200, {"stellar": 0.1, "ripple": {"usd": 0.5}}
        )

        assert await oracle.fetch_prices(["stellar", "ripple"]) == {"ripple": Decimal("0.5")}
