"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from decimal import Decimal
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from portfolio_engine.config import (
    AppConfig,
    ChainConfig,
    CoinGeckoConfig,
    EngineConfig,
    NativeAssetConfig,
    PriceOracleConfig,
    TokenConfig,
)
from portfolio_engine.http import HttpClient, HttpResponse
from portfolio_engine.models import PriceMap


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def stellar_chain_config() -> ChainConfig:
    return ChainConfig(
        type="stellar",
        endpoints=("https://horizon1.example.com", "https://horizon2.example.com"),
        native=NativeAssetConfig(name="Stellar", symbol="XLM", coin_id="stellar", decimals=0),
    )


@pytest.fixture()
def ripple_chain_config() -> ChainConfig:
    return ChainConfig(
        type="ripple",
        endpoints=("https://xrpl1.example.com", "https://xrpl2.example.com"),
        native=NativeAssetConfig(name="Ripple", symbol="XRP", coin_id="ripple", decimals=6),
    )


@pytest.fixture()
def evm_chain_config() -> ChainConfig:
    return ChainConfig(
        type="evm",
        endpoints=("https://eth1.example.com",),
        native=NativeAssetConfig(
            name="Ethereum", symbol="ETH", coin_id="ethereum", decimals=18
        ),
        tokens=(
            TokenConfig(
                name="Tether USD",
                symbol="USDT",
                coin_id="tether",
                contract="0xdAC17F958D2ee523a2206206994597C13D831ec7",
            ),
            TokenConfig(
                name="USD Coin",
                symbol="USDC",
                coin_id="usd-coin",
                contract="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
            ),
        ),
    )


@pytest.fixture()
def sample_app_config(
    stellar_chain_config: ChainConfig,
    ripple_chain_config: ChainConfig,
    evm_chain_config: ChainConfig,
) -> AppConfig:
    return AppConfig(
        engine=EngineConfig(probe_timeout=1.0, request_timeout=2.0, max_concurrent_accounts=4),
        chains={
            "stellar": stellar_chain_config,
            "ripple": ripple_chain_config,
            "ethereum": evm_chain_config,
        },
        price_oracle=PriceOracleConfig(
            provider="coingecko",
            coingecko=CoinGeckoConfig(base_url="https://prices.example.com/simple/price"),
        ),
    )


# ---------------------------------------------------------------------------
# Price fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_prices() -> dict[str, Decimal]:
    return {
        "stellar": Decimal("0.10"),
        "ripple": Decimal("0.50"),
        "ethereum": Decimal("3000"),
        "tether": Decimal("1.00"),
        "usd-coin": Decimal("1.00"),
    }


@pytest.fixture()
def price_map(sample_prices: dict[str, Decimal]) -> PriceMap:
    return PriceMap(sample_prices)


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_http() -> MagicMock:
    """HttpClient stand-in whose get_json / post_json are AsyncMocks."""
    http = MagicMock(spec=HttpClient)
    http.get_json = AsyncMock(return_value=HttpResponse(200, {}))
    http.post_json = AsyncMock(return_value=HttpResponse(200, {}))
    return http


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    engine:
      probe_timeout: 2
      request_timeout: 10
      max_concurrent_accounts: 4
    chains:
      stellar:
        type: stellar
        endpoints: ["https://horizon.example.com"]
        native: {name: Stellar, symbol: XLM, coin_id: stellar, decimals: 0}
      ripple:
        type: ripple
        endpoints: ["https://xrpl1.example.com", "https://xrpl2.example.com"]
        native: {name: Ripple, symbol: XRP, coin_id: ripple, decimals: 6}
      ethereum:
        type: evm
        endpoints: ["https://eth.example.com"]
        native: {name: Ethereum, symbol: ETH, coin_id: ethereum, decimals: 18}
    price_oracle:
      provider: coingecko
      coingecko:
        base_url: "https://prices.example.com/simple/price"
        vs_currency: usd
        timeout: 5
    accounts:
      - id: alice
        username: alice
        role: standard
        addresses:
          stellar: "GALICE"
      - id: ops
        username: operator
        role: operator
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
