"""Build the injected provider set and aggregator from configuration."""
from __future__ import annotations

import logging
from collections.abc import Callable
from decimal import Decimal
from typing import Any

from ..chains.evm import EvmBalanceProvider, make_web3_factory
from ..chains.ripple import RippleBalanceProvider
from ..chains.stellar import StellarBalanceProvider
from ..config import AppConfig, ChainConfig, EngineConfig
from ..http import HttpClient
from ..interfaces.chain import BalanceProvider
from ..interfaces.price_oracle import PriceOracle
from ..interfaces.stores import AccountStore, RecoveryPhraseStore
from ..oracles import CoinGeckoOracle
from ..wallets.resolver import AddressResolver
from .aggregator import PortfolioAggregator

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[str, ChainConfig, HttpClient, EngineConfig], BalanceProvider]

# Registry of balance provider factories keyed by chain type.
_PROVIDER_FACTORIES: dict[str, ProviderFactory] = {
    "stellar": lambda name, cfg, http, engine: StellarBalanceProvider(name, cfg, http),
    "ripple": lambda name, cfg, http, engine: RippleBalanceProvider(name, cfg, http),
    "evm": lambda name, cfg, http, engine: EvmBalanceProvider(
        name, cfg, make_web3_factory(engine.request_timeout)
    ),
}

_ORACLE_FACTORIES: dict[str, Callable[[AppConfig, HttpClient], Any]] = {
    "coingecko": lambda cfg, http: CoinGeckoOracle(cfg.price_oracle.coingecko, http),
}


def build_providers(config: AppConfig, http: HttpClient) -> dict[str, BalanceProvider]:
    providers: dict[str, BalanceProvider] = {}
    for chain_name, chain_cfg in config.chains.items():
        factory = _PROVIDER_FACTORIES.get(chain_cfg.type)
        if factory is None:
            logger.warning("No balance provider for chain type '%s'", chain_cfg.type)
            continue
        providers[chain_name] = factory(chain_name, chain_cfg, http, config.engine)
    return providers


def build_oracle(config: AppConfig, http: HttpClient) -> PriceOracle:
    factory = _ORACLE_FACTORIES.get(config.price_oracle.provider)
    if factory is None:
        raise ValueError(f"Unknown price oracle provider '{config.price_oracle.provider}'")
    return factory(config, http)


def build_aggregator(
    config: AppConfig,
    http: HttpClient,
    accounts: AccountStore,
    phrases: RecoveryPhraseStore,
) -> PortfolioAggregator:
    """Wire stores, resolver, providers and oracle into an aggregator.

    The caller owns ``http`` and must close it (``async with HttpClient()``).
    """
    resolver = AddressResolver(
        accounts,
        phrases,
        chain_types={name: chain.type for name, chain in config.chains.items()},
    )
    return PortfolioAggregator(
        accounts,
        resolver,
        build_providers(config, http),
        build_oracle(config, http),
        coin_ids=config.coin_ids,
        price_defaults={k: Decimal(str(v)) for k, v in config.price_oracle.defaults.items()},
        probe_timeout=config.engine.probe_timeout,
        request_timeout=config.engine.request_timeout,
        max_concurrent_accounts=config.engine.max_concurrent_accounts,
    )
