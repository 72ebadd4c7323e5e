"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .chains.evm.tokens import registry_for
from .models import Role

logger = logging.getLogger(__name__)

CHAIN_TYPES = ("stellar", "ripple", "evm")
ORACLE_PROVIDERS = ("coingecko",)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EngineConfig:
    probe_timeout: float = 5.0
    request_timeout: float = 15.0
    max_concurrent_accounts: int = 8


@dataclass(frozen=True)
class NativeAssetConfig:
    name: str = ""
    symbol: str = ""
    coin_id: str = ""
    decimals: int = 0


@dataclass(frozen=True)
class TokenConfig:
    name: str = ""
    symbol: str = ""
    coin_id: str = ""
    contract: str = ""


@dataclass(frozen=True)
class ChainConfig:
    type: str = ""
    endpoints: tuple[str, ...] = ()
    native: NativeAssetConfig = field(default_factory=NativeAssetConfig)
    tokens: tuple[TokenConfig, ...] = ()

    @property
    def coin_ids(self) -> tuple[str, ...]:
        ids = [self.native.coin_id] + [t.coin_id for t in self.tokens]
        return tuple(i for i in ids if i)


@dataclass(frozen=True)
class CoinGeckoConfig:
    base_url: str = "https://api.coingecko.com/api/v3/simple/price"
    api_key: str = ""
    vs_currency: str = "usd"
    timeout: float = 10.0


def _default_stable_prices() -> dict[str, float]:
    return {"tether": 1.0, "usd-coin": 1.0}


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "coingecko"
    coingecko: CoinGeckoConfig = field(default_factory=CoinGeckoConfig)
    defaults: dict[str, float] = field(default_factory=_default_stable_prices)


@dataclass(frozen=True)
class AccountSeedConfig:
    id: str = ""
    username: str = ""
    role: str = Role.STANDARD.value
    addresses: dict[str, str] = field(default_factory=dict)
    recovery_phrase: str = ""


@dataclass(frozen=True)
class AppConfig:
    engine: EngineConfig = field(default_factory=EngineConfig)
    chains: dict[str, ChainConfig] = field(default_factory=dict)
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)
    accounts: tuple[AccountSeedConfig, ...] = ()

    @property
    def coin_ids(self) -> tuple[str, ...]:
        """Every oracle coin id referenced by a configured chain, deduplicated."""
        seen: dict[str, None] = {}
        for chain in self.chains.values():
            for coin_id in chain.coin_ids:
                seen.setdefault(coin_id, None)
        return tuple(seen)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_engine(raw: dict[str, Any]) -> EngineConfig:
    return EngineConfig(
        probe_timeout=float(raw.get("probe_timeout", 5.0)),
        request_timeout=float(raw.get("request_timeout", 15.0)),
        max_concurrent_accounts=int(raw.get("max_concurrent_accounts", 8)),
    )


def _build_native(name: str, raw: dict[str, Any]) -> NativeAssetConfig:
    return NativeAssetConfig(
        name=raw.get("name", name.title()),
        symbol=raw.get("symbol", name.upper()),
        coin_id=raw.get("coin_id", name),
        decimals=int(raw.get("decimals", 0)),
    )


def _build_tokens(raw: list[dict[str, Any]]) -> tuple[TokenConfig, ...]:
    return tuple(
        TokenConfig(
            name=t.get("name", t.get("symbol", "")),
            symbol=t.get("symbol", ""),
            coin_id=t.get("coin_id", ""),
            contract=t.get("contract", ""),
        )
        for t in raw
    )


def _build_chains(raw: dict[str, Any]) -> dict[str, ChainConfig]:
    chains: dict[str, ChainConfig] = {}
    for name, cfg in raw.items():
        chain_type = cfg.get("type", name)
        if "tokens" in cfg:
            tokens = _build_tokens(cfg.get("tokens") or [])
        elif chain_type == "evm":
            tokens = _build_tokens(registry_for(name))
        else:
            tokens = ()
        chains[name] = ChainConfig(
            type=chain_type,
            # Unset ${VAR} endpoints interpolate to "" and are dropped here.
            endpoints=tuple(e.strip() for e in cfg.get("endpoints", []) if e and e.strip()),
            native=_build_native(name, cfg.get("native", {})),
            tokens=tokens,
        )
    return chains


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    cg_raw = raw.get("coingecko", {})
    defaults = raw.get("defaults")
    return PriceOracleConfig(
        provider=raw.get("provider", "coingecko"),
        coingecko=CoinGeckoConfig(
            base_url=cg_raw.get("base_url", CoinGeckoConfig.base_url),
            api_key=cg_raw.get("api_key", ""),
            vs_currency=cg_raw.get("vs_currency", "usd"),
            timeout=float(cg_raw.get("timeout", 10.0)),
        ),
        defaults=(
            {k: float(v) for k, v in defaults.items()}
            if defaults is not None
            else _default_stable_prices()
        ),
    )


def _build_accounts(raw: list[dict[str, Any]]) -> tuple[AccountSeedConfig, ...]:
    accounts: list[AccountSeedConfig] = []
    for a in raw:
        accounts.append(
            AccountSeedConfig(
                id=str(a.get("id", "")),
                username=a.get("username", ""),
                role=a.get("role", Role.STANDARD.value),
                addresses={k: v for k, v in (a.get("addresses") or {}).items() if v},
                recovery_phrase=a.get("recovery_phrase", ""),
            )
        )
    return tuple(accounts)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        engine=_build_engine(raw.get("engine", {})),
        chains=_build_chains(raw.get("chains", {})),
        price_oracle=_build_price_oracle(raw.get("price_oracle", {})),
        accounts=_build_accounts(raw.get("accounts", [])),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    engine = cfg.engine
    if engine.probe_timeout <= 0 or engine.request_timeout <= 0:
        raise ValueError("Timeouts must be positive")
    if engine.probe_timeout >= engine.request_timeout:
        raise ValueError("probe_timeout must be lower than request_timeout")
    if engine.max_concurrent_accounts < 1:
        raise ValueError("max_concurrent_accounts must be at least 1")

    if cfg.price_oracle.provider not in ORACLE_PROVIDERS:
        raise ValueError(
            f"Unknown price oracle provider '{cfg.price_oracle.provider}'"
        )

    if not cfg.chains:
        raise ValueError("At least one chain must be configured")

    for name, chain in cfg.chains.items():
        if chain.type not in CHAIN_TYPES:
            raise ValueError(f"Chain '{name}' has unknown type '{chain.type}'")
        if not chain.endpoints:
            raise ValueError(f"Chain '{name}' has no endpoints")
        for token in chain.tokens:
            if not token.contract:
                raise ValueError(
                    f"Token '{token.symbol}' on chain '{name}' has no contract"
                )

    seen: set[str] = set()
    roles = {r.value for r in Role}
    for account in cfg.accounts:
        if not account.id:
            raise ValueError("Every account needs an id")
        if account.id in seen:
            raise ValueError(f"Duplicate account id '{account.id}'")
        seen.add(account.id)
        if account.role not in roles:
            raise ValueError(
                f"Account '{account.id}' has unknown role '{account.role}'"
            )
        for chain in account.addresses:
            if chain not in cfg.chains:
                raise ValueError(
                    f"Account '{account.id}' references unknown chain '{chain}'"
                )
