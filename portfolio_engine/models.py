"""Data models: all frozen (immutable)."""
from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any

ZERO = Decimal(0)


class Role(str, enum.Enum):
    STANDARD = "standard"
    OPERATOR = "operator"


@dataclass(frozen=True)
class Account:
    """A user or operator identity with at most one address per chain."""

    id: str
    username: str = ""
    role: Role = Role.STANDARD
    addresses: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_operator(self) -> bool:
        return self.role is Role.OPERATOR

    def address_for(self, chain: str) -> str | None:
        return self.addresses.get(chain) or None

    def with_addresses(self, addresses: Mapping[str, str]) -> Account:
        """Return a copy with ``addresses`` merged over the existing ones."""
        merged = dict(self.addresses)
        merged.update(addresses)
        return replace(self, addresses=merged)


@dataclass(frozen=True)
class Asset:
    """Single valued holding on one chain."""

    name: str
    symbol: str
    chain: str
    quantity: Decimal
    price: Decimal = ZERO
    value: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "chain": self.chain,
            "quantity": float(self.quantity),
            "price": float(self.price),
            "value": float(self.value),
        }


def sort_key(asset: Asset) -> tuple[Decimal, str, str, str]:
    """Descending by value, then stable on identity fields."""
    return (-asset.value, asset.symbol, asset.chain, asset.name)


class PriceMap:
    """Batch-scoped fiat prices keyed by oracle coin id.

    A coin missing from the oracle response is priced from ``defaults`` when
    one is configured, otherwise at zero.
    """

    def __init__(
        self,
        prices: Mapping[str, Decimal] | None = None,
        defaults: Mapping[str, Decimal] | None = None,
    ) -> None:
        self._prices = dict(prices or {})
        self._defaults = dict(defaults or {})

    def __len__(self) -> int:
        return len(self._prices)

    def __contains__(self, coin_id: object) -> bool:
        return coin_id in self._prices

    def price_for(self, coin_id: str) -> Decimal:
        price = self._prices.get(coin_id)
        if price is None:
            return self._defaults.get(coin_id, ZERO)
        return price

    def value_of(self, coin_id: str, quantity: Decimal) -> tuple[Decimal, Decimal]:
        """Return ``(price, quantity * price)`` for ``coin_id``."""
        price = self.price_for(coin_id)
        return price, quantity * price

    def missing(self, coin_ids: list[str] | tuple[str, ...]) -> list[str]:
        return [c for c in coin_ids if c not in self._prices]


class OutcomeStatus(str, enum.Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


@dataclass(frozen=True)
class BalanceOutcome:
    """Settled result of one chain balance query."""

    chain: str
    status: OutcomeStatus
    assets: tuple[Asset, ...] = ()
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS


@dataclass(frozen=True)
class PortfolioResult:
    """Valued asset list for one account.

    ``total_value`` is always the sum of ``assets`` values; ``outcomes`` is
    for observability and is not serialized.
    """

    assets: tuple[Asset, ...] = ()
    total_value: Decimal = ZERO
    outcomes: tuple[BalanceOutcome, ...] = ()

    @classmethod
    def from_assets(
        cls,
        assets: list[Asset] | tuple[Asset, ...],
        outcomes: tuple[BalanceOutcome, ...] = (),
    ) -> PortfolioResult:
        ordered = tuple(sorted((a for a in assets if a.quantity > 0), key=sort_key))
        total = sum((a.value for a in ordered), ZERO)
        return cls(assets=ordered, total_value=total, outcomes=outcomes)

    def to_dict(self) -> dict[str, Any]:
        assets = [a.to_dict() for a in self.assets]
        # totalValue is the sum of the serialized asset values.
        return {
            "assets": assets,
            "totalValue": sum((a["value"] for a in assets), 0.0),
        }


@dataclass(frozen=True)
class AccountPortfolio:
    account_id: str
    username: str
    portfolio: PortfolioResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.account_id,
            "username": self.username,
            "portfolio": self.portfolio.to_dict(),
        }


@dataclass(frozen=True)
class BulkPortfolioResult:
    portfolios: tuple[AccountPortfolio, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "isOperator": True,
            "portfolios": [p.to_dict() for p in self.portfolios],
        }


@dataclass(frozen=True)
class PlatformTotal:
    total_value: Decimal
    account_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalPortfolioValue": float(self.total_value),
            "accountCount": self.account_count,
        }
