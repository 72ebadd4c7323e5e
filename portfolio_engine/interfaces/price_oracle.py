"""Price oracle protocol: price feed abstraction."""
from decimal import Decimal
from typing import Protocol


class PriceOracle(Protocol):
    """Abstract interface for fetching fiat prices by oracle coin id."""

    async def fetch_prices(self, coin_ids: list[str] | tuple[str, ...]) -> dict[str, Decimal]: ...
