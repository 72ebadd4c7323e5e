"""Balance provider protocol: per-chain balance fetching."""
from typing import Protocol

from ..models import Asset, PriceMap


class BalanceProvider(Protocol):
    """Abstract interface for reading one chain's balances for one address."""

    chain: str
    endpoints: tuple[str, ...]

    async def probe(self, endpoint: str) -> None: ...

    async def get_balances(
        self, endpoint: str, address: str, prices: PriceMap
    ) -> list[Asset]: ...
