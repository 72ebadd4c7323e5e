"""Stellar balance provider backed by a Horizon REST endpoint."""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

from ...http import HttpClient
from ...models import Asset, PriceMap

if TYPE_CHECKING:
    from ...config import ChainConfig

logger = logging.getLogger(__name__)


class StellarBalanceProvider:
    """Read the native XLM balance of an account from Horizon.

    Horizon reports balances as display-unit decimal strings, so the
    configured native ``decimals`` is normally 0.
    """

    def __init__(self, chain: str, config: ChainConfig, http: HttpClient) -> None:
        self.chain = chain
        self.endpoints = tuple(config.endpoints)
        self.native = config.native
        self._http = http

    @staticmethod
    def _url(endpoint: str, path: str = "") -> str:
        return endpoint.rstrip("/") + "/" + path.lstrip("/")

    async def probe(self, endpoint: str) -> None:
        """Horizon root document; needs no account."""
        response = await self._http.get_json(self._url(endpoint))
        if not response.ok:
            raise RuntimeError(f"Horizon probe returned HTTP {response.status}")

    def _native_quantity(self, data: dict[str, Any]) -> Decimal:
        for balance in data.get("balances", []):
            if balance.get("asset_type") == "native":
                try:
                    raw = Decimal(str(balance.get("balance", "0")))
                except InvalidOperation as e:
                    raise ValueError(f"Unparseable Horizon balance: {balance!r}") from e
                return raw.scaleb(-self.native.decimals)
        return Decimal(0)

    async def get_balances(
        self, endpoint: str, address: str, prices: PriceMap
    ) -> list[Asset]:
        response = await self._http.get_json(self._url(endpoint, f"accounts/{address}"))

        if response.status == 404:
            # Unfunded accounts do not exist on the ledger yet.
            logger.debug("Stellar account %s not found; treating as empty", address)
            return []
        if not response.ok or not isinstance(response.data, dict):
            raise RuntimeError(f"Horizon returned HTTP {response.status} for {address}")

        quantity = self._native_quantity(response.data)
        if quantity <= 0:
            return []

        price, value = prices.value_of(self.native.coin_id, quantity)
        return [
            Asset(
                name=self.native.name,
                symbol=self.native.symbol,
                chain=self.chain,
                quantity=quantity,
                price=price,
                value=value,
            )
        ]
