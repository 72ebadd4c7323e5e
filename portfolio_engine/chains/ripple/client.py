"""XRP Ledger balance provider backed by a rippled JSON-RPC endpoint."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from ...http import HttpClient
from ...models import Asset, PriceMap

if TYPE_CHECKING:
    from ...config import ChainConfig

logger = logging.getLogger(__name__)

ACCOUNT_NOT_FOUND = "actNotFound"


class RippleRpcError(RuntimeError):
    """rippled answered with ``status: error``."""

    def __init__(self, error: str, message: str = "") -> None:
        self.error = error
        super().__init__(f"RPC Error: {error} {message}".strip())


class RippleBalanceProvider:
    """Read the native XRP balance (in drops) of an account."""

    def __init__(self, chain: str, config: ChainConfig, http: HttpClient) -> None:
        self.chain = chain
        self.endpoints = tuple(config.endpoints)
        self.native = config.native
        self._http = http

    async def rpc_call(
        self, endpoint: str, method: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Make one rippled RPC call against ``endpoint``."""
        payload = {"method": method, "params": [params or {}]}
        response = await self._http.post_json(endpoint, payload)
        if not response.ok or not isinstance(response.data, dict):
            raise RuntimeError(f"rippled returned HTTP {response.status}")

        result = response.data.get("result", {})
        if result.get("status") == "error" or "error" in result:
            raise RippleRpcError(
                result.get("error", "unknown"), result.get("error_message", "")
            )
        return result

    async def probe(self, endpoint: str) -> None:
        await self.rpc_call(endpoint, "server_info")

    async def get_balances(
        self, endpoint: str, address: str, prices: PriceMap
    ) -> list[Asset]:
        try:
            result = await self.rpc_call(
                endpoint,
                "account_info",
                {"account": address, "ledger_index": "validated"},
            )
        except RippleRpcError as e:
            if e.error == ACCOUNT_NOT_FOUND:
                logger.debug("XRPL account %s not found; treating as empty", address)
                return []
            raise

        drops = result.get("account_data", {}).get("Balance")
        if drops is None:
            return []

        quantity = Decimal(str(drops)).scaleb(-self.native.decimals)
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
