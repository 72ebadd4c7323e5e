"""EVM balance provider: native coin plus registered ERC-20 tokens."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from decimal import Decimal, localcontext
from typing import TYPE_CHECKING, Any

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3

from ...models import Asset, PriceMap
from .tokens import ERC20_ABI

if TYPE_CHECKING:
    from ...config import ChainConfig, TokenConfig

logger = logging.getLogger(__name__)

Web3Factory = Callable[[str], Any]

# Digits in the largest uint256 balance.
UINT256_PRECISION = 78


def make_web3_factory(timeout: float) -> Web3Factory:
    """Return a factory building an ``AsyncWeb3`` per RPC endpoint."""

    def factory(endpoint: str) -> AsyncWeb3:
        provider = AsyncHTTPProvider(
            endpoint, request_kwargs={"timeout": aiohttp.ClientTimeout(total=timeout)}
        )
        return AsyncWeb3(provider)

    return factory


def _scaled(raw: Any, decimals: Any) -> Decimal:
    """Exact ``raw / 10**decimals`` for any uint256 ``raw``."""
    with localcontext() as ctx:
        ctx.prec = UINT256_PRECISION
        return Decimal(int(raw)).scaleb(-int(decimals))


class EvmBalanceProvider:
    """Fetch native and token balances from an EVM JSON-RPC endpoint.

    Each token is queried independently: a token whose contract call fails
    is logged and skipped without affecting the native balance or the other
    tokens. Token decimals are read from the contract on every query.
    """

    def __init__(
        self,
        chain: str,
        config: ChainConfig,
        web3_factory: Web3Factory,
    ) -> None:
        self.chain = chain
        self.endpoints = tuple(config.endpoints)
        self.native = config.native
        self.tokens = tuple(config.tokens)
        self._web3_factory = web3_factory
        self._clients: dict[str, Any] = {}

    def _client(self, endpoint: str) -> Any:
        client = self._clients.get(endpoint)
        if client is None:
            client = self._web3_factory(endpoint)
            self._clients[endpoint] = client
        return client

    async def probe(self, endpoint: str) -> None:
        """``eth_blockNumber``; needs no account."""
        await self._client(endpoint).eth.block_number

    def _asset(
        self, name: str, symbol: str, coin_id: str, quantity: Decimal, prices: PriceMap
    ) -> Asset:
        with localcontext() as ctx:
            ctx.prec = UINT256_PRECISION
            price, value = prices.value_of(coin_id, quantity)
        return Asset(
            name=name,
            symbol=symbol,
            chain=self.chain,
            quantity=quantity,
            price=price,
            value=value,
        )

    async def _token_quantity(self, w3: Any, token: TokenConfig, owner: str) -> Decimal:
        contract = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(token.contract), abi=ERC20_ABI
        )
        raw, decimals = await asyncio.gather(
            contract.functions.balanceOf(owner).call(),
            contract.functions.decimals().call(),
        )
        return _scaled(raw, decimals)

    async def get_balances(
        self, endpoint: str, address: str, prices: PriceMap
    ) -> list[Asset]:
        w3 = self._client(endpoint)
        owner = AsyncWeb3.to_checksum_address(address)

        assets: list[Asset] = []

        wei = await w3.eth.get_balance(owner)
        native_qty = _scaled(wei, self.native.decimals)
        if native_qty > 0:
            assets.append(
                self._asset(
                    self.native.name, self.native.symbol, self.native.coin_id,
                    native_qty, prices,
                )
            )

        results = await asyncio.gather(
            *(self._token_quantity(w3, token, owner) for token in self.tokens),
            return_exceptions=True,
        )
        for token, result in zip(self.tokens, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning(
                    "%s token %s query failed for %s: %s",
                    self.chain, token.symbol, address, result,
                )
                continue
            if result > 0:
                assets.append(
                    self._asset(token.name, token.symbol, token.coin_id, result, prices)
                )

        return assets
