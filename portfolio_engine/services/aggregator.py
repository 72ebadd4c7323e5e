"""Portfolio valuation orchestration: accounts x chains, one price fetch per batch."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from decimal import Decimal

from ..chains.endpoints import EndpointSelector
from ..exceptions import AccountNotFoundError, EndpointUnavailableError, ForbiddenError
from ..interfaces.chain import BalanceProvider
from ..interfaces.price_oracle import PriceOracle
from ..interfaces.stores import AccountStore
from ..models import (
    ZERO,
    Account,
    AccountPortfolio,
    BalanceOutcome,
    BulkPortfolioResult,
    OutcomeStatus,
    PlatformTotal,
    PortfolioResult,
    PriceMap,
)
from ..wallets.resolver import AddressResolver

logger = logging.getLogger(__name__)


class ValuationBatch:
    """State shared by every query of one aggregation call.

    Both members are written once when the batch opens (prices) or on first
    use per chain (endpoint selections) and only read afterwards.
    """

    def __init__(self, prices: PriceMap, endpoints: EndpointSelector) -> None:
        self.prices = prices
        self.endpoints = endpoints


class PortfolioAggregator:
    """Value one account, or every account for an operator.

    Valuation runs in two phases: addresses are resolved first (which may
    persist self-healed addresses), then balances are read and valued without
    side effects. Per-chain and per-account failures are settled into
    outcomes and never abort the request.
    """

    def __init__(
        self,
        accounts: AccountStore,
        resolver: AddressResolver,
        providers: Mapping[str, BalanceProvider],
        oracle: PriceOracle,
        *,
        coin_ids: tuple[str, ...],
        price_defaults: Mapping[str, Decimal] | None = None,
        probe_timeout: float = 5.0,
        request_timeout: float = 15.0,
        max_concurrent_accounts: int = 8,
    ) -> None:
        if max_concurrent_accounts < 1:
            raise ValueError("max_concurrent_accounts must be at least 1")
        self._accounts = accounts
        self._resolver = resolver
        self._providers = dict(providers)
        self._oracle = oracle
        self._coin_ids = tuple(coin_ids)
        self._price_defaults = dict(price_defaults or {})
        self._probe_timeout = probe_timeout
        self._request_timeout = request_timeout
        self._max_concurrent_accounts = max_concurrent_accounts

    # ------------------------------------------------------------------
    # Batch helpers
    # ------------------------------------------------------------------

    async def _load(self, account_id: str) -> Account:
        account = await self._accounts.find_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    async def _open_batch(self) -> ValuationBatch:
        prices = PriceMap(
            await self._oracle.fetch_prices(self._coin_ids), self._price_defaults
        )
        missing = prices.missing(self._coin_ids)
        if missing:
            defaulted = [c for c in missing if c in self._price_defaults]
            logger.warning(
                "Price oracle degraded: no price for %s (defaults used for %s)",
                ", ".join(missing), ", ".join(defaulted) or "none",
            )
        return ValuationBatch(prices, EndpointSelector(self._probe_timeout))

    # ------------------------------------------------------------------
    # Per-chain queries
    # ------------------------------------------------------------------

    async def _query_chain(
        self, batch: ValuationBatch, chain: str, address: str
    ) -> BalanceOutcome:
        provider = self._providers[chain]
        try:
            endpoint = await batch.endpoints.select(
                chain, provider.endpoints, provider.probe
            )
        except EndpointUnavailableError as e:
            return BalanceOutcome(chain, OutcomeStatus.UNAVAILABLE, error=str(e))

        try:
            assets = await asyncio.wait_for(
                provider.get_balances(endpoint, address, batch.prices),
                timeout=self._request_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "%s balance query for %s timed out after %.1fs",
                chain, address, self._request_timeout,
            )
            return BalanceOutcome(
                chain, OutcomeStatus.TIMED_OUT,
                error=f"timed out after {self._request_timeout}s",
            )
        return BalanceOutcome(chain, OutcomeStatus.SUCCESS, assets=tuple(assets))

    async def _settle(
        self, batch: ValuationBatch, addresses: Mapping[str, str]
    ) -> list[BalanceOutcome]:
        """Run every chain query concurrently and collect all outcomes."""
        chains = [c for c in addresses if c in self._providers]
        results = await asyncio.gather(
            *(self._query_chain(batch, c, addresses[c]) for c in chains),
            return_exceptions=True,
        )

        outcomes: list[BalanceOutcome] = []
        for chain, result in zip(chains, results):
            if isinstance(result, BalanceOutcome):
                outcomes.append(result)
            elif isinstance(result, Exception):
                logger.warning(
                    "%s balance query for %s failed: %s", chain, addresses[chain], result
                )
                outcomes.append(
                    BalanceOutcome(
                        chain, OutcomeStatus.FAILED,
                        error=str(result) or type(result).__name__,
                    )
                )
            else:
                raise result
        return outcomes

    async def _value_addresses(
        self, batch: ValuationBatch, addresses: Mapping[str, str]
    ) -> PortfolioResult:
        outcomes = await self._settle(batch, addresses)
        outcomes.extend(
            BalanceOutcome(chain, OutcomeStatus.NOT_FOUND)
            for chain in self._providers
            if chain not in addresses
        )
        for outcome in outcomes:
            logger.debug(
                "Outcome %s: %s (%d asset(s)) %s",
                outcome.chain, outcome.status.value, len(outcome.assets), outcome.error,
            )

        assets = [asset for outcome in outcomes if outcome.ok for asset in outcome.assets]
        return PortfolioResult.from_assets(assets, outcomes=tuple(outcomes))

    # ------------------------------------------------------------------
    # Core workflows
    # ------------------------------------------------------------------

    async def value_account(self, account_id: str) -> PortfolioResult:
        """Value a single account's holdings across every configured chain."""
        account = await self._load(account_id)
        account, addresses = await self._resolver.resolve_all(account)

        if not addresses:
            logger.info("Account %s has no resolvable addresses", account.id)
            return PortfolioResult()

        batch = await self._open_batch()
        result = await self._value_addresses(batch, addresses)
        logger.info(
            "Valued account %s: %d asset(s), total %s",
            account.id, len(result.assets), result.total_value,
        )
        return result

    async def value_all(self, requesting_account_id: str) -> BulkPortfolioResult:
        """Value every account holding an address. Operators only."""
        requester = await self._load(requesting_account_id)
        if not requester.is_operator:
            raise ForbiddenError(requester.id)

        accounts = await self._accounts.find_many_with_any_address()
        if not accounts:
            return BulkPortfolioResult()

        batch = await self._open_batch()
        semaphore = asyncio.Semaphore(self._max_concurrent_accounts)

        async def value_one(account: Account) -> PortfolioResult:
            async with semaphore:
                account, addresses = await self._resolver.resolve_all(account)
                return await self._value_addresses(batch, addresses)

        results = await asyncio.gather(
            *(value_one(a) for a in accounts), return_exceptions=True
        )

        portfolios: list[AccountPortfolio] = []
        for account, result in zip(accounts, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning("Valuation failed for account %s: %s", account.id, result)
                result = PortfolioResult()
            portfolios.append(AccountPortfolio(account.id, account.username, result))

        logger.info(
            "Valued %d account(s); endpoints used: %s",
            len(portfolios),
            ", ".join(f"{c}={e}" for c, e in sorted(batch.endpoints.selected.items()))
            or "none",
        )
        return BulkPortfolioResult(tuple(portfolios))

    async def total_value(self, requesting_account_id: str) -> PlatformTotal:
        """Sum of every account's portfolio value. Operators only."""
        bulk = await self.value_all(requesting_account_id)
        total = sum((p.portfolio.total_value for p in bulk.portfolios), ZERO)
        return PlatformTotal(total_value=total, account_count=len(bulk.portfolios))
