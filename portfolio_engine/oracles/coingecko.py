"""CoinGecko price oracle service."""
import logging
from decimal import Decimal, InvalidOperation

from ..config import CoinGeckoConfig
from ..http import HttpClient

logger = logging.getLogger(__name__)


class CoinGeckoOracle:
    """Fetch fiat prices from CoinGecko's ``simple/price`` endpoint."""

    def __init__(self, config: CoinGeckoConfig, http: HttpClient) -> None:
        self.base_url = config.base_url
        self.api_key = config.api_key
        self.vs_currency = config.vs_currency
        self.timeout = config.timeout
        self._http = http

    async def fetch_prices(self, coin_ids: list[str] | tuple[str, ...]) -> dict[str, Decimal]:
        """Fetch current prices for ``coin_ids`` in a single request.

        Never raises: transport errors and non-200 responses yield an empty
        map, and coins missing from the response are simply absent.
        """
        prices: dict[str, Decimal] = {}

        ids = sorted(set(coin_ids))
        if not ids:
            return prices

        params = {"ids": ",".join(ids), "vs_currencies": self.vs_currency}
        headers = {"x-cg-demo-api-key": self.api_key} if self.api_key else None

        try:
            response = await self._http.get_json(
                self.base_url, params=params, headers=headers, timeout=self.timeout
            )
        except Exception as e:
            logger.error("Error fetching prices from CoinGecko: %s", e)
            return prices

        if response.status != 200 or not isinstance(response.data, dict):
            logger.error("Error fetching prices from CoinGecko: HTTP %s", response.status)
            return prices

        for coin_id in ids:
            quote = response.data.get(coin_id)
            if quote is None:
                continue
            if not isinstance(quote, dict):
                logger.warning("Ignoring malformed CoinGecko quote for %s: %r", coin_id, quote)
                continue
            raw = quote.get(self.vs_currency)
            if raw is None:
                continue
            try:
                price = Decimal(str(raw))
            except InvalidOperation:
                logger.warning("Ignoring unparseable CoinGecko price for %s: %r", coin_id, raw)
                continue
            if price >= 0:
                prices[coin_id] = price

        logger.info("Fetched %d/%d prices from CoinGecko", len(prices), len(ids))
        for coin_id, price in sorted(prices.items()):
            logger.debug("  %s: $%s", coin_id, price)

        return prices
