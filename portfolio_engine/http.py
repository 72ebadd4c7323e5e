"""Shared aiohttp client used by every HTTP-backed provider and the oracle."""
from __future__ import annotations

import logging
import ssl
from dataclasses import dataclass
from typing import Any

import aiohttp
import certifi

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpResponse:
    status: int
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpClient:
    """One lazily created ``aiohttp.ClientSession`` with a certifi TLS context.

    Transport errors and timeouts propagate as ``aiohttp.ClientError`` /
    ``asyncio.TimeoutError``; callers decide how to degrade.

    Usage::

        async with HttpClient(timeout=15) as http:
            resp = await http.get_json("https://example.com/status")
    """

    def __init__(self, timeout: float = 15.0, headers: dict[str, str] | None = None) -> None:
        self.timeout = timeout
        self.headers = dict(headers or {})
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> HttpClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            connector = aiohttp.TCPConnector(ssl=ssl_context)
            self._session = aiohttp.ClientSession(
                connector=connector, headers=self.headers
            )
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    def _timeout(self, timeout: float | None) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=timeout if timeout is not None else self.timeout)

    @staticmethod
    async def _read(response: aiohttp.ClientResponse) -> HttpResponse:
        try:
            data = await response.json(content_type=None)
        except ValueError:
            logger.debug("Non-JSON body from %s (HTTP %s)", response.url, response.status)
            data = None
        return HttpResponse(status=response.status, data=data)

    async def get_json(
        self,
        url: str,
        *,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        session = self._get_session()
        async with session.get(
            url, params=params, headers=headers, timeout=self._timeout(timeout)
        ) as response:
            return await self._read(response)

    async def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        session = self._get_session()
        async with session.post(
            url, json=payload, headers=headers, timeout=self._timeout(timeout)
        ) as response:
            return await self._read(response)
