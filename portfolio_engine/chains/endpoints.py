"""Batch-scoped endpoint selection with ordered health-probe fallback."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from ..exceptions import EndpointUnavailableError

logger = logging.getLogger(__name__)

Probe = Callable[[str], Awaitable[object]]


class EndpointSelector:
    """Pick the first healthy endpoint per chain and remember it for the batch.

    Candidates are probed strictly in the given order, each at most once.
    Concurrent callers asking for the same ``(chain, candidates)`` pair share
    a single in-flight probe sequence, so the number of probes in a batch is
    bounded by the number of distinct pairs rather than by the number of
    balance queries.

    If no candidate answers, ``select`` raises ``EndpointUnavailableError``
    for every caller of that pair until the selector is discarded.
    """

    def __init__(self, probe_timeout: float) -> None:
        self.probe_timeout = probe_timeout
        self._selections: dict[tuple[str, tuple[str, ...]], asyncio.Task[str]] = {}

    async def select(self, chain: str, candidates: Sequence[str], probe: Probe) -> str:
        key = (chain, tuple(candidates))
        task = self._selections.get(key)
        if task is None:
            task = asyncio.ensure_future(self._probe_in_order(chain, key[1], probe))
            self._selections[key] = task
        # Shielded so one cancelled waiter does not cancel the shared probe.
        return await asyncio.shield(task)

    @property
    def selected(self) -> dict[str, str]:
        """Endpoints chosen so far, by chain (completed selections only)."""
        chosen: dict[str, str] = {}
        for (chain, _), task in self._selections.items():
            if task.done() and not task.cancelled() and task.exception() is None:
                chosen[chain] = task.result()
        return chosen

    async def _probe_in_order(
        self, chain: str, candidates: tuple[str, ...], probe: Probe
    ) -> str:
        for index, endpoint in enumerate(candidates):
            try:
                await asyncio.wait_for(probe(endpoint), timeout=self.probe_timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "%s endpoint %s did not answer within %.1fs",
                    chain, endpoint, self.probe_timeout,
                )
                continue
            except Exception as e:
                logger.warning("%s endpoint %s failed health probe: %s", chain, endpoint, e)
                continue

            if index > 0:
                logger.info("Falling back to %s endpoint: %s", chain, endpoint)
            else:
                logger.debug("Using %s endpoint: %s", chain, endpoint)
            return endpoint

        logger.warning("All %d %s endpoint(s) failed health probe", len(candidates), chain)
        raise EndpointUnavailableError(chain, len(candidates))
