"""
HTTP latency probe.

Latency here is the wall-clock time until the first successful GET across
the whole fallback chain.  Failed candidates, retries and backoff sleeps all
count towards it, so the number is an upper bound rather than a ping.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, List, Optional, Sequence

from .constants import DEFAULT_BACKOFF, DEFAULT_RETRIES, LATENCY_URLS, PROBE_LATENCY
from .errors import ProbeError
from .results import ProbeOutcome
from .retry import Sleep, fetch_with_fallback
from .stats import elapsed_ms
from .transport import RequestConfig, Transport

logger = logging.getLogger(__name__)


class LatencyTester:
    """Time a single GET against the latency candidates."""

    def __init__(
        self,
        transport: Transport,
        urls: Optional[Sequence[str]] = None,
        retries: int = DEFAULT_RETRIES,
        backoff: float = DEFAULT_BACKOFF,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.transport = transport
        self.urls: List[str] = list(LATENCY_URLS if urls is None else urls)
        self.retries = retries
        self.backoff = backoff
        self.clock = clock
        self.sleep = sleep

    async def measure(self) -> ProbeOutcome:
        start = self.clock()

        try:
            response = await fetch_with_fallback(
                self.transport,
                self.urls,
                RequestConfig(),
                retries=self.retries,
                backoff=self.backoff,
                sleep=self.sleep,
            )
        except ProbeError as exc:
            logger.error("Latency test failed: %s", exc)
            return ProbeOutcome.failed(PROBE_LATENCY, str(exc), elapsed_ms(start, self.clock()))

        latency = elapsed_ms(start, self.clock())
        logger.info("Calculated latency: %d ms (%s)", latency, response.url)
        return ProbeOutcome(
            kind=PROBE_LATENCY,
            value=latency,
            source=response.url,
            elapsed_ms=latency,
        )
