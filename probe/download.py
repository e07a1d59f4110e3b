"""
Download speed probe.

One GET through the fallback chain, timed end to end.  By default the
transferred size is the fixed ``DOWNLOAD_ASSUMED_BYTES`` rather than the
size of what actually came back: the candidates point at resources of
different sizes, so the speed is only accurate when the first candidate
answers.  ``measure_payload=True`` uses the received body length instead.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, List, Optional, Sequence

from .constants import (
    DEFAULT_BACKOFF,
    DEFAULT_RETRIES,
    DOWNLOAD_ASSUMED_BYTES,
    DOWNLOAD_URLS,
    PROBE_DOWNLOAD,
)
from .errors import ProbeError
from .results import ProbeOutcome
from .retry import Sleep, fetch_with_fallback
from .stats import elapsed_ms, elapsed_seconds, throughput_mbps
from .transport import RequestConfig, Transport

logger = logging.getLogger(__name__)


class DownloadTester:
    """Estimate download throughput from one timed GET."""

    def __init__(
        self,
        transport: Transport,
        urls: Optional[Sequence[str]] = None,
        retries: int = DEFAULT_RETRIES,
        backoff: float = DEFAULT_BACKOFF,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Sleep = asyncio.sleep,
        assumed_bytes: int = DOWNLOAD_ASSUMED_BYTES,
        measure_payload: bool = False,
    ) -> None:
        self.transport = transport
        self.urls: List[str] = list(DOWNLOAD_URLS if urls is None else urls)
        self.retries = retries
        self.backoff = backoff
        self.clock = clock
        self.sleep = sleep
        self.assumed_bytes = assumed_bytes
        self.measure_payload = measure_payload

    async def measure(self) -> ProbeOutcome:
        start = self.clock()

        try:
            response = await fetch_with_fallback(
                self.transport,
                self.urls,
                RequestConfig(read_body=self.measure_payload),
                retries=self.retries,
                backoff=self.backoff,
                sleep=self.sleep,
            )
        except ProbeError as exc:
            logger.error("Download speed test failed: %s", exc)
            return ProbeOutcome.failed(PROBE_DOWNLOAD, str(exc), elapsed_ms(start, self.clock()))

        end = self.clock()
        size_bytes = len(response.body) if self.measure_payload else self.assumed_bytes
        speed = throughput_mbps(size_bytes * 8, elapsed_seconds(start, end))

        logger.info("Calculated download speed: %.2f Mbps (%s)", speed, response.url)
        return ProbeOutcome(
            kind=PROBE_DOWNLOAD,
            value=speed,
            source=response.url,
            elapsed_ms=elapsed_ms(start, end),
        )
