"""
Upload speed probe.

POSTs 1 MB of zero bytes through the fallback chain and divides 8 megabits
by the elapsed time.  The payload size is exact, but nothing checks that
the echo endpoint actually kept all of it.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, List, Optional, Sequence

from .constants import (
    DEFAULT_BACKOFF,
    DEFAULT_RETRIES,
    PROBE_UPLOAD,
    UPLOAD_HEADERS,
    UPLOAD_PAYLOAD_BYTES,
    UPLOAD_PAYLOAD_MEGABITS,
    UPLOAD_URLS,
)
from .errors import ProbeError
from .results import ProbeOutcome
from .retry import Sleep, fetch_with_fallback
from .stats import elapsed_ms, elapsed_seconds, throughput_mbps
from .transport import RequestConfig, Transport

logger = logging.getLogger(__name__)


class UploadTester:
    """Estimate upload throughput from one timed POST."""

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
        self.urls: List[str] = list(UPLOAD_URLS if urls is None else urls)
        self.retries = retries
        self.backoff = backoff
        self.clock = clock
        self.sleep = sleep

    @staticmethod
    def build_payload() -> bytes:
        return bytes(UPLOAD_PAYLOAD_BYTES)

    async def measure(self) -> ProbeOutcome:
        config = RequestConfig(
            method="POST",
            headers=dict(UPLOAD_HEADERS),
            body=self.build_payload(),
        )
        start = self.clock()

        try:
            response = await fetch_with_fallback(
                self.transport,
                self.urls,
                config,
                retries=self.retries,
                backoff=self.backoff,
                sleep=self.sleep,
            )
        except ProbeError as exc:
            logger.error("Upload speed test failed: %s", exc)
            return ProbeOutcome.failed(PROBE_UPLOAD, str(exc), elapsed_ms(start, self.clock()))

        end = self.clock()
        speed = throughput_mbps(UPLOAD_PAYLOAD_MEGABITS * 1_000_000, elapsed_seconds(start, end))

        logger.info("Calculated upload speed: %.2f Mbps (%s)", speed, response.url)
        return ProbeOutcome(
            kind=PROBE_UPLOAD,
            value=speed,
            source=response.url,
            elapsed_ms=elapsed_ms(start, end),
        )
