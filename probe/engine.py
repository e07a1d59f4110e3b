"""
Measurement engine -- runs the three probes and records one history entry.

The probes run concurrently under ``asyncio.gather``.  Each one returns its
``ProbeOutcome`` and the history entry is built from exactly those return
values, so an entry can never mix results from different runs.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, List, Optional

from .config import ProbeSettings
from .constants import PROBE_DOWNLOAD, PROBE_LATENCY, PROBE_UPLOAD
from .download import DownloadTester
from .history import HistoryEntry, HistoryLog, utc_now_iso
from .latency import LatencyTester
from .results import ProbeOutcome, TestRun
from .retry import Sleep
from .transport import Transport
from .upload import UploadTester

logger = logging.getLogger(__name__)


async def _settle(kind: str, probe: Awaitable[ProbeOutcome]) -> ProbeOutcome:
    """Await *probe*; anything it raises becomes that probe's failure."""
    try:
        return await probe
    except Exception as exc:  # noqa: BLE001
        logger.exception("%s probe crashed", kind)
        return ProbeOutcome.failed(kind, f"{type(exc).__name__}: {exc}")


class MeasurementEngine:
    """Runs latency, download, and upload probes against one transport."""

    def __init__(
        self,
        transport: Transport,
        settings: Optional[ProbeSettings] = None,
        history: Optional[HistoryLog] = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Sleep = asyncio.sleep,
        now: Callable[[], str] = utc_now_iso,
    ) -> None:
        self.settings = settings or ProbeSettings()
        self.history = history or HistoryLog()
        self.now = now

        common = dict(
            retries=self.settings.retries,
            backoff=self.settings.backoff,
            clock=clock,
            sleep=sleep,
        )
        self.latency_tester = LatencyTester(transport, self.settings.latency_urls, **common)
        self.download_tester = DownloadTester(
            transport,
            self.settings.download_urls,
            measure_payload=self.settings.download_measure_payload,
            **common,
        )
        self.upload_tester = UploadTester(transport, self.settings.upload_urls, **common)

    async def run_test(self) -> TestRun:
        """Run all three probes, wait for every one, and record the run."""
        latency, download, upload = await asyncio.gather(
            _settle(PROBE_LATENCY, self.latency_tester.measure()),
            _settle(PROBE_DOWNLOAD, self.download_tester.measure()),
            _settle(PROBE_UPLOAD, self.upload_tester.measure()),
        )

        entry = HistoryEntry(
            latency=latency.metric,
            download_speed=download.metric,
            upload_speed=upload.metric,
            date=self.now(),
        )
        if not self.history.append(entry):
            logger.warning("Test run finished but history could not be saved")

        return TestRun(
            latency=latency,
            download_speed=download,
            upload_speed=upload,
            entry=entry,
        )

    def get_history(self) -> List[HistoryEntry]:
        """Every recorded run, oldest first."""
        return self.history.load()
