"""Probe outcomes and the result of one full test run."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .constants import FAILURE_MARKER
from .history import HistoryEntry


@dataclass(frozen=True)
class ProbeOutcome:
    """
    Tagged result of one probe: a number, or a failure.

    ``value`` is whole milliseconds for latency and Mbps for the two
    throughput probes.  It is ``None`` exactly when the probe failed, in
    which case ``error`` says why.
    """

    kind: str
    value: Optional[Union[int, float]] = None
    error: Optional[str] = None
    source: Optional[str] = None
    elapsed_ms: int = 0

    @classmethod
    def failed(cls, kind: str, error: str, elapsed_ms: int = 0) -> ProbeOutcome:
        return cls(kind=kind, error=error, elapsed_ms=elapsed_ms)

    @property
    def success(self) -> bool:
        return self.value is not None

    @property
    def metric(self) -> Union[int, float, str]:
        """The number, or the failure marker stored in history."""
        return self.value if self.value is not None else FAILURE_MARKER

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "value": self.metric,
            "success": self.success,
            "error": self.error,
            "source": self.source,
            "elapsed_ms": self.elapsed_ms,
        }


@dataclass(frozen=True)
class TestRun:
    """The three outcomes of one ``run_test()`` and the entry it recorded."""

    __test__ = False  # keep test collectors away from the name

    latency: ProbeOutcome
    download_speed: ProbeOutcome
    upload_speed: ProbeOutcome
    entry: HistoryEntry

    def to_dict(self) -> dict:
        return {
            "timestamp": self.entry.date,
            "entry": self.entry.to_dict(),
            "latency": self.latency.to_dict(),
            "download": self.download_speed.to_dict(),
            "upload": self.upload_speed.to_dict(),
        }
