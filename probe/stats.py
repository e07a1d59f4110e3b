"""
Measurement arithmetic and formatting.

Pure functions and lightweight dataclasses -- no I/O, no side effects.
Everything here is deterministic and easy to unit-test.
"""
from __future__ import annotations

import statistics
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .constants import FAILURE_MARKER, MIN_ELAPSED_SECONDS
from .history import Metric


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

def elapsed_seconds(start: float, end: float) -> float:
    """Seconds between two clock readings, floored at the clock resolution.

    A request that completes within one clock tick reads as zero elapsed
    time; the floor keeps the throughput formulas finite.
    """
    elapsed = end - start
    if elapsed <= 0:
        return MIN_ELAPSED_SECONDS
    return elapsed


def elapsed_ms(start: float, end: float) -> int:
    """Whole milliseconds between two clock readings (never negative)."""
    return max(int(round((end - start) * 1000)), 0)


def throughput_mbps(size_bits: float, seconds: float) -> float:
    """``size_bits / seconds`` in megabits per second, rounded to 2 places."""
    if seconds <= 0:
        raise ValueError(f"elapsed time must be positive, got {seconds}")
    return round(size_bits / seconds / 1_000_000, 2)


# ---------------------------------------------------------------------------
# History summaries
# ---------------------------------------------------------------------------

@dataclass
class MetricSummary:
    """Aggregate of the numeric values of one metric across history."""

    count: int = 0
    failures: int = 0
    min: float = 0.0
    max: float = 0.0
    mean: float = 0.0
    last: Optional[float] = None


def numeric_values(values: Iterable[Metric]) -> List[float]:
    """Drop failure markers and anything else that isn't a number."""
    out: List[float] = []
    for v in values:
        if isinstance(v, bool):
            continue
        if isinstance(v, (int, float)):
            out.append(float(v))
    return out


def summarize(values: Iterable[Metric]) -> MetricSummary:
    """Summarise one metric column, counting failure markers separately."""
    values = list(values)
    numbers = numeric_values(values)
    summary = MetricSummary(count=len(numbers), failures=len(values) - len(numbers))
    if numbers:
        summary.min = min(numbers)
        summary.max = max(numbers)
        summary.mean = statistics.mean(numbers)
        summary.last = numbers[-1]
    return summary


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_speed(speed: Metric) -> str:
    """Human-readable speed string; failure markers pass through."""
    if not isinstance(speed, (int, float)):
        return FAILURE_MARKER
    if speed >= 1000:
        return f"{speed / 1000:.2f} Gbps"
    return f"{speed:.2f} Mbps"


def format_latency(latency_ms: Metric) -> str:
    """Human-readable latency string; failure markers pass through."""
    if not isinstance(latency_ms, (int, float)):
        return FAILURE_MARKER
    if latency_ms >= 1000:
        return f"{latency_ms / 1000:.2f} s"
    return f"{latency_ms} ms" if isinstance(latency_ms, int) else f"{latency_ms:.1f} ms"
