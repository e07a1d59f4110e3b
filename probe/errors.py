"""
Error taxonomy for the measurement engine.

``TransportError`` is recovered by the retry loop, ``RequestFailed`` by the
fallback loop, and ``AllSourcesFailed`` is turned into a failure marker by
the probe that hit it.  Nothing here is fatal to a test run.
"""
from __future__ import annotations

from typing import List, Optional, Sequence


class ProbeError(Exception):
    """Base class for every error raised by the ``probe`` package."""


class InvalidConfiguration(ProbeError):
    """Settings that make a probe impossible (e.g. an empty candidate list)."""


class TransportError(ProbeError):
    """One attempt failed: network, DNS, timeout, or a non-2xx status."""

    def __init__(self, url: str, message: str, status: Optional[int] = None) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url
        self.status = status


class RequestFailed(ProbeError):
    """Every retry against a single candidate failed."""

    def __init__(self, url: str, attempts: int, cause: Optional[Exception] = None) -> None:
        super().__init__(f"{url}: failed after {attempts} attempt(s)")
        self.url = url
        self.attempts = attempts
        self.cause = cause


class AllSourcesFailed(ProbeError):
    """Every candidate in the list exhausted its retries."""

    def __init__(self, urls: Sequence[str], failures: List[RequestFailed]) -> None:
        super().__init__(f"All sources failed ({len(urls)} tried)")
        self.urls = list(urls)
        self.failures = failures
