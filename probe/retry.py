"""
Retry-with-backoff and fallback-across-candidates.

Both helpers are plain loops: ``fetch_with_retry`` owns an attempt counter
and a backoff delay that doubles after every failure, ``fetch_with_fallback``
walks the candidate list in order and stops at the first success.  The
``sleep`` coroutine is injectable so tests can record delays instead of
waiting for them.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from .constants import DEFAULT_BACKOFF, DEFAULT_RETRIES
from .errors import AllSourcesFailed, InvalidConfiguration, RequestFailed, TransportError
from .transport import RequestConfig, Response, Transport

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

_GET = RequestConfig()


async def fetch_with_retry(
    transport: Transport,
    url: str,
    config: Optional[RequestConfig] = None,
    retries: int = DEFAULT_RETRIES,
    backoff: float = DEFAULT_BACKOFF,
    sleep: Sleep = asyncio.sleep,
) -> Response:
    """
    Request *url* up to *retries* times.

    The delay before attempt *k* (k >= 2) is ``backoff * 2 ** (k - 2)``;
    there is no jitter and no cap.  Raises ``RequestFailed`` chained to the
    last ``TransportError`` once every attempt has failed.
    """
    if retries < 1:
        raise InvalidConfiguration(f"retries must be >= 1, got {retries}")
    if backoff < 0:
        raise InvalidConfiguration(f"backoff must be >= 0, got {backoff}")

    config = config or _GET
    delay = backoff
    last_error: Optional[TransportError] = None

    for attempt in range(1, retries + 1):
        if attempt > 1:
            await sleep(delay)
            delay *= 2

        try:
            response = await transport.request(url, config)
        except TransportError as exc:
            last_error = exc
        else:
            if response.ok:
                return response
            last_error = TransportError(
                url, f"Failed to fetch: {response.status}", status=response.status
            )

        logger.debug("Attempt %d/%d for %s failed: %s", attempt, retries, url, last_error)

    raise RequestFailed(url, retries, cause=last_error) from last_error


async def fetch_with_fallback(
    transport: Transport,
    urls: Sequence[str],
    config: Optional[RequestConfig] = None,
    retries: int = DEFAULT_RETRIES,
    backoff: float = DEFAULT_BACKOFF,
    sleep: Sleep = asyncio.sleep,
) -> Response:
    """
    Try each candidate in *urls*, in order, with the full retry budget.

    Returns the first successful response (its ``url`` names the candidate
    that answered).  Candidates after a success are never contacted.
    """
    if not urls:
        raise InvalidConfiguration("candidate URL list is empty")

    failures: List[RequestFailed] = []

    for url in urls:
        try:
            return await fetch_with_retry(
                transport, url, config, retries=retries, backoff=backoff, sleep=sleep
            )
        except RequestFailed as exc:
            failures.append(exc)
            logger.warning("Failed to fetch from %s, trying next URL if available", url)

    raise AllSourcesFailed(urls, failures)
