"""
HTTP transport for the probes.

All network work goes through a single ``aiohttp.ClientSession`` managed via
the async-context-manager protocol (``async with HttpTransport() as t: ...``).
Any transport-level failure surfaces as ``TransportError`` so the retry loop
only ever has to catch one exception type.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

import aiohttp

from .constants import COMMON_HEADERS, DEFAULT_REQUEST_TIMEOUT
from .errors import TransportError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RequestConfig:
    """Method, headers, and body for one request.

    ``read_body`` asks for the response payload too; otherwise the request
    completes as soon as the status line and headers arrive.
    """

    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    read_body: bool = False


@dataclass
class Response:
    """A completed HTTP exchange."""

    url: str
    status: int
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    async def request(self, url: str, config: RequestConfig) -> Response:
        ...


# ---------------------------------------------------------------------------
# aiohttp implementation
# ---------------------------------------------------------------------------

class HttpTransport:
    """Async context-manager wrapping one ``aiohttp.ClientSession``."""

    def __init__(self, timeout: float = DEFAULT_REQUEST_TIMEOUT) -> None:
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    # -- Context manager ----------------------------------------------------

    async def __aenter__(self) -> HttpTransport:
        self._session = aiohttp.ClientSession(
            headers=COMMON_HEADERS,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._session:
            await self._session.close()
            self._session = None

    # -- Internal helpers ---------------------------------------------------

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError(
                "HttpTransport must be used as an async context manager "
                "(async with HttpTransport() as transport: ...)"
            )
        return self._session

    # -- Public methods -----------------------------------------------------

    async def request(self, url: str, config: RequestConfig) -> Response:
        """Perform one request; the body is read only if *config* asks for it.

        The status is returned as-is; deciding whether it counts as a
        failure is the retry loop's job.
        """
        session = self._ensure_session()

        try:
            async with session.request(
                config.method,
                url,
                headers=config.headers or None,
                data=config.body,
            ) as resp:
                if config.read_body:
                    body = await resp.read()
                else:
                    body = b""
                    resp.close()
                logger.debug("%s %s -> %d (%d bytes)", config.method, url, resp.status, len(body))
                return Response(url=url, status=resp.status, body=body)
        except asyncio.TimeoutError as exc:
            raise TransportError(url, "request timed out") from exc
        except (aiohttp.ClientError, OSError) as exc:
            raise TransportError(url, str(exc) or type(exc).__name__) from exc
