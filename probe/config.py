"""
User configuration file support.

Reads ``~/.netprobe/config.json``.

Supported keys::

    retries = 3                       # attempts per candidate
    backoff = 0.5                     # seconds before the 2nd attempt, doubled after
    request_timeout = 10.0            # seconds per attempt
    latency_urls = [...]              # ordered fallback candidates
    download_urls = [...]
    upload_urls = [...]
    download_measure_payload = false  # use received bytes instead of the fixed size
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from .constants import (
    DEFAULT_BACKOFF,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETRIES,
    DOWNLOAD_URLS,
    LATENCY_URLS,
    MAX_BACKOFF,
    MAX_REQUEST_TIMEOUT,
    MAX_RETRIES,
    MIN_RETRIES,
    UPLOAD_URLS,
)
from .errors import InvalidConfiguration

_CONFIG_DIR = os.path.join(Path.home(), ".netprobe")
_CONFIG_FILE = "config.json"


def _config_path() -> str:
    return os.path.join(_CONFIG_DIR, _CONFIG_FILE)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULTS: Dict[str, Any] = {
    "retries": DEFAULT_RETRIES,
    "backoff": DEFAULT_BACKOFF,
    "request_timeout": DEFAULT_REQUEST_TIMEOUT,
    "latency_urls": list(LATENCY_URLS),
    "download_urls": list(DOWNLOAD_URLS),
    "upload_urls": list(UPLOAD_URLS),
    "download_measure_payload": False,
}


# ---------------------------------------------------------------------------
# Read / Write
# ---------------------------------------------------------------------------

def load_config() -> Dict[str, Any]:
    """Load config from disk, returning defaults for missing keys."""
    path = _config_path()
    config = dict(DEFAULTS)

    if not os.path.isfile(path):
        return config

    try:
        with open(path, encoding="utf-8") as fh:
            user = json.load(fh)
        if isinstance(user, dict):
            config.update(user)
    except (json.JSONDecodeError, IOError):
        pass  # corrupt file; use defaults

    return config


# ---------------------------------------------------------------------------
# Typed settings
# ---------------------------------------------------------------------------

def _url_list(name: str, value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        raise InvalidConfiguration(f"{name} must be a list of URLs")
    if not all(isinstance(u, str) and u.strip() for u in value):
        raise InvalidConfiguration(f"{name} must contain only non-empty URL strings")
    return list(value)


def _flag(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise InvalidConfiguration(f"{name} must be true or false")
    return value


@dataclass
class ProbeSettings:
    """Validated knobs for one measurement engine."""

    retries: int = DEFAULT_RETRIES
    backoff: float = DEFAULT_BACKOFF
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    latency_urls: List[str] = field(default_factory=lambda: list(LATENCY_URLS))
    download_urls: List[str] = field(default_factory=lambda: list(DOWNLOAD_URLS))
    upload_urls: List[str] = field(default_factory=lambda: list(UPLOAD_URLS))
    download_measure_payload: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ProbeSettings:
        merged = {**DEFAULTS, **data}
        try:
            return cls(
                retries=int(merged["retries"]),
                backoff=float(merged["backoff"]),
                request_timeout=float(merged["request_timeout"]),
                latency_urls=_url_list("latency_urls", merged["latency_urls"]),
                download_urls=_url_list("download_urls", merged["download_urls"]),
                upload_urls=_url_list("upload_urls", merged["upload_urls"]),
                download_measure_payload=_flag(
                    "download_measure_payload", merged["download_measure_payload"]
                ),
            )
        except (TypeError, ValueError) as exc:
            raise InvalidConfiguration(f"Malformed configuration: {exc}") from exc

    def validate(self) -> None:
        """Raise ``InvalidConfiguration`` if any setting is out of range."""
        if not MIN_RETRIES <= self.retries <= MAX_RETRIES:
            raise InvalidConfiguration(f"Retries must be between {MIN_RETRIES} and {MAX_RETRIES}")
        if not 0 <= self.backoff <= MAX_BACKOFF:
            raise InvalidConfiguration(f"Backoff must be between 0 and {MAX_BACKOFF} s")
        if not 0 < self.request_timeout <= MAX_REQUEST_TIMEOUT:
            raise InvalidConfiguration(
                f"Request timeout must be greater than 0 and at most {MAX_REQUEST_TIMEOUT} s"
            )
        for name in ("latency_urls", "download_urls", "upload_urls"):
            if not getattr(self, name):
                raise InvalidConfiguration(f"{name} must list at least one URL")
