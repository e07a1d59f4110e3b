"""netprobe measurement core -- retry/fallback, probes, and history."""

from .config import ProbeSettings, load_config
from .download import DownloadTester
from .engine import MeasurementEngine
from .errors import (
    AllSourcesFailed,
    InvalidConfiguration,
    ProbeError,
    RequestFailed,
    TransportError,
)
from .history import HistoryEntry, HistoryLog, JsonFileStore
from .latency import LatencyTester
from .results import ProbeOutcome, TestRun
from .retry import fetch_with_fallback, fetch_with_retry
from .stats import elapsed_seconds, format_latency, format_speed, throughput_mbps
from .transport import HttpTransport, RequestConfig, Response
from .upload import UploadTester

__all__ = [
    "AllSourcesFailed",
    "DownloadTester",
    "HistoryEntry",
    "HistoryLog",
    "HttpTransport",
    "InvalidConfiguration",
    "JsonFileStore",
    "LatencyTester",
    "MeasurementEngine",
    "ProbeError",
    "ProbeOutcome",
    "ProbeSettings",
    "RequestConfig",
    "RequestFailed",
    "Response",
    "TestRun",
    "TransportError",
    "UploadTester",
    "elapsed_seconds",
    "fetch_with_fallback",
    "fetch_with_retry",
    "format_latency",
    "format_speed",
    "load_config",
    "throughput_mbps",
]
