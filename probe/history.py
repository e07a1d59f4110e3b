"""
Test history persistence.

History is one JSON array stored under the ``history`` key of a small
key-value store (``~/.netprobe/storage.json``).  Appending is a
read-modify-write of the whole array: load, append, save.  There is a single
writer (the engine, once per run), so no locking is done.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .constants import FAILURE_MARKER

logger = logging.getLogger(__name__)

Metric = Union[int, float, str]


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

_DEFAULT_DIR = os.path.join(Path.home(), ".netprobe")
_DEFAULT_FILE = "storage.json"
HISTORY_KEY = "history"


def _storage_path() -> str:
    return os.path.join(_DEFAULT_DIR, _DEFAULT_FILE)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Entry
# ---------------------------------------------------------------------------

def _coerce_metric(value: Any) -> Metric:
    if isinstance(value, bool) or value is None:
        return FAILURE_MARKER
    if isinstance(value, (int, float)):
        return value
    # Older records stored speeds as strings such as "12.34".
    try:
        return float(value)
    except (TypeError, ValueError):
        return FAILURE_MARKER


@dataclass(frozen=True)
class HistoryEntry:
    """One completed test run: three metrics plus when it happened."""

    latency: Metric
    download_speed: Metric
    upload_speed: Metric
    date: str

    @classmethod
    def from_dict(cls, data: dict) -> HistoryEntry:
        if not isinstance(data, dict) or "date" not in data:
            raise ValueError(f"not a history entry: {data!r}")
        return cls(
            latency=_coerce_metric(data.get("latency")),
            download_speed=_coerce_metric(data.get("downloadSpeed")),
            upload_speed=_coerce_metric(data.get("uploadSpeed")),
            date=str(data["date"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latency": self.latency,
            "downloadSpeed": self.download_speed,
            "uploadSpeed": self.upload_speed,
            "date": self.date,
        }


# ---------------------------------------------------------------------------
# Key-value store
# ---------------------------------------------------------------------------

class JsonFileStore:
    """String values keyed by name, kept in one JSON object on disk."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or _storage_path()

    def _read_all(self) -> Dict[str, str]:
        if not os.path.isfile(self.path):
            return {}
        try:
            with open(self.path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (json.JSONDecodeError, IOError) as exc:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        """Write *value* under *key* atomically (write-tmp then rename)."""
        data = self._read_all()
        data[key] = value

        dir_path = os.path.dirname(self.path) or "."
        os.makedirs(dir_path, exist_ok=True)
        tmp = os.path.join(dir_path, f".tmp_{os.path.basename(self.path)}")

        try:
            with open(tmp, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False)
            os.replace(tmp, self.path)
        except (IOError, OSError):
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise


# ---------------------------------------------------------------------------
# History log
# ---------------------------------------------------------------------------

class HistoryLog:
    """Append-only list of ``HistoryEntry`` stored in a key-value store."""

    def __init__(self, store: Optional[JsonFileStore] = None, key: str = HISTORY_KEY) -> None:
        self.store = store or JsonFileStore()
        self.key = key

    def load(self) -> List[HistoryEntry]:
        """Return every stored entry, oldest first.  Missing state is empty."""
        raw = self.store.get_item(self.key)
        if not raw:
            return []

        try:
            items = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("History under %r is not valid JSON; treating as empty", self.key)
            return []
        if not isinstance(items, list):
            return []

        entries: List[HistoryEntry] = []
        for item in items:
            try:
                entries.append(HistoryEntry.from_dict(item))
            except ValueError:
                continue  # skip corrupt records
        return entries

    def save(self, entries: List[HistoryEntry]) -> bool:
        """Replace the stored history.  Returns False if the write failed."""
        payload = json.dumps([e.to_dict() for e in entries], ensure_ascii=False)
        try:
            self.store.set_item(self.key, payload)
        except (IOError, OSError) as exc:
            logger.error("Error saving history: %s", exc)
            return False
        return True

    def append(self, entry: HistoryEntry) -> bool:
        return self.save(self.load() + [entry])


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def format_history_rows(entries: List[HistoryEntry]) -> List[dict]:
    """
    Flatten entries into rows suitable for tabular display.  Each dict has:
    date, latency, download, upload.
    """
    rows = []
    for e in entries:
        try:
            ts = datetime.fromisoformat(e.date).strftime("%Y-%m-%d %H:%M")
        except (ValueError, TypeError):
            ts = e.date[:16] if e.date else "?"

        rows.append({
            "date": ts,
            "latency": e.latency,
            "download": e.download_speed,
            "upload": e.upload_speed,
        })
    return rows


def sparkline(values: List[float]) -> str:
    """Single-line Unicode sparkline chart."""
    if not values:
        return ""
    bars = "▁▂▃▄▅▆▇█"
    lo, hi = min(values), max(values)
    span = hi - lo if hi > lo else 1.0
    return "".join(
        bars[min(int((v - lo) / span * (len(bars) - 1)), len(bars) - 1)]
        for v in values
    )
