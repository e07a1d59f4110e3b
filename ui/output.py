"""
Output formatting -- JSON export, plain text, and share text.
"""
from __future__ import annotations

import json
import os
from typing import Any, Dict

from probe.results import TestRun
from probe.stats import format_latency, format_speed


def create_result_json(run: TestRun) -> Dict[str, Any]:
    """Build the JSON document for one run: the stored entry plus details."""
    return run.to_dict()


def save_json(result: Dict[str, Any], filepath: str) -> None:
    """Write *result* to *filepath* atomically (write-tmp then rename)."""
    dir_path = os.path.dirname(filepath) or "."
    tmp = os.path.join(dir_path, f".tmp_{os.path.basename(filepath)}")

    try:
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(result, fh, indent=2, ensure_ascii=False)
        os.replace(tmp, filepath)
    except (IOError, OSError) as exc:
        # Clean up partial temp file
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise IOError(f"Failed to save JSON to {filepath}: {exc}") from exc


# ---------------------------------------------------------------------------
# Plain-text helpers
# ---------------------------------------------------------------------------

def format_text_result(run: TestRun) -> str:
    """Plain-text lines for ``--simple`` mode."""
    lines = [
        f"Latency: {format_latency(run.latency.metric)}",
        f"Download: {format_speed(run.download_speed.metric)}",
        f"Upload: {format_speed(run.upload_speed.metric)}",
    ]
    for outcome in (run.latency, run.download_speed, run.upload_speed):
        if not outcome.success:
            lines.append(f"  {outcome.kind} failed: {outcome.error}")
    return "\n".join(lines)


def format_share_text(latency: Any, download: Any, upload: Any) -> str:
    """The copyable results block; failure markers appear verbatim."""
    return (
        "Results:\n"
        f"Latency: {latency} ms\n"
        f"Download: {download} Mbps\n"
        f"Upload: {upload} Mbps"
    )
