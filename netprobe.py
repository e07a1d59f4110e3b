#!/usr/bin/env python3
"""
netprobe -- latency, download, and upload checks from the terminal.

Usage::

    python netprobe.py                     # rich dashboard
    python netprobe.py --simple            # plain text
    python netprobe.py --json              # JSON to stdout
    python netprobe.py -o result.json      # save to file
    python netprobe.py --history           # show past results
    python netprobe.py --share             # print copyable results text
    python netprobe.py --retries 5 --backoff 1
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional

from probe.config import ProbeSettings, load_config
from probe.engine import MeasurementEngine
from probe.errors import InvalidConfiguration
from probe.history import HistoryLog
from probe.logging_config import configure_logging
from probe.results import TestRun
from probe.transport import HttpTransport
from ui.dashboard import ProgressDisplay, console, print_header, print_history, print_run_result
from ui.output import create_result_json, format_share_text, format_text_result, save_json

logger = logging.getLogger("netprobe")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

def build_settings(args: argparse.Namespace, file_config: Dict[str, Any]) -> ProbeSettings:
    """Merge CLI overrides onto the config file and validate the result."""
    overrides: Dict[str, Any] = {}
    if args.retries is not None:
        overrides["retries"] = args.retries
    if args.backoff is not None:
        overrides["backoff"] = args.backoff
    if args.timeout is not None:
        overrides["request_timeout"] = args.timeout
    if args.measure_payload:
        overrides["download_measure_payload"] = True

    settings = ProbeSettings.from_dict({**file_config, **overrides})
    settings.validate()
    return settings


# ---------------------------------------------------------------------------
# Core test runner
# ---------------------------------------------------------------------------

async def run_netprobe(
    settings: ProbeSettings,
    *,
    json_output: bool = False,
    output_file: Optional[str] = None,
    simple: bool = False,
    share: bool = False,
    history: Optional[HistoryLog] = None,
) -> TestRun:
    """Execute one full test run, render it, and return it."""

    show_ui = not json_output and not simple

    if show_ui:
        print_header()
        progress = ProgressDisplay()
        progress.start("Measuring latency, download, and upload...")

    try:
        async with HttpTransport(timeout=settings.request_timeout) as transport:
            engine = MeasurementEngine(transport, settings, history=history)
            run = await engine.run_test()
    finally:
        if show_ui:
            progress.stop()

    if show_ui:
        print_run_result(run)
    elif simple:
        print(format_text_result(run))

    result_json = create_result_json(run)

    if json_output:
        print(json.dumps(result_json, indent=2))

    if output_file:
        save_json(result_json, output_file)
        if not json_output:
            console.print(f"\n[green]Results saved to:[/green] {output_file}")

    if share:
        share_text = format_share_text(
            run.entry.latency, run.entry.download_speed, run.entry.upload_speed
        )
        if show_ui:
            from rich.panel import Panel
            console.print(Panel(share_text, title="Share This Result", border_style="cyan"))
        else:
            print("\n" + share_text)

    return run


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="netprobe -- quick latency and throughput checks",
    )
    # Output modes
    parser.add_argument("--json", "-j", action="store_true", help="Output results as JSON")
    parser.add_argument("--output", "-o", type=str, metavar="FILE", help="Save results to JSON file")
    parser.add_argument("--simple", "-s", action="store_true", help="Simple output mode (no dashboard)")
    parser.add_argument("--share", action="store_true", help="Print copyable result text")

    # Test parameters (default: config file)
    parser.add_argument("--retries", type=int, metavar="N", help="Attempts per endpoint (default: 3)")
    parser.add_argument("--backoff", type=float, metavar="SECS", help="Initial retry delay, doubled each retry (default: 0.5)")
    parser.add_argument("--timeout", type=float, metavar="SECS", help="Per-request timeout (default: 10)")
    parser.add_argument(
        "--measure-payload",
        action="store_true",
        help="Use the bytes actually downloaded instead of the fixed 100 kB estimate",
    )

    # History
    parser.add_argument("--history", action="store_true", help="Show past test results and exit")
    parser.add_argument("--limit", type=int, default=20, metavar="N", help="History rows to show (default: 20, 0 = all)")

    parser.add_argument("--verbose", "-v", action="store_true", help="Log every attempt to stderr")
    return parser


def main(argv: Optional[list] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else None)

    if args.limit < 0:
        console.print("[red]Error: --limit must be 0 or greater[/red]")
        sys.exit(1)

    # History mode
    if args.history:
        print_history(HistoryLog().load(), limit=args.limit)
        return

    # Validate
    try:
        settings = build_settings(args, load_config())
    except InvalidConfiguration as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)

    try:
        asyncio.run(
            run_netprobe(
                settings,
                json_output=args.json,
                output_file=args.output,
                simple=args.simple,
                share=args.share,
            )
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Test cancelled by user[/yellow]")
        sys.exit(1)
    except Exception as exc:
        logger.debug("Unhandled error", exc_info=True)
        console.print(f"\n[red]Error: {exc}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
