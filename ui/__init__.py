"""UI layer -- Rich dashboard and output formatters."""

from .dashboard import (
    ProgressDisplay,
    console,
    create_bar,
    print_chart,
    print_header,
    print_history,
    print_run_result,
)
from .output import (
    create_result_json,
    format_share_text,
    format_text_result,
    save_json,
)

__all__ = [
    "ProgressDisplay",
    "console",
    "create_bar",
    "create_result_json",
    "format_share_text",
    "format_text_result",
    "print_chart",
    "print_header",
    "print_history",
    "print_run_result",
    "save_json",
]
