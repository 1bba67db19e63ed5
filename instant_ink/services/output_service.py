"""
Output rendering for printer readings.
Table and JSON renderings for stdout, low-ink alerts for stderr.
"""
import os
import sys
from datetime import timezone, tzinfo
from typing import List, Optional, TextIO, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from instant_ink.models.printer import PrinterReading

logger = structlog.get_logger()

# ── Colors ───────────────────────────────────────────────────────────

RED = "\033[0;31m"
YELLOW = "\033[1;33m"
GREEN = "\033[0;32m"
BLUE = "\033[0;34m"
BOLD = "\033[1m"
RESET = "\033[0m"


def use_color(stream: TextIO) -> bool:
    """Colour only interactive terminals, and never when NO_COLOR is set."""
    if os.getenv("NO_COLOR"):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


def colorize(text: str, *codes: str, stream: TextIO = sys.stdout) -> str:
    """Wrap text in ANSI codes when the target stream supports them."""
    if not codes or not use_color(stream):
        return text
    return "".join(codes) + text + RESET


def _resolve_timezone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown display timezone, falling back to UTC", timezone=name)
        return timezone.utc


def table_rows(reading: PrinterReading, timezone_name: str) -> List[Tuple[str, str]]:
    """Metric/value rows in display order."""
    local_time = reading.timestamp.astimezone(_resolve_timezone(timezone_name))
    return [
        ("Subscription Pages", str(reading.subscription_impressions)),
        ("Total Pages", str(reading.pages_printed)),
        ("Colour Ink Remaining", f"{reading.colour_ink_level}%"),
        ("Black Ink Remaining", f"{reading.black_ink_level}%"),
        ("Last Updated", local_time.strftime("%Y-%m-%d %H:%M:%S %Z")),
    ]


def format_table(reading: PrinterReading, timezone_name: str) -> str:
    """Render the reading as a rounded two-column table."""
    header = ("Metric", "Value")
    rows = table_rows(reading, timezone_name)
    metric_width = max(len(r[0]) for r in [header, *rows])
    value_width = max(len(r[1]) for r in [header, *rows])

    def line(left: str, mid: str, right: str) -> str:
        return f"{left}{'─' * (metric_width + 2)}{mid}{'─' * (value_width + 2)}{right}"

    def row(metric: str, value: str) -> str:
        return f"│ {metric.ljust(metric_width)} │ {value.ljust(value_width)} │"

    lines = [line("╭", "┬", "╮"), row(*header), line("├", "┼", "┤")]
    lines.extend(row(metric, value) for metric, value in rows)
    lines.append(line("╰", "┴", "╯"))
    return "\n".join(lines)


def format_json(reading: PrinterReading) -> str:
    """Render the reading as pretty-printed JSON."""
    return reading.to_json()


def collect_alerts(reading: PrinterReading, threshold: int) -> List[str]:
    """Low-ink messages for every channel at or below ``threshold`` percent."""
    alerts = []
    if reading.colour_ink_level <= threshold:
        alerts.append(f"LOW COLOUR INK: {reading.colour_ink_level}% remaining")
    if reading.black_ink_level <= threshold:
        alerts.append(f"LOW BLACK INK: {reading.black_ink_level}% remaining")
    return alerts


def print_alerts(reading: PrinterReading, threshold: int, stream: Optional[TextIO] = None) -> List[str]:
    """Write low-ink alerts to stderr and return them."""
    stream = stream or sys.stderr
    alerts = collect_alerts(reading, threshold)
    if alerts:
        stream.write("\n" + colorize("ALERTS:", RED, BOLD, stream=stream) + "\n")
        for alert in alerts:
            stream.write("  " + colorize(alert, YELLOW, stream=stream) + "\n")
    return alerts
