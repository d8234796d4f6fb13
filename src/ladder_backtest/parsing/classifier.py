"""Log row classifier.

The bot appends two kinds of lines we care about::

    2024-05-01 12:00:03 | POS | 2/3 | 0.00000101 | 0.00000099 | -1.9 | 0.40 | -0.0076 | 0.0120 | 10.0120
    2024-05-01 12:00:04 | BUY confirmed sig=5xK...

Table rows become :class:`MetricSample`, confirmation lines become
:class:`BuyMarker` / :class:`SellMarker`. Everything else (headers,
errors, partial writes) is dropped silently.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from datetime import datetime

from ..core.models import BuyMarker, LogEvent, MetricSample, SellMarker

_TIMESTAMP_RE = re.compile(r"^(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})")
_TIMESTAMP_FMT = "%Y-%m-%d %H:%M:%S"

_HEADER_TOKEN = "time"
_MIN_FIELDS = 10
BUY_CONFIRMED = "BUY confirmed"
SELL_CONFIRMED = "SELL confirmed"


def parse_timestamp(line: str) -> datetime | None:
    """Leading ``YYYY-MM-DD HH:MM:SS`` of ``line``, or None."""
    match = _TIMESTAMP_RE.match(line)
    if not match:
        return None
    try:
        return datetime.strptime(match.group(1), _TIMESTAMP_FMT)
    except ValueError:
        # Right shape, impossible date (e.g. month 13)
        return None


def _to_float(raw: str) -> float | None:
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_table_row(line: str, ts: datetime | None = None) -> MetricSample | None:
    """Parse one pipe-delimited status row."""
    if "|" not in line or line.startswith(_HEADER_TOKEN):
        return None
    parts = [p.strip() for p in line.split("|")]
    if len(parts) < _MIN_FIELDS:
        return None
    ts = ts or parse_timestamp(line)
    if ts is None:
        return None
    return MetricSample(
        timestamp=ts,
        mode=parts[1],
        step=parts[2],
        avg_cost=_to_float(parts[3]),
        price=_to_float(parts[4]),
        move_pct=_to_float(parts[5]),
        position_sol=_to_float(parts[6]),
        trade_pnl=_to_float(parts[7]),
        wallet_pnl=_to_float(parts[8]),
        sol_balance=_to_float(parts[9]),
    )


def classify_line(line: str) -> LogEvent | None:
    """Classify one raw log line. Pure; never raises."""
    ts = parse_timestamp(line)
    if ts is None:
        return None
    if BUY_CONFIRMED in line:
        return BuyMarker(timestamp=ts)
    if SELL_CONFIRMED in line:
        return SellMarker(timestamp=ts)
    return parse_table_row(line, ts)


def classify_lines(lines: Iterable[str]) -> list[LogEvent]:
    """Classify lines in log order, dropping the ignored ones."""
    events: list[LogEvent] = []
    for line in lines:
        event = classify_line(line)
        if event is not None:
            events.append(event)
    return events
