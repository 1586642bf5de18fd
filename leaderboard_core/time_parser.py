"""Time cell parsing and display helpers.

Timing feeds mix three representations of the same instant:
- 13-digit epoch milliseconds written by the chip reader,
- date-time strings (``YYYY-MM-DD HH:MM:SS[.fff]``) typed or exported by hand,
- bare durations (``[HH:]MM:SS[.fff]``) relative to the race clock.

parse_time() maps all of them onto integer milliseconds so that
``finish - start`` is meaningful as long as both sides use the same form.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from .validation import InputSanitizer

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)

_EPOCH_MILLIS_RE = re.compile(r"[0-9]{13}")
_DATE_PREFIX_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}")
_DATE_SPACE_TIME_RE = re.compile(r"^([0-9]{4}-[0-9]{2}-[0-9]{2})\s+([0-9]{2}:[0-9]{2}:[0-9]{2})")
_EMBEDDED_TIME_RE = re.compile(r"([0-9]{2}:[0-9]{2}:[0-9]{2})(?:\.([0-9]+))?")
_LOOSE_CLOCK_RE = re.compile(r"^[0-9]{1,2}:[0-9]{2}(:[0-9]{2})?")


@dataclass(frozen=True)
class ParsedTime:
    millis: int | None
    is_absolute: bool


_UNPARSED = ParsedTime(millis=None, is_absolute=False)


def _number_or_zero(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value


def _fraction_millis(fraction: str) -> int:
    # Sub-millisecond digits are truncated, never rounded.
    digits = fraction.ljust(3, "0")[:3]
    return int(_number_or_zero(digits))


def _parse_datetime(text: str) -> int | None:
    candidate = _DATE_SPACE_TIME_RE.sub(r"\1T\2", text, count=1)
    try:
        moment = datetime.fromisoformat(candidate)
        if moment.tzinfo is None and len(candidate) == 10:
            # Date-only values are UTC midnight.
            moment = moment.replace(tzinfo=timezone.utc)
        elif moment.tzinfo is None:
            # Naive date-times are wall-clock times at the venue, i.e. local time.
            moment = moment.astimezone()
        return (moment - _EPOCH) // _ONE_MS
    except (ValueError, OverflowError):
        # Placeholder dates such as 0001-01-01 fall off the calendar once shifted.
        return None


def _parse_clock_duration(text: str) -> int | None:
    parts = [part.strip() for part in text.split(":")]
    if len(parts) not in (2, 3):
        return None
    hours = _number_or_zero(parts[0]) if len(parts) == 3 else 0.0
    minutes = _number_or_zero(parts[-2])
    seconds_pieces = parts[-1].split(".")
    seconds_part = seconds_pieces[0]
    fraction = seconds_pieces[1] if len(seconds_pieces) > 1 else ""
    seconds = _number_or_zero(seconds_part)
    fraction_ms = _fraction_millis(fraction) if fraction else 0
    total = (((hours * 60 + minutes) * 60 + seconds) * 1000) + fraction_ms
    if not math.isfinite(total):
        return None
    return int(total)


def parse_time(raw: Any) -> ParsedTime:
    """Convert a raw time cell to milliseconds.

    Precedence (first match wins):
      1. exactly 13 digits -> epoch milliseconds (absolute)
      2. ``YYYY-MM-DD[ HH:MM:SS...]`` -> ISO date-time (absolute)
      3. 2 or 3 colon-separated parts -> ``[h:]m:s[.fff]`` duration (relative)

    Examples:
        - "1700000000000" -> ParsedTime(1700000000000, True)
        - "01:02:03.456" -> ParsedTime(3723456, False)
        - "61:00" -> ParsedTime(3660000, False)
        - "" / None / "abc" -> ParsedTime(None, False)
    """
    text = InputSanitizer.sanitize_cell(raw)
    if not text:
        return _UNPARSED

    if _EPOCH_MILLIS_RE.fullmatch(text):
        return ParsedTime(millis=int(text), is_absolute=True)

    if _DATE_PREFIX_RE.match(text):
        # A calendar date is never read as a race-clock duration.
        absolute = _parse_datetime(text)
        if absolute is None:
            return _UNPARSED
        return ParsedTime(millis=absolute, is_absolute=True)

    duration = _parse_clock_duration(text)
    if duration is not None:
        return ParsedTime(millis=duration, is_absolute=False)

    return _UNPARSED


def extract_time_of_day(raw: Any) -> str:
    """Best-effort ``HH:MM:SS.fff`` display string for a raw time cell.

    Tolerates values parse_time() rejects; returns the raw text unchanged
    when no clock-like substring is present and ``"-"`` for empty input.
    """
    text = InputSanitizer.sanitize_cell(raw)
    if not text:
        return "-"

    match = _EMBEDDED_TIME_RE.search(text)
    if match:
        clock, fraction = match.group(1), match.group(2) or ""
        return f"{clock}.{fraction.ljust(3, '0')[:3]}"

    if _LOOSE_CLOCK_RE.match(text):
        return text if "." in text else f"{text}.000"

    return text


def format_duration(millis: float | None) -> str:
    """Render milliseconds as ``HH:MM:SS`` (floored, hours may exceed 24)."""
    if millis is None or not math.isfinite(millis):
        return "-"
    total_seconds = int(millis // 1000)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
