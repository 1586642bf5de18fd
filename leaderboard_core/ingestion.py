"""Column lookup and row extraction for hand-edited spreadsheet grids."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from .time_parser import parse_time
from .types import Grid, Row, TimeEntry
from .validation import HEADER_ALIASES, InputSanitizer

logger = logging.getLogger(__name__)


def locate_column(
    headers: Sequence[Any],
    field: str,
    aliases: Mapping[str, Sequence[str]] | None = None,
) -> int:
    """Return the index of the first header matching one of ``field``'s aliases.

    A header matches when, lower-cased and trimmed, it equals an alias or
    contains it as a substring ("No. BIB Peserta" matches "bib"). Returns -1
    when no header matches; callers then read "" for that field on every row.
    """
    table = aliases if aliases is not None else HEADER_ALIASES
    candidates = [InputSanitizer.sanitize_header(a) for a in table.get(field, ())]
    candidates = [a for a in candidates if a]
    for idx, header in enumerate(headers):
        label = InputSanitizer.sanitize_header(header)
        if any(label == alias or alias in label for alias in candidates):
            return idx
    return -1


def cell_value(row: Row, index: int) -> str:
    """Trimmed text of ``row[index]``; "" for a missing column or short row."""
    if index < 0 or index >= len(row):
        return ""
    return InputSanitizer.sanitize_cell(row[index])


def split_grid(grid: Grid) -> tuple[list[str], Sequence[Row]]:
    """Split a grid into its header labels and data rows."""
    if not grid:
        return [], []
    headers = [InputSanitizer.sanitize_cell(h) for h in grid[0]]
    return headers, grid[1:]


def locate_columns(
    headers: Sequence[Any],
    fields: Sequence[str],
    aliases: Mapping[str, Sequence[str]] | None = None,
) -> dict[str, int]:
    columns = {field: locate_column(headers, field, aliases) for field in fields}
    missing = [field for field, idx in columns.items() if idx < 0]
    if missing:
        logger.debug(f"No header matched {missing}; headers were {list(headers)}")
    return columns


def build_time_map(
    grid: Grid,
    aliases: Mapping[str, Sequence[str]] | None = None,
) -> dict[str, TimeEntry]:
    """Index a start or finish log by identifier.

    Rows without an identifier are skipped. Unparsable times are kept with
    ``millis=None`` so the raw value stays visible to diagnostics. When an
    identifier repeats, the later row replaces the earlier one.
    """
    headers, rows = split_grid(grid)
    columns = locate_columns(headers, ("identifier", "time"), aliases)

    entries: dict[str, TimeEntry] = {}
    for row in rows:
        identifier = cell_value(row, columns["identifier"])
        if not identifier:
            continue
        raw = cell_value(row, columns["time"])
        entries[identifier] = TimeEntry(millis=parse_time(raw).millis, raw=raw)
    return entries
