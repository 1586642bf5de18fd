"""Type definitions shared by ingestion, roster building and ranking."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

# A raw tabular feed: row 0 holds header labels, every further row holds raw
# cell values (str, int, float or None).
Row = Sequence[Any]
Grid = Sequence[Row]


@dataclass(frozen=True)
class Participant:
    """A registered participant read from one category roster sheet."""
    identifier: str
    bib: str
    name: str
    gender: str
    category: str  # Display label, falls back to source_category_key
    source_category_key: str  # Sheet the record was read from; used for bucketing


@dataclass(frozen=True)
class TimeEntry:
    """A single recorded time for one identifier in a start or finish log."""
    millis: int | None
    raw: str
