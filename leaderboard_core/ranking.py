"""Reconciliation and ranking engine (roster x start log x finish log).

Single source of truth for the leaderboard across overall and category views:
- Join: a participant is ranked only with a roster entry, a parsed start and a parsed finish.
- Total: finish - start in milliseconds; negative or non-finite totals are rejected.
- Order: ascending total, stable on roster order; ranks are 1..n with no shared places.
- Category buckets re-rank their own copies of the overall rows.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from dataclasses import replace
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from .diagnostics import Diagnostics, compute_diagnostics
from .roster import Roster
from .time_parser import extract_time_of_day, format_duration
from .types import Participant, TimeEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaderRow:
    rank: int
    bib: str
    name: str
    gender: str
    category: str
    source_category_key: str
    finish_time_of_day: str
    total_millis: int
    total_display: str
    identifier: str


@dataclass(frozen=True)
class LeaderboardResult:
    overall: tuple[LeaderRow, ...]
    by_category: Mapping[str, tuple[LeaderRow, ...]]
    diagnostics: Diagnostics


def _usable(entry: TimeEntry | None) -> bool:
    return entry is not None and entry.millis is not None


def _provisional_row(participant: Participant, finish: TimeEntry, total: int) -> LeaderRow:
    return LeaderRow(
        rank=0,
        bib=participant.bib,
        name=participant.name,
        gender=participant.gender,
        category=participant.category or participant.source_category_key,
        source_category_key=participant.source_category_key,
        finish_time_of_day=extract_time_of_day(finish.raw),
        total_millis=total,
        total_display=format_duration(total),
        identifier=participant.identifier,
    )


def rank_rows(rows: Iterable[LeaderRow]) -> tuple[LeaderRow, ...]:
    """Stable-sort by total and assign fresh 1-based ranks on copies."""
    ordered = sorted(rows, key=lambda row: row.total_millis)
    return tuple(replace(row, rank=pos) for pos, row in enumerate(ordered, start=1))


def reconcile(
    roster: Roster,
    start_times: Mapping[str, TimeEntry],
    finish_times: Mapping[str, TimeEntry],
    categories: Sequence[str],
) -> LeaderboardResult:
    """
    Join roster, start and finish logs into ranked overall and per-category rows.

    Args:
      roster: participant index from build_roster().
      start_times: identifier -> start TimeEntry.
      finish_times: identifier -> finish TimeEntry.
      categories: declared category keys, in bucket order.

    Records that cannot be ranked are dropped here and explained by the
    returned diagnostics; nothing in this function raises for bad data.
    """
    provisional: list[LeaderRow] = []
    invalid_totals: list[str] = []
    for participant in roster.all:
        finish = finish_times.get(participant.identifier)
        start = start_times.get(participant.identifier)
        if not _usable(finish) or not _usable(start):
            continue

        total = finish.millis - start.millis
        if not math.isfinite(total) or total < 0:
            logger.debug(
                f"Rejected total {total} for {participant.identifier} "
                f"(start={start.raw!r}, finish={finish.raw!r})"
            )
            invalid_totals.append(participant.identifier)
            continue

        provisional.append(_provisional_row(participant, finish, total))

    overall = rank_rows(provisional)

    by_category: dict[str, tuple[LeaderRow, ...]] = {}
    for key in categories:
        by_category[key] = rank_rows(row for row in overall if row.source_category_key == key)

    diagnostics = compute_diagnostics(
        roster.identifiers,
        start_times.keys(),
        finish_times.keys(),
        invalid_totals,
        displayed_overall=len(overall),
    )
    logger.info(
        f"Reconciled {len(overall)} ranked rows from {diagnostics.counts.roster} roster, "
        f"{diagnostics.counts.start} start and {diagnostics.counts.finish} finish identifiers "
        f"({len(invalid_totals)} invalid totals)"
    )

    return LeaderboardResult(
        overall=overall,
        by_category=MappingProxyType(by_category),
        diagnostics=diagnostics,
    )
