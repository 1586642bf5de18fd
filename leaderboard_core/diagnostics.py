"""Identifier set differences explaining why participants are missing from the board."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence


@dataclass(frozen=True)
class DiagnosticCounts:
    roster: int
    start: int
    finish: int
    displayed_overall: int


@dataclass(frozen=True)
class Diagnostics:
    # Finish identifiers with no roster entry.
    missing_in_roster: tuple[str, ...]
    # Finish identifiers with no start entry.
    missing_start: tuple[str, ...]
    # Roster identifiers with no finish entry.
    missing_finish: tuple[str, ...]
    # Roster identifiers whose finish - start was negative or not finite.
    invalid_totals: tuple[str, ...]
    counts: DiagnosticCounts


def _difference(source: Sequence[str], other: Iterable[str]) -> tuple[str, ...]:
    excluded = set(other)
    return tuple(identifier for identifier in source if identifier not in excluded)


def compute_diagnostics(
    roster_ids: Iterable[str],
    start_ids: Iterable[str],
    finish_ids: Iterable[str],
    invalid_totals: Iterable[str] = (),
    *,
    displayed_overall: int = 0,
) -> Diagnostics:
    """
    Compute the diagnostics bundle over the raw (pre-filter) identifier populations.

    Entries keep the iteration order of the population they are drawn from.
    """
    roster = list(dict.fromkeys(roster_ids))
    start = list(dict.fromkeys(start_ids))
    finish = list(dict.fromkeys(finish_ids))
    return Diagnostics(
        missing_in_roster=_difference(finish, roster),
        missing_start=_difference(finish, start),
        missing_finish=_difference(roster, finish),
        invalid_totals=tuple(invalid_totals),
        counts=DiagnosticCounts(
            roster=len(roster),
            start=len(start),
            finish=len(finish),
            displayed_overall=displayed_overall,
        ),
    )
