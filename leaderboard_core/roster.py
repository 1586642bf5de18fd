"""Master participant index built from the per-category roster sheets."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence

from .ingestion import cell_value, locate_columns, split_grid
from .types import Grid, Participant

logger = logging.getLogger(__name__)

_ROSTER_FIELDS = ("identifier", "bib", "name", "gender", "category")


@dataclass(frozen=True)
class Roster:
    # Unique participants, first-seen order.
    all: tuple[Participant, ...]
    # Every row read from each category sheet, duplicates included.
    by_category: Mapping[str, tuple[Participant, ...]]
    by_identifier: Mapping[str, Participant]

    @property
    def identifiers(self) -> tuple[str, ...]:
        return tuple(self.by_identifier)


def _read_category_sheet(
    category_key: str,
    grid: Grid,
    aliases: Mapping[str, Sequence[str]] | None,
) -> list[Participant]:
    headers, rows = split_grid(grid)
    columns = locate_columns(headers, _ROSTER_FIELDS, aliases)

    participants: list[Participant] = []
    for row in rows:
        identifier = cell_value(row, columns["identifier"])
        if not identifier:
            continue
        participants.append(
            Participant(
                identifier=identifier,
                bib=cell_value(row, columns["bib"]),
                name=cell_value(row, columns["name"]),
                gender=cell_value(row, columns["gender"]),
                category=cell_value(row, columns["category"]) or category_key,
                source_category_key=category_key,
            )
        )
    return participants


def build_roster(
    category_sheets: Sequence[tuple[str, Grid]],
    aliases: Mapping[str, Sequence[str]] | None = None,
) -> Roster:
    """
    Build the participant index from ``(category_key, grid)`` pairs.

    Args:
      category_sheets: roster grids in declared category order.
      aliases: header alias table (defaults to HEADER_ALIASES).

    The first category that lists an identifier owns it in ``by_identifier``;
    later sheets keep their own row in ``by_category`` but never overwrite it.
    """
    by_identifier: dict[str, Participant] = {}
    by_category: dict[str, tuple[Participant, ...]] = {}

    for category_key, grid in category_sheets:
        participants = _read_category_sheet(category_key, grid, aliases)
        for participant in participants:
            owner = by_identifier.get(participant.identifier)
            if owner is None:
                by_identifier[participant.identifier] = participant
            else:
                logger.debug(
                    f"Identifier {participant.identifier} in {category_key} already "
                    f"registered under {owner.source_category_key}; keeping the first"
                )
        by_category[category_key] = tuple(participants)

    return Roster(
        all=tuple(by_identifier.values()),
        by_category=MappingProxyType(by_category),
        by_identifier=MappingProxyType(by_identifier),
    )
