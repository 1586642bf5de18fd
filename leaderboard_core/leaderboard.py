"""Leaderboard pipeline (pure, no network/DB).

Architecture:
- The display layer supplies raw grids, either as a ready RaceSnapshot or via a GridProvider
- build_leaderboard() runs: roster sheets -> build_roster(); start/finish logs -> build_time_map();
  then reconcile() ranks overall and per category and collects diagnostics
- Every call rebuilds the result from the snapshot; nothing is cached or mutated

Failure semantics:
- Bad rows (no identifier, unparsable time, negative total, unmatched identifier) never raise;
  they are excluded from ranking and listed in LeaderboardResult.diagnostics
- A grid that cannot be obtained at all raises MissingDatasetError from load_snapshot()
"""
from __future__ import annotations

import logging

from .ingestion import build_time_map
from .ranking import LeaderboardResult, reconcile
from .roster import build_roster
from .sources import GridProvider, RaceSnapshot, load_snapshot
from .validation import RaceConfig

logger = logging.getLogger(__name__)


def build_leaderboard(snapshot: RaceSnapshot, config: RaceConfig) -> LeaderboardResult:
    """Reconcile an already-fetched snapshot into ranked rows and diagnostics.

    Args:
        snapshot: Grids for every declared category plus start and finish logs
        config: Declared categories (bucket order) and header aliases

    Returns:
        LeaderboardResult with overall rows, per-category rows and diagnostics
    """
    aliases = config.header_aliases
    roster = build_roster(snapshot.category_grids, aliases)
    start_times = build_time_map(snapshot.start_grid, aliases)
    finish_times = build_time_map(snapshot.finish_grid, aliases)
    logger.debug(
        f"Snapshot ingested: {len(roster.all)} participants, "
        f"{len(start_times)} start and {len(finish_times)} finish entries"
    )
    return reconcile(roster, start_times, finish_times, config.category_keys)


def compute_leaderboard(config: RaceConfig, provider: GridProvider) -> LeaderboardResult:
    """Fetch a full snapshot through ``provider`` and build the leaderboard.

    Raises:
        MissingDatasetError: If any roster, start or finish grid is unavailable
    """
    snapshot = load_snapshot(config, provider)
    return build_leaderboard(snapshot, config)
