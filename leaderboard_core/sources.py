"""Feed decoding and snapshot assembly (pure, no network I/O).

The display layer owns fetching. This module gives it:
- decoders for the two publishing formats (GViz JSON wrapper and CSV),
- first_available() to try retrieval strategies in order until one yields a grid,
- load_snapshot() to collect every grid a leaderboard needs, or fail as a whole.
"""
from __future__ import annotations

import csv
import io
import json
import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

from .types import Grid
from .validation import RaceConfig

logger = logging.getLogger(__name__)

_GVIZ_WRAPPER_RE = re.compile(r"google\.visualization\.Query\.setResponse\(([\s\S]*)\);")

GridStrategy = Callable[[], Optional[Grid]]


class LeaderboardError(Exception):
    """Base class for structural failures surfaced to the caller."""


class MissingDatasetError(LeaderboardError):
    """A required grid could not be obtained; no partial leaderboard is built."""

    def __init__(self, dataset: str, detail: str | None = None):
        self.dataset = dataset
        self.detail = detail
        message = f"Could not load {dataset}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class FeedDecodeError(LeaderboardError, ValueError):
    """A fetched payload is not in the expected feed format."""


class GridProvider(Protocol):
    def fetch(self, source_id: str | int) -> Grid | None:
        ...


@dataclass(frozen=True)
class RaceSnapshot:
    # (category_key, grid) in declared order.
    category_grids: tuple[tuple[str, Grid], ...]
    start_grid: Grid
    finish_grid: Grid


def parse_gviz_response(text: str) -> Grid:
    """Decode a ``google.visualization.Query.setResponse(...)`` payload into a grid."""
    match = _GVIZ_WRAPPER_RE.search(text or "")
    if not match:
        raise FeedDecodeError("GViz parse failed: response wrapper not found")
    try:
        payload = json.loads(match.group(1))
        table = payload["table"]
        cols = table["cols"]
        rows = table["rows"]
        headers = [(col or {}).get("label") or (col or {}).get("id") or "" for col in cols]
        grid: list[list] = [headers]
        for row in rows:
            cells = (row or {}).get("c") or []
            grid.append([cell.get("v", "") if cell else "" for cell in cells])
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise FeedDecodeError(f"GViz parse failed: {e}") from e
    return grid


def parse_csv_text(text: str) -> Grid:
    """Decode published CSV text into a grid (quoted cells honoured, blank lines dropped)."""
    reader = csv.reader(io.StringIO(text or ""))
    grid: list[list[str]] = []
    for record in reader:
        cells = [cell.strip() for cell in record]
        if not any(cells):
            continue
        grid.append(cells)
    return grid


def first_available(strategies: Sequence[GridStrategy], label: str) -> Grid:
    """
    Return the grid from the first strategy that produces one.

    A strategy fails by returning None or raising; failures are logged and
    the next strategy is tried. Raises MissingDatasetError when all fail.
    """
    failures: list[str] = []
    for idx, strategy in enumerate(strategies):
        try:
            grid = strategy()
        except Exception as e:
            logger.warning(f"Retrieval strategy {idx} for {label} failed: {e}")
            failures.append(f"{type(e).__name__}: {e}")
            continue
        if grid is None:
            logger.warning(f"Retrieval strategy {idx} for {label} returned nothing")
            failures.append("no data")
            continue
        return grid
    raise MissingDatasetError(label, "; ".join(failures) or "no retrieval strategy")


def _fetch_required(provider: GridProvider, source_id: str | int, label: str) -> Grid:
    try:
        grid = provider.fetch(source_id)
    except Exception as e:
        raise MissingDatasetError(label, str(e)) from e
    if grid is None:
        raise MissingDatasetError(label, f"source {source_id} returned no data")
    return grid


def load_snapshot(config: RaceConfig, provider: GridProvider) -> RaceSnapshot:
    """Fetch every roster grid, then the start and finish grids, through ``provider``."""
    category_grids = tuple(
        (category.key, _fetch_required(provider, category.source_id, f"roster '{category.key}'"))
        for category in config.categories
    )
    start_grid = _fetch_required(provider, config.start_source, "start times")
    finish_grid = _fetch_required(provider, config.finish_source, "finish times")
    return RaceSnapshot(
        category_grids=category_grids,
        start_grid=start_grid,
        finish_grid=finish_grid,
    )
