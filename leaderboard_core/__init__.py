from .diagnostics import DiagnosticCounts, Diagnostics, compute_diagnostics
from .ingestion import build_time_map, cell_value, locate_column
from .leaderboard import build_leaderboard, compute_leaderboard
from .ranking import LeaderboardResult, LeaderRow, rank_rows, reconcile
from .roster import Roster, build_roster
from .sources import (
    FeedDecodeError,
    GridProvider,
    LeaderboardError,
    MissingDatasetError,
    RaceSnapshot,
    first_available,
    load_snapshot,
    parse_csv_text,
    parse_gviz_response,
)
from .time_parser import ParsedTime, extract_time_of_day, format_duration, parse_time
from .types import Grid, Participant, TimeEntry
from .validation import HEADER_ALIASES, CategorySource, InputSanitizer, RaceConfig

__all__ = [
    "DiagnosticCounts",
    "Diagnostics",
    "compute_diagnostics",
    "build_time_map",
    "cell_value",
    "locate_column",
    "build_leaderboard",
    "compute_leaderboard",
    "LeaderboardResult",
    "LeaderRow",
    "rank_rows",
    "reconcile",
    "Roster",
    "build_roster",
    "FeedDecodeError",
    "GridProvider",
    "LeaderboardError",
    "MissingDatasetError",
    "RaceSnapshot",
    "first_available",
    "load_snapshot",
    "parse_csv_text",
    "parse_gviz_response",
    "ParsedTime",
    "extract_time_of_day",
    "format_duration",
    "parse_time",
    "Grid",
    "Participant",
    "TimeEntry",
    "HEADER_ALIASES",
    "CategorySource",
    "InputSanitizer",
    "RaceConfig",
]
