"""Repository helpers."""

from repositories.analysis_repository import (
    fetch_event_cache,
    fetch_event_stats,
    fetch_processed_skus,
    upsert_event_cache,
    upsert_team_event_stats,
)
from repositories.strength_repository import fetch_composite_scores
from repositories.tracked_team_repository import fetch_tracked_team_numbers

__all__ = [
    "fetch_composite_scores",
    "fetch_event_cache",
    "fetch_event_stats",
    "fetch_processed_skus",
    "fetch_tracked_team_numbers",
    "upsert_event_cache",
    "upsert_team_event_stats",
]
