"""OPR/DPR/CCWM rating modules."""

from domain.opr.solver import (
    IndeterminateRatings,
    RatingSolution,
    SolvedRatings,
    TeamRatings,
    build_participation_system,
    solve_event_ratings,
)
from domain.opr.tally import TeamEventStatsRow, TeamRecord, build_stats_rows, tally_records

__all__ = [
    "IndeterminateRatings",
    "RatingSolution",
    "SolvedRatings",
    "TeamEventStatsRow",
    "TeamRatings",
    "TeamRecord",
    "build_participation_system",
    "build_stats_rows",
    "solve_event_ratings",
    "tally_records",
]
