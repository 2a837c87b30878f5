"""Least-squares OPR/DPR/CCWM attribution for one event."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from domain.common import Match

RATING_DECIMALS = 2


@dataclass(frozen=True)
class TeamRatings:
    opr: float
    dpr: float
    ccwm: float


@dataclass(frozen=True)
class SolvedRatings:
    """Ratings for every team of the event."""

    ratings: dict[str, TeamRatings]

    @property
    def indeterminate(self) -> bool:
        return False


@dataclass(frozen=True)
class IndeterminateRatings:
    """The participation matrix cannot be inverted; no ratings exist for the event."""

    reason: str
    team_count: int = 0
    rank: int = 0

    @property
    def indeterminate(self) -> bool:
        return True


RatingSolution = SolvedRatings | IndeterminateRatings


@dataclass(frozen=True)
class ParticipationSystem:
    """Normal-equation system A.x = B shared by the three rating vectors."""

    teams: tuple[str, ...]
    matrix: np.ndarray
    opr_totals: np.ndarray
    dpr_totals: np.ndarray
    ccwm_totals: np.ndarray


def build_participation_system(
    matches: Sequence[Match],
    teams: Sequence[str],
) -> ParticipationSystem:
    """Accumulate partner counts and score totals over scored matches."""
    team_to_index = {team: index for index, team in enumerate(teams)}
    size = len(team_to_index)

    matrix = np.zeros((size, size), dtype=float)
    opr_totals = np.zeros(size, dtype=float)
    dpr_totals = np.zeros(size, dtype=float)
    ccwm_totals = np.zeros(size, dtype=float)

    for match in matches:
        if not match.scored:
            continue
        for alliance, opponent in (match.alliances, match.alliances[::-1]):
            indices = [team_to_index[team] for team in alliance.teams if team in team_to_index]
            margin = alliance.score - opponent.score
            for i in indices:
                opr_totals[i] += alliance.score
                dpr_totals[i] += opponent.score
                ccwm_totals[i] += margin
                for j in indices:
                    matrix[i, j] += 1.0

    return ParticipationSystem(
        teams=tuple(team_to_index),
        matrix=matrix,
        opr_totals=opr_totals,
        dpr_totals=dpr_totals,
        ccwm_totals=ccwm_totals,
    )


def _round(value: float) -> float:
    # +0.0 folds negative zero.
    return round(float(value), RATING_DECIMALS) + 0.0


def solve_event_ratings(matches: Sequence[Match], teams: Sequence[str]) -> RatingSolution:
    """Solve OPR, DPR and CCWM for every team, or report the event as indeterminate."""
    system = build_participation_system(matches, teams)
    size = len(system.teams)
    if size == 0:
        return IndeterminateRatings(reason="no teams in scored matches")

    rank = int(np.linalg.matrix_rank(system.matrix))
    if rank < size:
        return IndeterminateRatings(
            reason=f"participation matrix is singular (rank {rank} < {size} teams)",
            team_count=size,
            rank=rank,
        )

    totals = np.column_stack((system.opr_totals, system.dpr_totals, system.ccwm_totals))
    try:
        solution = np.linalg.solve(system.matrix, totals)
    except np.linalg.LinAlgError as exc:
        return IndeterminateRatings(reason=str(exc), team_count=size, rank=rank)

    ratings = {
        team: TeamRatings(
            opr=_round(solution[index, 0]),
            dpr=_round(solution[index, 1]),
            ccwm=_round(solution[index, 2]),
        )
        for index, team in enumerate(system.teams)
    }
    return SolvedRatings(ratings=ratings)
