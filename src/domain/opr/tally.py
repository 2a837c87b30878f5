"""Win/loss/tie tallies and persisted stat rows for one event."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from domain.common import Match
from domain.opr.solver import RatingSolution, SolvedRatings, TeamRatings

_ZERO_RATINGS = TeamRatings(opr=0.0, dpr=0.0, ccwm=0.0)


@dataclass
class TeamRecord:
    wins: int = 0
    losses: int = 0
    ties: int = 0

    @property
    def played(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def win_rate(self) -> float:
        return self.wins / self.played if self.played else 0.0


@dataclass(frozen=True)
class TeamEventStatsRow:
    """One team's stats for one event, ready for upsert."""

    team_number: str
    sku: str
    opr: float
    dpr: float
    ccwm: float
    win_rate: float
    wins: int
    losses: int
    ties: int


def tally_records(matches: Sequence[Match], teams: Sequence[str]) -> dict[str, TeamRecord]:
    """Count wins/losses/ties over scored matches; strictly greater score wins."""
    records = {team: TeamRecord() for team in teams}
    for match in matches:
        if not match.scored:
            continue
        for alliance, opponent in (match.alliances, match.alliances[::-1]):
            for team in alliance.teams:
                record = records.setdefault(team, TeamRecord())
                if alliance.score > opponent.score:
                    record.wins += 1
                elif alliance.score < opponent.score:
                    record.losses += 1
                else:
                    record.ties += 1
    return records


def build_stats_rows(
    sku: str,
    teams: Sequence[str],
    solution: RatingSolution,
    records: dict[str, TeamRecord],
) -> list[TeamEventStatsRow]:
    """Merge ratings and records; teams without ratings get zeros."""
    ratings = solution.ratings if isinstance(solution, SolvedRatings) else {}
    rows: list[TeamEventStatsRow] = []
    for team in teams:
        team_ratings = ratings.get(team, _ZERO_RATINGS)
        record = records.get(team, TeamRecord())
        rows.append(
            TeamEventStatsRow(
                team_number=team,
                sku=sku,
                opr=team_ratings.opr,
                dpr=team_ratings.dpr,
                ccwm=team_ratings.ccwm,
                win_rate=record.win_rate,
                wins=record.wins,
                losses=record.losses,
                ties=record.ties,
            )
        )
    return rows
