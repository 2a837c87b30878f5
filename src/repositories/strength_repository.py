"""Composite strength aggregation over cached event stats."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from domain.strength import TeamStrength, build_team_strength
from models import EventCache, SkillsStanding, TeamEventStats


def fetch_composite_scores(
    session: Session,
    team_numbers: Sequence[str],
    *,
    season_id: int | None = None,
) -> list[TeamStrength]:
    """Composite strength for each requested team with at least one cached event.

    OPR is averaged only over events whose ratings were solvable; win rate
    over every cached event. Skills is the team's best known skills score.
    """
    if not team_numbers:
        return []

    solvable_opr = case(
        (EventCache.ratings_indeterminate.is_(True), None),
        else_=TeamEventStats.opr,
    )
    best_skills = (
        select(func.max(SkillsStanding.score))
        .where(SkillsStanding.team_number == TeamEventStats.team_number)
        .correlate(TeamEventStats)
        .scalar_subquery()
    )
    statement = (
        select(
            TeamEventStats.team_number.label("team_number"),
            func.avg(solvable_opr).label("avg_opr"),
            func.avg(TeamEventStats.win_rate).label("avg_win_rate"),
            best_skills.label("max_skills"),
        )
        .select_from(TeamEventStats)
        .outerjoin(EventCache, EventCache.sku == TeamEventStats.sku)
        .where(TeamEventStats.team_number.in_(list(team_numbers)))
        .group_by(TeamEventStats.team_number)
    )
    if season_id is not None:
        statement = statement.where(EventCache.season_id == season_id)

    rows = {row["team_number"]: row for row in session.execute(statement).mappings().all()}

    # Preserve the caller's ordering.
    return [
        build_team_strength(
            team_number,
            avg_opr=rows[team_number]["avg_opr"],
            avg_win_rate=rows[team_number]["avg_win_rate"],
            max_skills=rows[team_number]["max_skills"],
        )
        for team_number in dict.fromkeys(team_numbers)
        if team_number in rows
    ]
