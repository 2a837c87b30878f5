"""Read-only access to the tracked-team roster."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from models import TrackedTeam


def fetch_tracked_team_numbers(session: Session) -> list[str]:
    """Tracked team numbers, most recently tracked first."""
    statement = select(TrackedTeam.team_number).order_by(
        TrackedTeam.created_at.desc(),
        TrackedTeam.team_number,
    )
    return list(session.scalars(statement).all())
