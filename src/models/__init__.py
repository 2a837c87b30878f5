"""ORM models."""

from models.base import Base
from models.event import EventCache
from models.skills_standing import SkillsStanding
from models.team_event_stats import TeamEventStats
from models.tracked_team import TrackedTeam

__all__ = [
    "Base",
    "EventCache",
    "SkillsStanding",
    "TeamEventStats",
    "TrackedTeam",
]
