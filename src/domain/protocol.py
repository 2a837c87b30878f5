"""Shared protocols for the analysis pipeline's collaborators."""

from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable

from domain.common import Division, EventRef, Match


class OutcomeStatus(str, Enum):
    """What happened to one event handed to the processor."""

    PROCESSED = "processed"
    SKIPPED = "skipped"


@runtime_checkable
class EventDataProvider(Protocol):
    """Read-only access to remote event, team and match data."""

    def find_team_id(self, team_number: str) -> int | None: ...

    def get_team_events(self, team_id: int, season_id: int) -> list[EventRef]: ...

    def get_event_divisions(self, event: EventRef) -> tuple[Division, ...]: ...

    def get_division_matches(self, event_id: int, division_id: int) -> list[Match]: ...


__all__ = ["EventDataProvider", "OutcomeStatus"]
