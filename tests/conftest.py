"""Shared fixtures: in-memory SQLite store and a scripted event-data provider."""

from __future__ import annotations

from collections.abc import Callable

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from db import create_session_factory, ensure_analysis_schema
from domain.common import Division, EventRef, Match


class FakeProvider:
    """In-memory stand-in for the RobotEvents client."""

    def __init__(self) -> None:
        self.team_ids: dict[str, int] = {}
        self.team_events: dict[int, list[EventRef]] = {}
        self.divisions: dict[int, tuple[Division, ...]] = {}
        self.matches: dict[tuple[int, int], list[Match]] = {}
        self.failures: dict[int, Exception] = {}
        self.match_requests: list[tuple[int, int]] = []

    def find_team_id(self, team_number: str) -> int | None:
        return self.team_ids.get(team_number)

    def get_team_events(self, team_id: int, season_id: int) -> list[EventRef]:
        return list(self.team_events.get(team_id, []))

    def get_event_divisions(self, event: EventRef) -> tuple[Division, ...]:
        if event.divisions is not None:
            return event.divisions
        return self.divisions.get(event.id, (Division(id=1, name="Division 1"),))

    def get_division_matches(self, event_id: int, division_id: int) -> list[Match]:
        self.match_requests.append((event_id, division_id))
        if event_id in self.failures:
            raise self.failures[event_id]
        return list(self.matches.get((event_id, division_id), []))


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        future=True,
    )
    ensure_analysis_schema(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def echo_log() -> tuple[list[str], Callable[[str], None]]:
    messages: list[str] = []
    return messages, messages.append
