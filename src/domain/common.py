"""Shared value types for match data and provider payload parsing."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from domain.errors import ProviderError


@dataclass(frozen=True)
class Alliance:
    """One side of a match."""

    color: str
    score: int
    teams: tuple[str, ...]


@dataclass(frozen=True)
class Match:
    """Canonical match payload used by the rating solver and tallies."""

    match_id: int | None
    scored: bool
    alliances: tuple[Alliance, Alliance]

    def team_names(self) -> tuple[str, ...]:
        return self.alliances[0].teams + self.alliances[1].teams


@dataclass(frozen=True)
class Division:
    id: int
    name: str


@dataclass(frozen=True)
class EventRef:
    """Provider-side event reference."""

    id: int
    sku: str
    name: str | None = None
    season_id: int | None = None
    end: datetime | None = None
    divisions: tuple[Division, ...] | None = None


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp into a naive UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError as exc:
            raise ProviderError(f"Invalid timestamp from provider: {value!r}") from exc
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


def parse_divisions(raw_divisions: Any) -> tuple[Division, ...]:
    if not isinstance(raw_divisions, list):
        return ()
    divisions: list[Division] = []
    for raw in raw_divisions:
        try:
            divisions.append(Division(id=int(raw["id"]), name=str(raw.get("name", raw["id"]))))
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderError(f"Malformed division payload: {raw!r}") from exc
    return tuple(divisions)


def parse_event(raw: Mapping[str, Any]) -> EventRef:
    """Build an EventRef from a provider event object."""
    try:
        event_id = int(raw["id"])
        sku = str(raw["sku"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ProviderError(f"Malformed event payload: {raw!r}") from exc

    season = raw.get("season")
    season_id = season.get("id") if isinstance(season, Mapping) else season
    divisions = parse_divisions(raw["divisions"]) if "divisions" in raw else None

    return EventRef(
        id=event_id,
        sku=sku,
        name=raw.get("name"),
        season_id=None if season_id is None else int(season_id),
        end=parse_datetime(raw.get("end")),
        divisions=divisions,
    )


def _alliance_teams(raw_alliance: Mapping[str, Any]) -> tuple[str, ...]:
    # Flattened shape: {"team_objects": [{"name": "1234A"}, ...]}
    if "team_objects" in raw_alliance:
        return tuple(str(team["name"]) for team in raw_alliance["team_objects"])
    # API v2 shape: {"teams": [{"team": {"id": 1, "name": "1234A"}, "sitting": false}]}
    teams: list[str] = []
    for entry in raw_alliance.get("teams", []):
        team = entry.get("team", entry)
        teams.append(str(team["name"]))
    return tuple(teams)


def _parse_alliance(color: str, raw_alliance: Mapping[str, Any]) -> Alliance:
    score = raw_alliance.get("score")
    return Alliance(
        color=color,
        score=int(score) if score is not None else 0,
        teams=_alliance_teams(raw_alliance),
    )


def parse_match(raw: Mapping[str, Any]) -> Match:
    """Build a Match from either provider alliance shape (dict keyed by color, or list)."""
    raw_alliances = raw.get("alliances")
    try:
        if isinstance(raw_alliances, Mapping):
            alliances = [
                _parse_alliance(str(color), alliance)
                for color, alliance in raw_alliances.items()
            ]
        elif isinstance(raw_alliances, list):
            alliances = [
                _parse_alliance(str(alliance.get("color", index)), alliance)
                for index, alliance in enumerate(raw_alliances)
            ]
        else:
            raise ProviderError(f"Match {raw.get('id')!r} has no alliances")
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ProviderError(f"Malformed match payload for match {raw.get('id')!r}") from exc

    if len(alliances) != 2:
        raise ProviderError(
            f"Match {raw.get('id')!r} has {len(alliances)} alliances, expected 2"
        )

    match_id = raw.get("id")
    return Match(
        match_id=None if match_id is None else int(match_id),
        scored=bool(raw.get("scored", False)),
        alliances=(alliances[0], alliances[1]),
    )


def ordered_team_names(matches: list[Match]) -> list[str]:
    """Distinct team designators in first-appearance order."""
    seen: dict[str, None] = {}
    for match in matches:
        for team in match.team_names():
            seen.setdefault(team, None)
    return list(seen)


__all__ = [
    "Alliance",
    "Division",
    "EventRef",
    "Match",
    "ordered_team_names",
    "parse_datetime",
    "parse_divisions",
    "parse_event",
    "parse_match",
]
