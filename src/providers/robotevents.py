"""HTTP client for the RobotEvents API v2."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import requests

from domain.common import Division, EventRef, Match, parse_divisions, parse_event, parse_match
from domain.config import ProviderSettings
from domain.errors import ProviderError, RateLimitedError

logger = logging.getLogger(__name__)


@dataclass
class RobotEventsClient:
    """Paginated, authenticated reads from the event-data provider.

    Requests are never retried here; callers decide how to react to
    ProviderError and RateLimitedError.
    """

    api_token: str
    settings: ProviderSettings = field(default_factory=ProviderSettings)
    session: requests.Session | None = None

    def __post_init__(self) -> None:
        if not self.api_token:
            raise ValueError("A RobotEvents API token is required")
        if self.session is None:
            self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {self.api_token}",
                "Accept": "application/json",
            }
        )

    def _url(self, path: str) -> str:
        return f"{self.settings.base_url}/{path.lstrip('/')}"

    def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = self._url(path)
        try:
            resp = self.session.get(url, params=params, timeout=self.settings.timeout_seconds)
        except requests.RequestException as exc:
            raise ProviderError(f"RobotEvents request failed for {url}: {exc}") from exc

        if resp.status_code == 429:
            raise RateLimitedError(f"RobotEvents API Error: 429 Too Many Requests ({url})")
        if not resp.ok:
            logger.error("RobotEvents error body for %s: %s", url, resp.text[:500])
            raise ProviderError(
                f"RobotEvents API Error: {resp.status_code} {resp.reason} ({url})",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderError(f"RobotEvents returned invalid JSON for {url}") from exc

    def fetch_all_pages(self, path: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Follow `meta.last_page` and concatenate every page's `data`."""
        items: list[dict[str, Any]] = []
        page = 1
        last_page = 1
        while page <= last_page:
            body = self._get_json(
                path,
                params={**(params or {}), "page": page, "per_page": self.settings.per_page},
            )
            try:
                items.extend(body["data"])
                last_page = int(body["meta"]["last_page"])
            except (KeyError, TypeError, ValueError) as exc:
                raise ProviderError(f"Malformed paginated response for {path}") from exc
            page += 1
        logger.debug("Fetched %d items from %s over %d page(s)", len(items), path, last_page)
        return items

    def find_team_id(self, team_number: str) -> int | None:
        """Provider id for a team designator, or None when unknown."""
        teams = self.fetch_all_pages("teams", params={"number[]": team_number})
        for team in teams:
            if str(team.get("number", "")).upper() == team_number.upper():
                return int(team["id"])
        return int(teams[0]["id"]) if teams else None

    def get_team_events(self, team_id: int, season_id: int) -> list[EventRef]:
        raw_events = self.fetch_all_pages(f"teams/{team_id}/events", params={"season[]": season_id})
        return [parse_event(raw) for raw in raw_events]

    def find_event_by_sku(self, sku: str) -> EventRef | None:
        events = self.fetch_all_pages("events", params={"sku[]": sku})
        return parse_event(events[0]) if events else None

    def get_event_divisions(self, event: EventRef) -> tuple[Division, ...]:
        if event.divisions is not None:
            return event.divisions
        body = self._get_json(f"events/{event.id}")
        return parse_divisions(body.get("divisions") if isinstance(body, dict) else None)

    def get_division_matches(self, event_id: int, division_id: int) -> list[Match]:
        raw_matches = self.fetch_all_pages(f"events/{event_id}/divisions/{division_id}/matches")
        return [parse_match(raw) for raw in raw_matches]


__all__ = ["RobotEventsClient"]
