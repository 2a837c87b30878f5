"""Bring one team's past events into the processed-event cache."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from domain.common import EventRef
from domain.errors import PersistenceError, ProviderError, RateLimitedError
from domain.pipeline import EventOutcome, EventProcessor
from domain.protocol import EventDataProvider
from repositories.analysis_repository import fetch_processed_skus

logger = logging.getLogger(__name__)


@dataclass
class TeamSyncSummary:
    team_number: str
    found: bool = True
    past_events: int = 0
    cached_events: int = 0
    outcomes: list[EventOutcome] = field(default_factory=list)
    failed_skus: list[str] = field(default_factory=list)

    @property
    def attempted_events(self) -> int:
        return len(self.outcomes) + len(self.failed_skus)


class TeamSync:
    """Process only the past events of a team that are not cached yet."""

    def __init__(
        self,
        *,
        session_factory,
        provider: EventDataProvider,
        processor: EventProcessor | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.provider = provider
        self.processor = processor or EventProcessor(session_factory=session_factory, provider=provider)
        self.clock = clock or (lambda: datetime.now(UTC).replace(tzinfo=None))

    def sync_team(
        self,
        team_number: str,
        season_id: int,
        *,
        force: bool = False,
        echo: Callable[[str], None] | None = None,
    ) -> TeamSyncSummary:
        """Sequentially process a team's uncached (or, with force, all) past events.

        A team unknown to the provider is a no-op. Any failure on one event
        is logged and the next event is attempted, except that rate limiting is re-raised so the caller can back off.
        """

        def say(message: str) -> None:
            logger.info(message)
            if echo is not None:
                echo(message)

        summary = TeamSyncSummary(team_number=team_number)
        team_id = self.provider.find_team_id(team_number)
        if team_id is None:
            say(f"Team {team_number} not found at provider; skipping.")
            summary.found = False
            return summary

        events = self.provider.get_team_events(team_id, season_id)
        now = self.clock()
        past_events = [event for event in events if event.end is not None and event.end < now]
        summary.past_events = len(past_events)
        if not past_events:
            say(f"Team {team_number}: no completed events in season {season_id}.")
            return summary

        with self.session_factory() as session:
            cached_skus = fetch_processed_skus(session, (event.sku for event in past_events))
        summary.cached_events = len(cached_skus)

        candidates: list[EventRef] = (
            past_events if force else [event for event in past_events if event.sku not in cached_skus]
        )
        say(
            f"Team {team_number}: found {len(past_events)} past events, "
            f"{len(cached_skus)} cached. Processing {len(candidates)} events."
        )

        for event in candidates:
            try:
                summary.outcomes.append(self.processor.process_event(event, echo=echo))
            except RateLimitedError:
                raise
            except (ProviderError, PersistenceError) as exc:
                logger.warning("Failed to process event %s: %s", event.sku, exc)
                say(f"Failed to process event {event.sku}: {exc}")
                summary.failed_skus.append(event.sku)
            except Exception as exc:  # one bad event never abandons the rest
                logger.exception("Unexpected error processing event %s", event.sku)
                say(f"Failed to process event {event.sku}: {exc!r}")
                summary.failed_skus.append(event.sku)

        return summary


__all__ = ["TeamSync", "TeamSyncSummary"]
