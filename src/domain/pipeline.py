"""Fetch, rate and persist one event."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from domain.common import EventRef, Match, ordered_team_names
from domain.errors import PersistenceError
from domain.opr import build_stats_rows, solve_event_ratings, tally_records
from domain.opr.solver import IndeterminateRatings
from domain.protocol import EventDataProvider, OutcomeStatus
from repositories.analysis_repository import upsert_event_cache, upsert_team_event_stats

logger = logging.getLogger(__name__)


def _say(echo: Callable[[str], None] | None, message: str) -> None:
    logger.info(message)
    if echo is not None:
        echo(message)


@dataclass(frozen=True)
class EventOutcome:
    """Outcome for one processed (or skipped) event."""

    sku: str
    status: OutcomeStatus
    total_matches: int
    scored_matches: int
    team_count: int
    ratings_indeterminate: bool


class EventProcessor:
    """Compute and store OPR/DPR/CCWM plus records for a single event."""

    def __init__(
        self,
        *,
        session_factory,
        provider: EventDataProvider,
    ) -> None:
        self.session_factory = session_factory
        self.provider = provider

    def fetch_matches(self, event: EventRef, *, echo: Callable[[str], None] | None = None) -> list[Match]:
        divisions = self.provider.get_event_divisions(event)
        _say(echo, f"Event {event.sku} has {len(divisions)} division(s).")

        matches: list[Match] = []
        for division in divisions:
            logger.debug("Fetching matches for %s division %s (%d)", event.sku, division.name, division.id)
            matches.extend(self.provider.get_division_matches(event.id, division.id))
        return matches

    def process_event(
        self,
        event: EventRef,
        *,
        echo: Callable[[str], None] | None = None,
    ) -> EventOutcome:
        """Fetch all matches, solve ratings and upsert results in one transaction.

        Provider errors propagate un-retried. An event without scored matches
        is skipped and left uncached so a later run can pick it up.
        """
        matches = self.fetch_matches(event, echo=echo)
        scored_matches = [match for match in matches if match.scored]

        if not scored_matches:
            _say(echo, f"No scored matches found for {event.sku}.")
            return EventOutcome(
                sku=event.sku,
                status=OutcomeStatus.SKIPPED,
                total_matches=len(matches),
                scored_matches=0,
                team_count=0,
                ratings_indeterminate=False,
            )

        teams = ordered_team_names(matches)
        scored_team_set = set(ordered_team_names(scored_matches))
        rated_teams = [team for team in teams if team in scored_team_set]

        solution = solve_event_ratings(scored_matches, rated_teams)
        if isinstance(solution, IndeterminateRatings):
            logger.warning("Ratings for %s are indeterminate: %s", event.sku, solution.reason)
            _say(echo, f"Ratings indeterminate for {event.sku}; storing records with zero ratings.")

        records = tally_records(scored_matches, teams)
        rows = build_stats_rows(event.sku, teams, solution, records)

        with self.session_factory() as session:
            try:
                upsert_event_cache(session, event, ratings_indeterminate=solution.indeterminate)
                upsert_team_event_stats(session, rows)
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                raise PersistenceError(f"Failed to store stats for event {event.sku}: {exc}") from exc

        _say(echo, f"Processed event {event.sku}: stats saved for {len(rows)} teams.")
        return EventOutcome(
            sku=event.sku,
            status=OutcomeStatus.PROCESSED,
            total_matches=len(matches),
            scored_matches=len(scored_matches),
            team_count=len(rows),
            ratings_indeterminate=solution.indeterminate,
        )


__all__ = ["EventOutcome", "EventProcessor"]
