"""Persistence helpers for the processed-event cache and per-team event stats."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from domain.common import EventRef
from domain.opr.tally import TeamEventStatsRow
from models import EventCache, TeamEventStats

_STATS_UPDATE_FIELDS = ("opr", "dpr", "ccwm", "win_rate", "wins", "losses", "ties")


def _insert_for(session: Session, model: type[Any]):
    bind = session.get_bind()
    dialect = bind.dialect.name if bind is not None else ""
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"Upserts are not supported for dialect {dialect!r}")


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def upsert_event_cache(
    session: Session,
    event: EventRef,
    *,
    ratings_indeterminate: bool,
) -> None:
    """Mark one event as processed, creating its cache row when missing."""
    values = {
        "sku": event.sku,
        "event_id": event.id,
        "name": event.name,
        "season_id": event.season_id,
        "processed": True,
        "ratings_indeterminate": ratings_indeterminate,
        "last_updated": _utcnow(),
    }
    statement = _insert_for(session, EventCache).values(**values)
    statement = statement.on_conflict_do_update(
        index_elements=["sku"],
        set_={key: statement.excluded[key] for key in values if key != "sku"},
    )
    session.execute(statement)


def upsert_team_event_stats(session: Session, rows: Sequence[TeamEventStatsRow]) -> None:
    """Insert or overwrite one stats row per (team, event)."""
    if not rows:
        return

    payload = [
        {
            "team_number": row.team_number,
            "sku": row.sku,
            "opr": row.opr,
            "dpr": row.dpr,
            "ccwm": row.ccwm,
            "win_rate": row.win_rate,
            "wins": row.wins,
            "losses": row.losses,
            "ties": row.ties,
        }
        for row in rows
    ]
    statement = _insert_for(session, TeamEventStats)
    statement = statement.on_conflict_do_update(
        index_elements=["team_number", "sku"],
        set_={field: statement.excluded[field] for field in _STATS_UPDATE_FIELDS},
    )
    session.execute(statement, payload)


def fetch_processed_skus(session: Session, skus: Iterable[str]) -> set[str]:
    """Subset of the given event SKUs already cached with processed=true."""
    sku_list = list(dict.fromkeys(skus))
    if not sku_list:
        return set()
    statement = select(EventCache.sku).where(
        EventCache.sku.in_(sku_list),
        EventCache.processed.is_(True),
    )
    return set(session.scalars(statement).all())


def fetch_event_stats(session: Session, sku: str) -> list[TeamEventStats]:
    """Stored stats rows for one event, ordered by team number."""
    statement = (
        select(TeamEventStats)
        .where(TeamEventStats.sku == sku)
        .order_by(TeamEventStats.team_number)
    )
    return list(session.scalars(statement).all())


def fetch_event_cache(session: Session, sku: str) -> EventCache | None:
    return session.get(EventCache, sku)
