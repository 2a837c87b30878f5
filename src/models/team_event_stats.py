"""team_event_stats table model."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Float, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class TeamEventStats(Base):
    """Per-team ratings and record for one event (one row per team per event)."""

    __tablename__ = "team_event_stats"
    __table_args__ = (
        UniqueConstraint("team_number", "sku", name="uq_team_event_stats_team_sku"),
        CheckConstraint(
            "win_rate >= 0.0 AND win_rate <= 1.0",
            name="ck_team_event_stats_win_rate",
        ),
        Index("idx_team_event_stats_team", "team_number"),
        Index("idx_team_event_stats_sku", "sku"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    team_number: Mapped[str] = mapped_column(String(32), nullable=False)
    sku: Mapped[str] = mapped_column(String(64), nullable=False)
    opr: Mapped[float] = mapped_column(Float, nullable=False)
    dpr: Mapped[float] = mapped_column(Float, nullable=False)
    ccwm: Mapped[float] = mapped_column(Float, nullable=False)
    win_rate: Mapped[float] = mapped_column(Float, nullable=False)
    wins: Mapped[int] = mapped_column(Integer, nullable=False)
    losses: Mapped[int] = mapped_column(Integer, nullable=False)
    ties: Mapped[int] = mapped_column(Integer, nullable=False)
