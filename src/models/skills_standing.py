"""skills_standings table model (imported from skills CSV uploads)."""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class SkillsStanding(Base):
    __tablename__ = "skills_standings"

    team_number: Mapped[str] = mapped_column(String(32), primary_key=True)
    rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    driver_skills: Mapped[int | None] = mapped_column(Integer, nullable=True)
    autonomous_skills: Mapped[int | None] = mapped_column(Integer, nullable=True)
