"""Composite strength score and tier bands."""

from __future__ import annotations

import math
from dataclasses import dataclass

# Fixed approximations of a season's high-end OPR and skills score.
MAX_OPR = 30.0
MAX_SKILLS = 400.0

OPR_WEIGHT = 50.0
SKILLS_WEIGHT = 30.0
WIN_RATE_WEIGHT = 20.0

TIER_BANDS: tuple[tuple[int, str], ...] = (
    (90, "Elite"),
    (75, "High"),
    (60, "Mid-High"),
    (40, "Mid"),
)
DEFAULT_TIER = "Developing"


@dataclass(frozen=True)
class TeamStrength:
    team_number: str
    opr: float
    win_rate: float
    skills: int
    strength: int
    tier: str


def calculate_strength(avg_opr: float, skills: float, win_rate: float) -> int:
    """Weighted 50/30/20 blend of normalised OPR, skills and win rate, rounded half up."""
    norm_opr = min(avg_opr / MAX_OPR, 1.0) * OPR_WEIGHT
    norm_skills = min(skills / MAX_SKILLS, 1.0) * SKILLS_WEIGHT
    norm_win_rate = win_rate * WIN_RATE_WEIGHT
    return int(math.floor(norm_opr + norm_skills + norm_win_rate + 0.5))


def strength_tier(strength: int) -> str:
    for threshold, tier in TIER_BANDS:
        if strength >= threshold:
            return tier
    return DEFAULT_TIER


def build_team_strength(
    team_number: str,
    *,
    avg_opr: float | None,
    avg_win_rate: float | None,
    max_skills: int | None,
) -> TeamStrength:
    opr = float(avg_opr or 0.0)
    win_rate = float(avg_win_rate or 0.0)
    skills = int(max_skills or 0)
    strength = calculate_strength(opr, skills, win_rate)
    return TeamStrength(
        team_number=team_number,
        opr=round(opr, 2),
        win_rate=win_rate,
        skills=skills,
        strength=strength,
        tier=strength_tier(strength),
    )


__all__ = [
    "MAX_OPR",
    "MAX_SKILLS",
    "TeamStrength",
    "build_team_strength",
    "calculate_strength",
    "strength_tier",
]
