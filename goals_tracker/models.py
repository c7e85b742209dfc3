from __future__ import annotations

import math
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from goals_tracker.constants import MAX_SCORE, MIN_SCORE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def coerce_relevance_score(value: object) -> int:
    """Turn an untrusted relevance value into an int within 0-100.

    Non-numeric and NaN values become 0. Fractions are truncated.
    """

    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0
    if math.isnan(number):
        return 0
    return int(min(MAX_SCORE, max(MIN_SCORE, number)))


class Goal(BaseModel):
    """User-defined target behaviour that journal tasks are matched against."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    target_phrase: str = ""
    general_description: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("title")
    @classmethod
    def _require_title(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Goal title must not be empty.")
        return cleaned


class ParsedTask(BaseModel):
    """Single task line transcribed from a journal page."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    text: str = ""
    is_completed: bool = False
    relevance_score: int = 0
    related_goal_id: Optional[str] = None
    was_manually_edited: bool = False


class DailyEntry(BaseModel):
    """Frozen review session: the tasks of one page and their total score."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    date: date
    image_uri: str = ""
    tasks: list[ParsedTask] = Field(default_factory=list)
    total_score: int = 0
    created_at: datetime = Field(default_factory=_utcnow)


class AnalysisResult(BaseModel):
    """Tasks and the raw transcription produced by one analysis pass."""

    tasks: list[ParsedTask] = Field(default_factory=list)
    raw_transcription: str = ""


class ScoreBand(str, Enum):
    """Qualitative tier for a relevance-style score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    MINIMAL = "minimal"

    @property
    def color(self) -> str:
        if self is ScoreBand.HIGH:
            return "#22c55e"
        if self is ScoreBand.MEDIUM:
            return "#eab308"
        if self is ScoreBand.LOW:
            return "#f97316"
        return "#ef4444"

    @property
    def label(self) -> str:
        if self is ScoreBand.HIGH:
            return "High relevance"
        if self is ScoreBand.MEDIUM:
            return "Medium relevance"
        if self is ScoreBand.LOW:
            return "Low relevance"
        return "Minimal relevance"


class EncouragementTier(str, Enum):
    """Encouragement shown next to a daily total."""

    STARTING = "starting"
    OUTSTANDING = "outstanding"
    GREAT = "great"
    KEEP_IT_UP = "keep_it_up"
    EVERY_STEP_COUNTS = "every_step_counts"

    @property
    def message(self) -> str:
        if self is EncouragementTier.STARTING:
            return "Let's get started! 🌱"
        if self is EncouragementTier.OUTSTANDING:
            return "Outstanding work! 🌟"
        if self is EncouragementTier.GREAT:
            return "Great progress! 💪"
        if self is EncouragementTier.KEEP_IT_UP:
            return "Keep it up! 🎯"
        return "Every step counts! 🚀"


__all__ = [
    "AnalysisResult",
    "DailyEntry",
    "EncouragementTier",
    "Goal",
    "ParsedTask",
    "ScoreBand",
    "coerce_relevance_score",
]
