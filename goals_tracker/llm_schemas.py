from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class TaskAnnotation(BaseModel):
    text: str = Field(description="Transcribed task line, misspellings preserved")
    is_completed: bool = Field(description="True when the checkbox or bullet next to the line is marked")
    relevance_score: int = Field(description="0-100 strength of the match to the related goal")
    related_goal_id: Optional[str] = Field(
        default=None,
        description="ID of the best matching goal, null when nothing matches",
    )


class JournalPageAnalysis(BaseModel):
    tasks: list[TaskAnnotation] = Field(
        default_factory=list,
        description="One entry per task or to-do line on the page",
    )
    raw_transcription: str = Field(
        default="",
        description="Full page text with newlines, headers included",
    )
    error: Optional[str] = Field(
        default=None,
        description="Set only when the page cannot be read",
    )


class TargetPhraseSuggestion(BaseModel):
    phrases: list[str] = Field(
        default_factory=list,
        description="3-5 short phrases (2-4 words) someone might write when working on the goal",
    )
    description: str = Field(
        default="",
        description="One or two sentences describing activities related to the goal",
    )


__all__ = ["JournalPageAnalysis", "TargetPhraseSuggestion", "TaskAnnotation"]
