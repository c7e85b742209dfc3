"""Point rules for journal tasks.

A completed task earns its relevance score, or the full 100 points when the
linked goal's target phrase appears verbatim in the task text. Incomplete
tasks never earn points. Every function here is pure: callers pass the
current task and goal snapshots and get a fresh result back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from goals_tracker.constants import MAX_SCORE, MIN_SCORE
from goals_tracker.models import EncouragementTier, Goal, ParsedTask, ScoreBand

HIGH_BAND_THRESHOLD = 80
MEDIUM_BAND_THRESHOLD = 50
LOW_BAND_THRESHOLD = 20

OUTSTANDING_AVERAGE = 80
GREAT_AVERAGE = 60
KEEP_IT_UP_AVERAGE = 40


@dataclass(frozen=True)
class ScoredTask:
    task: ParsedTask
    points: int
    band: ScoreBand
    exact_match: bool


def _clamp_score(value: int) -> int:
    return min(MAX_SCORE, max(MIN_SCORE, value))


def _find_goal(goal_id: Optional[str], goals: Iterable[Goal]) -> Optional[Goal]:
    if not goal_id:
        return None
    for goal in goals:
        if goal.id == goal_id:
            return goal
    return None


def matches_target_phrase(task: ParsedTask, goal: Goal) -> bool:
    """Return True when the goal's target phrase occurs inside the task text.

    The comparison is a case-insensitive substring test on trimmed values. The
    whole phrase field is treated as one needle, so comma separated phrases are
    not split. A blank phrase never matches.
    """

    phrase = goal.target_phrase.strip().lower()
    if not phrase:
        return False
    return phrase in task.text.strip().lower()


def _has_exact_match(task: ParsedTask, goals: Sequence[Goal]) -> bool:
    goal = _find_goal(task.related_goal_id, goals)
    return goal is not None and matches_target_phrase(task, goal)


def calculate_task_score(task: ParsedTask, goals: Sequence[Goal]) -> int:
    """Return the points (0-100) a single task contributes to the daily total."""

    if not task.is_completed:
        return 0

    if _has_exact_match(task, goals):
        return MAX_SCORE

    return _clamp_score(task.relevance_score)


def calculate_daily_score(tasks: Iterable[ParsedTask], goals: Sequence[Goal]) -> int:
    """Sum the task scores of one journal page."""

    return sum(calculate_task_score(task, goals) for task in tasks)


def score_band(score: int) -> ScoreBand:
    """Map a relevance-style score to its display band."""

    if score >= HIGH_BAND_THRESHOLD:
        return ScoreBand.HIGH
    if score >= MEDIUM_BAND_THRESHOLD:
        return ScoreBand.MEDIUM
    if score >= LOW_BAND_THRESHOLD:
        return ScoreBand.LOW
    return ScoreBand.MINIMAL


def get_score_color(score: int) -> str:
    return score_band(score).color


def format_score(score: int) -> str:
    return f"+{score} pts"


def encouragement_tier(total_score: int, task_count: int) -> EncouragementTier:
    """Pick the encouragement tier for a daily total.

    A zero total always yields ``STARTING``, even when the page holds
    incomplete tasks with high relevance scores.
    """

    average = total_score / task_count if task_count > 0 else 0

    if total_score == 0:
        return EncouragementTier.STARTING
    if average >= OUTSTANDING_AVERAGE:
        return EncouragementTier.OUTSTANDING
    if average >= GREAT_AVERAGE:
        return EncouragementTier.GREAT
    if average >= KEEP_IT_UP_AVERAGE:
        return EncouragementTier.KEEP_IT_UP
    return EncouragementTier.EVERY_STEP_COUNTS


def get_encouragement_message(total_score: int, task_count: int) -> str:
    return encouragement_tier(total_score, task_count).message


def score_tasks(tasks: Iterable[ParsedTask], goals: Sequence[Goal]) -> list[ScoredTask]:
    """Score every task for a results list.

    ``band`` follows the raw relevance score, not the awarded points.
    """

    scored: list[ScoredTask] = []
    for task in tasks:
        scored.append(
            ScoredTask(
                task=task,
                points=calculate_task_score(task, goals),
                band=score_band(task.relevance_score),
                exact_match=task.is_completed and _has_exact_match(task, goals),
            )
        )
    return scored


__all__ = [
    "ScoredTask",
    "calculate_daily_score",
    "calculate_task_score",
    "encouragement_tier",
    "format_score",
    "get_encouragement_message",
    "get_score_color",
    "matches_target_phrase",
    "score_band",
    "score_tasks",
]
