from goals_tracker.models import DailyEntry, EncouragementTier, Goal, ParsedTask, ScoreBand
from goals_tracker.scoring import (
    calculate_daily_score,
    calculate_task_score,
    encouragement_tier,
    get_encouragement_message,
    score_band,
)

__all__ = [
    "DailyEntry",
    "EncouragementTier",
    "Goal",
    "ParsedTask",
    "ScoreBand",
    "calculate_daily_score",
    "calculate_task_score",
    "encouragement_tier",
    "get_encouragement_message",
    "score_band",
]
