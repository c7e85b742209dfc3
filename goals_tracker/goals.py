from __future__ import annotations

import logging
from typing import Any, Iterable

import streamlit as st

from goals_tracker.constants import SS_GOALS
from goals_tracker.models import Goal
from goals_tracker.state import coerce_goal, persist_state, unique_goals

LOGGER = logging.getLogger(__name__)


def get_goals() -> list[Goal]:
    """Return stored goals, newest first."""

    raw_goals: Iterable[Any] = st.session_state.get(SS_GOALS) or []
    goals = [coerce_goal(raw) for raw in raw_goals]
    return sorted(goals, key=lambda goal: goal.created_at, reverse=True)


def save_goals(goals: Iterable[Goal]) -> None:
    st.session_state[SS_GOALS] = [goal.model_dump() for goal in unique_goals(goals)]
    persist_state()


def get_goal_by_id(goal_id: str) -> Goal | None:
    for goal in get_goals():
        if goal.id == goal_id:
            return goal
    return None


def add_goal(title: str, target_phrase: str = "", general_description: str = "") -> Goal:
    """Create a goal and store it; a blank title raises ``ValueError``."""

    goal = Goal(
        title=title,
        target_phrase=target_phrase.strip(),
        general_description=general_description.strip(),
    )
    save_goals([goal, *get_goals()])
    LOGGER.info("Goal created: %s", goal.title)
    return goal


def delete_goal(goal_id: str) -> bool:
    """Remove a goal. Tasks linked to it keep their dangling reference."""

    goals = get_goals()
    remaining = [goal for goal in goals if goal.id != goal_id]
    if len(remaining) == len(goals):
        return False

    save_goals(remaining)
    return True


__all__ = ["add_goal", "delete_goal", "get_goal_by_id", "get_goals", "save_goals"]
