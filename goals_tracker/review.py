"""Editing helpers for the review step between analysis and saving.

Task lists are treated as snapshots: every helper returns a new list and
leaves its input untouched. The session helpers at the bottom keep the
current review list in Streamlit session state.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence
from uuid import uuid4

import streamlit as st

from goals_tracker.constants import SS_RAW_TRANSCRIPTION, SS_REVIEW_TASKS
from goals_tracker.models import AnalysisResult, ParsedTask
from goals_tracker.state import coerce_task, persist_state

_READ_ONLY_FIELDS = frozenset({"id", "was_manually_edited"})


def materialize_tasks(annotations: Iterable[ParsedTask]) -> list[ParsedTask]:
    """Give freshly analysed tasks their own ids and a clean edit flag."""

    return [
        annotation.model_copy(update={"id": str(uuid4()), "was_manually_edited": False})
        for annotation in annotations
    ]


def _edit(tasks: Sequence[ParsedTask], task_id: str, updates: dict[str, Any]) -> list[ParsedTask]:
    edited: list[ParsedTask] = []
    for task in tasks:
        if task.id == task_id:
            task = ParsedTask.model_validate({**task.model_dump(), **updates, "was_manually_edited": True})
        edited.append(task)
    return edited


def update_task(tasks: Sequence[ParsedTask], task_id: str, **updates: Any) -> list[ParsedTask]:
    unknown = set(updates) - (set(ParsedTask.model_fields) - _READ_ONLY_FIELDS)
    if unknown:
        raise ValueError(f"Unknown or read-only task fields: {', '.join(sorted(unknown))}")
    return _edit(tasks, task_id, updates)


def toggle_task_completion(tasks: Sequence[ParsedTask], task_id: str) -> list[ParsedTask]:
    edited: list[ParsedTask] = []
    for task in tasks:
        if task.id == task_id:
            task = task.model_copy(update={"is_completed": not task.is_completed, "was_manually_edited": True})
        edited.append(task)
    return edited


def link_task_to_goal(tasks: Sequence[ParsedTask], task_id: str, goal_id: Optional[str]) -> list[ParsedTask]:
    return _edit(tasks, task_id, {"related_goal_id": goal_id or None})


def get_review_tasks() -> list[ParsedTask]:
    raw_tasks: Iterable[Any] = st.session_state.get(SS_REVIEW_TASKS) or []
    return [coerce_task(raw) for raw in raw_tasks]


def save_review_tasks(tasks: Iterable[ParsedTask]) -> None:
    st.session_state[SS_REVIEW_TASKS] = [task.model_dump() for task in tasks]
    persist_state()


def start_review(result: AnalysisResult) -> list[ParsedTask]:
    """Store the tasks of a new analysis pass as the current review list."""

    tasks = materialize_tasks(result.tasks)
    st.session_state[SS_RAW_TRANSCRIPTION] = result.raw_transcription
    save_review_tasks(tasks)
    return tasks


def clear_review() -> None:
    st.session_state[SS_REVIEW_TASKS] = []
    st.session_state[SS_RAW_TRANSCRIPTION] = ""
    persist_state()


__all__ = [
    "clear_review",
    "get_review_tasks",
    "link_task_to_goal",
    "materialize_tasks",
    "save_review_tasks",
    "start_review",
    "toggle_task_completion",
    "update_task",
]
