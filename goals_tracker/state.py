from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any, Iterable, Mapping

import streamlit as st

from goals_tracker.constants import SS_ENTRIES, SS_GOALS, SS_RAW_TRANSCRIPTION, SS_REVIEW_TASKS
from goals_tracker.models import DailyEntry, Goal, ParsedTask, coerce_relevance_score
from goals_tracker.state_persistence import (
    configure_storage,
    load_persisted_state,
    persist_state,
)

__all__ = [
    "coerce_entry",
    "coerce_goal",
    "coerce_task",
    "configure_storage",
    "init_state",
    "load_persisted_state",
    "persist_state",
    "reset_state",
    "unique_goals",
]

# Records exported by the mobile client use camelCase keys.
_LEGACY_GOAL_KEYS: dict[str, str] = {
    "targetPhrase": "target_phrase",
    "generalDescription": "general_description",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}
_LEGACY_TASK_KEYS: dict[str, str] = {
    "isCompleted": "is_completed",
    "relevanceScore": "relevance_score",
    "relatedGoalId": "related_goal_id",
    "wasManuallyEdited": "was_manually_edited",
}
_LEGACY_ENTRY_KEYS: dict[str, str] = {
    "imageUri": "image_uri",
    "totalScore": "total_score",
    "createdAt": "created_at",
}


def _rename_legacy_keys(raw: Mapping[str, Any], mapping: Mapping[str, str]) -> dict[str, Any]:
    migrated = dict(raw)
    for legacy_key, key in mapping.items():
        if legacy_key in migrated:
            value = migrated.pop(legacy_key)
            migrated.setdefault(key, value)
    return migrated


def _normalize_timestamp(value: Any, default: datetime | None = None) -> datetime | None:
    """Convert legacy timestamp inputs to timezone-aware UTC datetimes."""

    if value is None:
        return default

    try:
        candidate: datetime | date
        if isinstance(value, datetime):
            candidate = value
        elif isinstance(value, date):
            candidate = datetime.combine(value, time.min)
        elif isinstance(value, str):
            candidate = datetime.fromisoformat(value.replace("Z", "+00:00"))
        else:
            return default

        if candidate.tzinfo is None:
            return candidate.replace(tzinfo=timezone.utc)
        return candidate.astimezone(timezone.utc)
    except ValueError:
        return default


def coerce_goal(raw: Any) -> Goal:
    if isinstance(raw, Goal):
        return raw

    migrated = _rename_legacy_keys(raw if isinstance(raw, Mapping) else {}, _LEGACY_GOAL_KEYS)
    migrated["target_phrase"] = migrated.get("target_phrase") or ""
    migrated["general_description"] = migrated.get("general_description") or ""
    now = datetime.now(timezone.utc)
    migrated["created_at"] = _normalize_timestamp(migrated.get("created_at"), default=now)
    migrated["updated_at"] = _normalize_timestamp(migrated.get("updated_at"), default=migrated["created_at"])
    return Goal.model_validate(migrated)


def coerce_task(raw: Any) -> ParsedTask:
    if isinstance(raw, ParsedTask):
        return raw

    migrated = _rename_legacy_keys(raw if isinstance(raw, Mapping) else {}, _LEGACY_TASK_KEYS)
    migrated.setdefault("text", "")
    migrated.setdefault("was_manually_edited", False)
    migrated["related_goal_id"] = migrated.get("related_goal_id") or None
    migrated["relevance_score"] = coerce_relevance_score(migrated.get("relevance_score"))
    return ParsedTask.model_validate(migrated)


def coerce_entry(raw: Any) -> DailyEntry:
    if isinstance(raw, DailyEntry):
        return raw

    migrated = _rename_legacy_keys(raw if isinstance(raw, Mapping) else {}, _LEGACY_ENTRY_KEYS)
    created_at = _normalize_timestamp(migrated.get("created_at"), default=datetime.now(timezone.utc))
    migrated["created_at"] = created_at
    if not migrated.get("date"):
        migrated["date"] = created_at.date() if created_at else None
    if isinstance(migrated.get("date"), str):
        # Postgres timestamps arrive as full ISO strings.
        migrated["date"] = migrated["date"][:10]
    migrated["tasks"] = [coerce_task(task) for task in migrated.get("tasks") or []]
    migrated.setdefault("image_uri", "")
    migrated.setdefault("total_score", 0)
    return DailyEntry.model_validate(migrated)


def unique_goals(goals: Iterable[Goal]) -> list[Goal]:
    """Drop goals sharing an id, keeping the most recently updated one in its first position."""

    by_id: dict[str, Goal] = {}
    for goal in goals:
        current = by_id.get(goal.id)
        if current is None or goal.updated_at > current.updated_at:
            by_id[goal.id] = goal
    return list(by_id.values())


def _dump_all(items: Iterable[Any]) -> list[dict[str, Any]]:
    return [item.model_dump() for item in items]


def init_state() -> None:
    """Initialize all required session state keys if they are missing."""

    if SS_GOALS not in st.session_state:
        st.session_state[SS_GOALS] = []
    else:
        st.session_state[SS_GOALS] = _dump_all(
            unique_goals(coerce_goal(raw) for raw in st.session_state.get(SS_GOALS) or [])
        )

    if SS_ENTRIES not in st.session_state:
        st.session_state[SS_ENTRIES] = []
    else:
        st.session_state[SS_ENTRIES] = _dump_all(coerce_entry(raw) for raw in st.session_state.get(SS_ENTRIES) or [])

    if SS_REVIEW_TASKS not in st.session_state:
        st.session_state[SS_REVIEW_TASKS] = []
    else:
        st.session_state[SS_REVIEW_TASKS] = _dump_all(
            coerce_task(raw) for raw in st.session_state.get(SS_REVIEW_TASKS) or []
        )

    st.session_state.setdefault(SS_RAW_TRANSCRIPTION, "")

    persist_state()


def reset_state() -> None:
    """Clear managed keys and restore defaults."""

    for key in (SS_GOALS, SS_ENTRIES, SS_REVIEW_TASKS, SS_RAW_TRANSCRIPTION):
        if key in st.session_state:
            del st.session_state[key]
    init_state()
