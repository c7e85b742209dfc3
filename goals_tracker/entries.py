from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Iterable, Sequence

import streamlit as st

from goals_tracker.constants import SS_ENTRIES
from goals_tracker.models import DailyEntry, Goal, ParsedTask
from goals_tracker.scoring import calculate_daily_score
from goals_tracker.state import coerce_entry, persist_state

LOGGER = logging.getLogger(__name__)


def _sort_entries(entries: Iterable[DailyEntry]) -> list[DailyEntry]:
    return sorted(entries, key=lambda entry: (entry.date, entry.created_at), reverse=True)


def get_entries() -> list[DailyEntry]:
    """Return stored daily entries, newest date first."""

    raw_entries: Iterable[Any] = st.session_state.get(SS_ENTRIES) or []
    return _sort_entries(coerce_entry(raw) for raw in raw_entries)


def save_entries(entries: Iterable[DailyEntry]) -> None:
    st.session_state[SS_ENTRIES] = [entry.model_dump() for entry in _sort_entries(entries)]
    persist_state()


def get_entry_by_id(entry_id: str) -> DailyEntry | None:
    for entry in get_entries():
        if entry.id == entry_id:
            return entry
    return None


def add_entry(
    tasks: Sequence[ParsedTask],
    goals: Sequence[Goal],
    *,
    entry_date: date | None = None,
    image_uri: str = "",
) -> DailyEntry:
    """Freeze a reviewed task list into a daily entry with its computed total."""

    entry = DailyEntry(
        date=entry_date or datetime.now(timezone.utc).date(),
        image_uri=image_uri,
        tasks=[task.model_copy() for task in tasks],
        total_score=calculate_daily_score(tasks, goals),
    )
    save_entries([entry, *get_entries()])
    LOGGER.info("Entry saved for %s with score: %s", entry.date.isoformat(), entry.total_score)
    return entry


def rescore_entry(entry: DailyEntry, goals: Sequence[Goal]) -> DailyEntry:
    """Return the entry with a total recomputed against the current goals."""

    return entry.model_copy(update={"total_score": calculate_daily_score(entry.tasks, goals)})


def update_entry(entry_id: str, tasks: Sequence[ParsedTask], goals: Sequence[Goal]) -> DailyEntry | None:
    """Replace the tasks of a stored entry and recompute its total."""

    entries = get_entries()
    updated: DailyEntry | None = None
    for index, entry in enumerate(entries):
        if entry.id != entry_id:
            continue
        updated = rescore_entry(entry.model_copy(update={"tasks": [task.model_copy() for task in tasks]}), goals)
        entries[index] = updated
        break

    if updated is None:
        LOGGER.warning("Entry not found: %s", entry_id)
        return None

    save_entries(entries)
    return updated


def delete_entry(entry_id: str) -> bool:
    entries = get_entries()
    remaining = [entry for entry in entries if entry.id != entry_id]
    if len(remaining) == len(entries):
        return False

    save_entries(remaining)
    return True


__all__ = [
    "add_entry",
    "delete_entry",
    "get_entries",
    "get_entry_by_id",
    "rescore_entry",
    "save_entries",
    "update_entry",
]
