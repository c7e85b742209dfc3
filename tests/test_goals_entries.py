from __future__ import annotations

from datetime import date, timedelta

import pytest

from goals_tracker.constants import SS_ENTRIES, SS_GOALS
from goals_tracker.entries import (
    add_entry,
    delete_entry,
    get_entries,
    get_entry_by_id,
    rescore_entry,
    update_entry,
)
from goals_tracker.goals import add_goal, delete_goal, get_goal_by_id, get_goals, save_goals
from goals_tracker.models import ParsedTask
from goals_tracker.scoring import calculate_task_score


def test_add_goal_trims_and_orders_newest_first(session_state: dict[str, object]) -> None:
    first = add_goal("  Read More Books ", target_phrase=" read ")
    second = add_goal("Exercise Daily", target_phrase="gym", general_description="Any workout")

    goals = get_goals()

    assert [goal.id for goal in goals] == [second.id, first.id]
    assert goals[1].title == "Read More Books"
    assert goals[1].target_phrase == "read"
    assert isinstance(session_state[SS_GOALS], list)


def test_add_goal_requires_title(session_state: dict[str, object]) -> None:
    with pytest.raises(ValueError):
        add_goal("   ")

    assert get_goals() == []


def test_deleted_goal_leaves_task_reference_dangling(session_state: dict[str, object]) -> None:
    goal = add_goal("Exercise Daily", target_phrase="gym")
    task = ParsedTask(text="gym session", is_completed=True, relevance_score=35, related_goal_id=goal.id)
    assert calculate_task_score(task, get_goals()) == 100

    assert delete_goal(goal.id) is True
    assert delete_goal(goal.id) is False
    assert get_goal_by_id(goal.id) is None
    assert calculate_task_score(task, get_goals()) == 35


def test_save_goals_keeps_one_goal_per_id(session_state: dict[str, object]) -> None:
    goal = add_goal("Read More Books", target_phrase="read")
    renamed = goal.model_copy(update={"title": "Read Daily", "updated_at": goal.updated_at + timedelta(minutes=5)})

    save_goals([goal, renamed, goal])

    assert [stored.title for stored in get_goals()] == ["Read Daily"]
    assert len(session_state[SS_GOALS]) == 1  # type: ignore[arg-type]


def test_add_entry_computes_total(session_state: dict[str, object]) -> None:
    goal = add_goal("Exercise Daily", target_phrase="gym")
    tasks = [
        ParsedTask(text="went to the gym today", is_completed=True, relevance_score=40, related_goal_id=goal.id),
        ParsedTask(text="read a book", is_completed=True, relevance_score=65),
        ParsedTask(text="skipped workout", is_completed=False, relevance_score=90, related_goal_id=goal.id),
    ]

    entry = add_entry(tasks, get_goals(), entry_date=date(2024, 9, 1), image_uri="file:///page.jpg")

    assert entry.total_score == 165
    stored = get_entry_by_id(entry.id)
    assert stored is not None
    assert stored.total_score == 165
    assert stored.image_uri == "file:///page.jpg"
    assert len(stored.tasks) == 3


def test_entries_are_ordered_by_date_descending(session_state: dict[str, object]) -> None:
    older = add_entry([], [], entry_date=date(2024, 9, 1))
    newer = add_entry([], [], entry_date=date(2024, 9, 3))
    middle = add_entry([], [], entry_date=date(2024, 9, 2))

    assert [entry.id for entry in get_entries()] == [newer.id, middle.id, older.id]
    assert len(session_state[SS_ENTRIES]) == 3  # type: ignore[arg-type]


def test_update_entry_recomputes_total(session_state: dict[str, object]) -> None:
    task = ParsedTask(text="read a book", is_completed=False, relevance_score=70)
    entry = add_entry([task], [], entry_date=date(2024, 9, 1))
    assert entry.total_score == 0

    updated = update_entry(entry.id, [task.model_copy(update={"is_completed": True})], [])

    assert updated is not None
    assert updated.total_score == 70
    assert get_entry_by_id(entry.id).total_score == 70  # type: ignore[union-attr]
    assert update_entry("missing", [], []) is None


def test_rescore_entry_ignores_stale_total(session_state: dict[str, object]) -> None:
    goal = add_goal("Exercise Daily", target_phrase="gym")
    task = ParsedTask(text="gym", is_completed=True, relevance_score=20, related_goal_id=goal.id)
    entry = add_entry([task], get_goals(), entry_date=date(2024, 9, 1))
    assert entry.total_score == 100

    delete_goal(goal.id)

    assert rescore_entry(entry, get_goals()).total_score == 20


def test_delete_entry(session_state: dict[str, object]) -> None:
    entry = add_entry([], [], entry_date=date(2024, 9, 1))

    assert delete_entry(entry.id) is True
    assert delete_entry(entry.id) is False
    assert get_entries() == []
