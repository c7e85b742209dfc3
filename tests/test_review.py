from __future__ import annotations

import pytest

from goals_tracker.constants import SS_RAW_TRANSCRIPTION, SS_REVIEW_TASKS
from goals_tracker.models import AnalysisResult, ParsedTask
from goals_tracker.review import (
    clear_review,
    get_review_tasks,
    link_task_to_goal,
    materialize_tasks,
    start_review,
    toggle_task_completion,
    update_task,
)


def _tasks() -> list[ParsedTask]:
    return [
        ParsedTask(id="t1", text="went to gym", is_completed=False, relevance_score=80, related_goal_id="g1"),
        ParsedTask(id="t2", text="read a book", is_completed=True, relevance_score=60),
    ]


def test_materialize_tasks_assigns_fresh_ids() -> None:
    annotations = [ParsedTask(id="same", text="a", was_manually_edited=True), ParsedTask(id="same", text="b")]

    tasks = materialize_tasks(annotations)

    assert len({task.id for task in tasks}) == 2
    assert all(task.id != "same" for task in tasks)
    assert not any(task.was_manually_edited for task in tasks)


def test_toggle_task_completion_marks_edit_without_mutating_input() -> None:
    original = _tasks()

    toggled = toggle_task_completion(original, "t1")

    assert toggled[0].is_completed is True
    assert toggled[0].was_manually_edited is True
    assert toggled[1] == original[1]
    assert original[0].is_completed is False
    assert original[0].was_manually_edited is False


def test_update_task_changes_text() -> None:
    updated = update_task(_tasks(), "t2", text="read two chapters")

    assert updated[1].text == "read two chapters"
    assert updated[1].was_manually_edited is True
    assert updated[0].was_manually_edited is False


def test_update_task_rejects_unknown_fields() -> None:
    with pytest.raises(ValueError):
        update_task(_tasks(), "t1", points=10)

    with pytest.raises(ValueError):
        update_task(_tasks(), "t1", id="other")


def test_update_with_unknown_id_keeps_tasks() -> None:
    assert update_task(_tasks(), "missing", text="x") == _tasks()


def test_link_task_to_goal_and_unlink() -> None:
    linked = link_task_to_goal(_tasks(), "t2", "g2")
    assert linked[1].related_goal_id == "g2"
    assert linked[1].was_manually_edited is True

    unlinked = link_task_to_goal(linked, "t2", None)
    assert unlinked[1].related_goal_id is None


def test_start_and_clear_review_session(session_state: dict[str, object]) -> None:
    result = AnalysisResult(tasks=_tasks(), raw_transcription="went to gym\nread a book")

    tasks = start_review(result)

    assert [task.text for task in get_review_tasks()] == ["went to gym", "read a book"]
    assert [task.id for task in get_review_tasks()] == [task.id for task in tasks]
    assert session_state[SS_RAW_TRANSCRIPTION] == "went to gym\nread a book"

    clear_review()

    assert get_review_tasks() == []
    assert session_state[SS_REVIEW_TASKS] == []
    assert session_state[SS_RAW_TRANSCRIPTION] == ""
