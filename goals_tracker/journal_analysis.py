from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Generic, Mapping, Sequence, TypeVar

from openai import OpenAI

from goals_tracker.llm import (
    LLMError,
    get_default_model,
    get_openai_client,
    request_structured_response,
)
from goals_tracker.llm_schemas import JournalPageAnalysis, TargetPhraseSuggestion, TaskAnnotation
from goals_tracker.models import AnalysisResult, Goal, ParsedTask, coerce_relevance_score

LOGGER = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT")

DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"
ANALYSIS_MAX_OUTPUT_TOKENS = 4096
ANALYSIS_TEMPERATURE = 0.2
MAX_FALLBACK_PHRASES = 5

_DATA_URL_PATTERN = re.compile(r"^data:([^;]+);base64,(.+)$", re.DOTALL)

ANALYSIS_INSTRUCTIONS = (
    "You read photographed handwritten journal pages and to-do lists. "
    "Transcribe every line, keeping misspellings and writing [unclear] for unreadable words. "
    "Treat each line with a checkbox, bullet or dash as a task and mark it completed when the box is "
    "filled, ticked or crossed out. Compare each task with the user's goals: 90-100 for a direct match "
    "or near synonym, 70-89 for a strong relation, 40-69 for a moderate one, below 40 otherwise. "
    "Use the id of the best matching goal or null. Headers belong in the raw transcription only. "
    "If the page is too blurry to read, set error and return no tasks."
)


class JournalAnalysisError(RuntimeError):
    """Raised when a journal page cannot be analysed."""


@dataclass
class AISuggestion(Generic[PayloadT]):
    payload: PayloadT
    from_ai: bool


def split_image_payload(image: str) -> tuple[str, str]:
    """Return ``(mime_type, base64_data)`` for a bare base64 string or a data URL."""

    match = _DATA_URL_PATTERN.match(image.strip())
    if match:
        return match.group(1), match.group(2)
    return DEFAULT_IMAGE_MIME_TYPE, image.strip()


def normalize_task_annotation(raw: Mapping[str, Any] | TaskAnnotation) -> ParsedTask:
    """Turn one raw task annotation into a well-typed task.

    Missing text becomes empty, non-numeric relevance becomes 0 and the score
    is clamped to 0-100. An empty goal reference becomes ``None``.
    """

    data: Mapping[str, Any] = raw.model_dump() if isinstance(raw, TaskAnnotation) else raw
    goal_id = data.get("related_goal_id")
    return ParsedTask(
        text=str(data.get("text") or ""),
        is_completed=bool(data.get("is_completed")),
        relevance_score=coerce_relevance_score(data.get("relevance_score")),
        related_goal_id=str(goal_id) if goal_id else None,
    )


def _describe_goals(goals: Sequence[Goal]) -> str:
    return json.dumps(
        [
            {
                "id": goal.id,
                "title": goal.title,
                "target_phrase": goal.target_phrase,
                "description": goal.general_description,
            }
            for goal in goals
        ],
        ensure_ascii=False,
        indent=2,
    )


def analyze_journal_image(
    image: str,
    goals: Sequence[Goal],
    *,
    client: OpenAI | None = None,
) -> AnalysisResult:
    """Transcribe a journal page and match its tasks against the goals."""

    if not image or not image.strip():
        raise JournalAnalysisError("Image is required.")

    client_to_use = client or get_openai_client()
    if client_to_use is None:
        raise JournalAnalysisError("OPENAI_API_KEY is not configured.")

    mime_type, image_data = split_image_payload(image)
    LOGGER.info("Analyzing %s image (%s characters) with %s goals", mime_type, len(image_data), len(goals))

    try:
        response = request_structured_response(
            client=client_to_use,
            model=get_default_model(vision=True),
            messages=[
                {"role": "system", "content": ANALYSIS_INSTRUCTIONS},
                {
                    "role": "user",
                    "content": [
                        {"type": "input_image", "image_url": f"data:{mime_type};base64,{image_data}"},
                        {"type": "input_text", "text": "User goals (JSON):\n" + _describe_goals(goals)},
                    ],
                },
            ],
            response_model=JournalPageAnalysis,
            max_output_tokens=ANALYSIS_MAX_OUTPUT_TOKENS,
            temperature=ANALYSIS_TEMPERATURE,
        )
    except LLMError as exc:
        raise JournalAnalysisError(f"Failed to analyze image: {exc}") from exc

    if response.error:
        raise JournalAnalysisError(response.error)

    tasks = [normalize_task_annotation(annotation) for annotation in response.tasks]
    LOGGER.info("Successfully parsed %s tasks", len(tasks))
    return AnalysisResult(tasks=tasks, raw_transcription=response.raw_transcription)


def _fallback_phrases(title: str) -> TargetPhraseSuggestion:
    lowered = title.strip().lower()
    phrases: list[str] = [lowered]
    for word in re.findall(r"[^\W\d_]+", lowered):
        if len(word) >= 4 and word not in phrases:
            phrases.append(word)
    return TargetPhraseSuggestion(
        phrases=phrases[:MAX_FALLBACK_PHRASES],
        description=f"Activities that move you towards '{title.strip()}'.",
    )


def suggest_target_phrases(title: str, *, client: OpenAI | None = None) -> AISuggestion[TargetPhraseSuggestion]:
    """Propose target phrases and a description for a new goal."""

    if not title or not title.strip():
        raise ValueError("Goal title is required.")

    client_to_use = client or get_openai_client()
    if client_to_use:
        try:
            result = request_structured_response(
                client=client_to_use,
                model=get_default_model(),
                messages=[
                    {
                        "role": "system",
                        "content": (
                            "Suggest 3-5 short phrases (2-4 words each) a person might write in a journal or "
                            "to-do list while working on the goal, plus a one or two sentence description of "
                            "related activities. Example for 'Exercise Daily': went to gym, morning run, workout."
                        ),
                    },
                    {"role": "user", "content": f"Goal title: {title.strip()}"},
                ],
                response_model=TargetPhraseSuggestion,
            )
            LOGGER.info("Generated %s phrases for '%s'", len(result.phrases), title.strip())
            return AISuggestion(result, from_ai=True)
        except LLMError as exc:
            LOGGER.warning("Phrase generation failed, using heuristic: %s", exc)

    return AISuggestion(_fallback_phrases(title), from_ai=False)


__all__ = [
    "AISuggestion",
    "JournalAnalysisError",
    "analyze_journal_image",
    "normalize_task_annotation",
    "split_image_payload",
    "suggest_target_phrases",
]
