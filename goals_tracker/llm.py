from __future__ import annotations

import logging
import os
import time
from typing import Optional, Sequence, TypeVar

import streamlit as st
from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    BadRequestError,
    OpenAI,
    RateLimitError,
)
from pydantic import BaseModel
from streamlit.errors import StreamlitSecretNotFoundError

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_VISION_MODEL = "gpt-4o"
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_MAX_OUTPUT_TOKENS = 300
_BACKOFF_FACTOR = 1.6

ParsedModelT = TypeVar("ParsedModelT", bound=BaseModel)


class LLMError(RuntimeError):
    """Raised when an OpenAI call fails or returns an invalid payload."""


def _get_secret(name: str) -> Optional[str]:
    try:
        value = st.secrets.get(name)
        if value:
            return str(value)
    except StreamlitSecretNotFoundError:
        value = None
    return os.getenv(name)


def get_default_model(vision: bool = False) -> str:
    """Return the default model name, allowing overrides via secrets/env."""

    if vision:
        configured_vision_model = _get_secret("OPENAI_VISION_MODEL")
        if configured_vision_model:
            return configured_vision_model
        return DEFAULT_VISION_MODEL

    configured_model = _get_secret("OPENAI_MODEL")
    if configured_model:
        return configured_model
    return DEFAULT_MODEL


def get_openai_client() -> Optional[OpenAI]:
    """Create an OpenAI client from secrets or environment variables."""

    api_key = _get_secret("OPENAI_API_KEY")
    if not api_key:
        return None

    base_url = _get_secret("OPENAI_BASE_URL")
    client_kwargs: dict[str, str] = {"api_key": api_key}
    if base_url:
        client_kwargs["base_url"] = base_url

    return OpenAI(**client_kwargs)  # type: ignore[arg-type]


_RETRYABLE_ERRORS = (APITimeoutError, APIConnectionError, RateLimitError)


def _parse_once(
    client: OpenAI,
    request: dict[str, object],
    response_model: type[ParsedModelT],
    timeout: float,
) -> ParsedModelT:
    try:
        response = client.responses.with_options(timeout=timeout).parse(text_format=response_model, **request)
    except _RETRYABLE_ERRORS:
        raise
    except (BadRequestError, APIError) as exc:
        raise LLMError("OpenAI API rejected the request.") from exc
    except Exception as exc:  # noqa: BLE001
        raise LLMError("Unexpected error during OpenAI call.") from exc

    if response.output_parsed is None:
        raise LLMError("No structured content returned by the model.")
    return response.output_parsed


def request_structured_response(
    *,
    client: OpenAI,
    model: str,
    messages: Sequence[dict[str, object] | str],
    response_model: type[ParsedModelT],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
    temperature: Optional[float] = None,
) -> ParsedModelT:
    """Parse a structured Responses API reply into ``response_model``.

    Timeouts, connection drops and rate limits are retried with exponential
    backoff; every other failure surfaces as ``LLMError`` right away.
    """

    request: dict[str, object] = {
        "model": model,
        "input": list(messages),
        "max_output_tokens": max_output_tokens,
    }
    if temperature is not None:
        request["temperature"] = temperature

    delay = 1.0
    last_error: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            return _parse_once(client, request, response_model, timeout)
        except _RETRYABLE_ERRORS as exc:
            last_error = exc
            if attempt == max_attempts:
                break
            LOGGER.warning("OpenAI attempt %s of %s failed: %s - retrying in %.1fs", attempt, max_attempts, exc, delay)
            time.sleep(delay)
            delay *= _BACKOFF_FACTOR

    raise LLMError("OpenAI request failed after retries.") from last_error


__all__ = [
    "DEFAULT_MODEL",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_VISION_MODEL",
    "LLMError",
    "get_default_model",
    "get_openai_client",
    "request_structured_response",
]
