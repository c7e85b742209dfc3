from __future__ import annotations

import logging
from typing import Mapping

import streamlit as st

from goals_tracker.constants import SS_ENTRIES, SS_GOALS, SS_RAW_TRANSCRIPTION, SS_REVIEW_TASKS
from goals_tracker.storage import StorageBackend

LOGGER = logging.getLogger(__name__)

PERSISTED_KEYS: tuple[str, ...] = (SS_GOALS, SS_ENTRIES, SS_REVIEW_TASKS, SS_RAW_TRANSCRIPTION)
_storage_backend: StorageBackend | None = None


def configure_storage(backend: StorageBackend | None) -> None:
    """Register the backend that goal, entry and review writes go to; ``None`` disables saving."""

    global _storage_backend
    _storage_backend = backend


def load_persisted_state() -> None:
    if _storage_backend is None:
        return

    try:
        persisted = _storage_backend.load_state()
    except (OSError, ValueError) as exc:
        LOGGER.warning("Failed to load persisted state: %s", exc)
        return

    if isinstance(persisted, Mapping):
        st.session_state.update({key: value for key, value in persisted.items() if key in PERSISTED_KEYS})


def persist_state() -> None:
    """Write the tracker keys to the backend, which skips unchanged payloads."""

    if _storage_backend is None:
        return

    payload = {key: st.session_state.get(key) for key in PERSISTED_KEYS if key in st.session_state}
    try:
        _storage_backend.save_state(payload)
    except (OSError, TypeError, ValueError) as exc:
        LOGGER.warning("Failed to persist state: %s", exc)


__all__ = ["PERSISTED_KEYS", "configure_storage", "load_persisted_state", "persist_state"]
