from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, Iterator

import pytest
import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from goals_tracker.state_persistence import configure_storage  # noqa: E402


@pytest.fixture()
def session_state(monkeypatch: pytest.MonkeyPatch) -> Dict[str, object]:
    state: Dict[str, object] = {}
    monkeypatch.setattr(st, "session_state", state, raising=False)
    return state


@pytest.fixture(autouse=True)
def _no_storage_backend() -> Iterator[None]:
    configure_storage(None)
    yield
    configure_storage(None)
