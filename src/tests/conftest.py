"""Shared fixtures for the relay test suite."""

from __future__ import annotations

import pytest

from src.linemate.audio.temp_store import TempResourceStore
from src.linemate.exceptions import FetchError, TranscriptionError


@pytest.fixture
def temp_store(tmp_path) -> TempResourceStore:
    return TempResourceStore(str(tmp_path / "scratch"))


@pytest.fixture
def fetch_error() -> FetchError:
    return FetchError("M1", RuntimeError("401 Unauthorized"))


@pytest.fixture
def transcription_error() -> TranscriptionError:
    return TranscriptionError("audio.m4a", RuntimeError("quota exceeded"))
