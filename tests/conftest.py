"""Shared fixtures: in-memory store and a fixed 'today'."""
from __future__ import annotations

from datetime import date

import pytest

from jobflow.storage import MemoryStorage
from jobflow.store import JobStore


@pytest.fixture(autouse=True)
def _no_env_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return JobStore(storage)


@pytest.fixture
def today():
    return date(2024, 6, 30)
