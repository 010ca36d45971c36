"""Shared fixtures: an in-memory store, a fixed "today" and the Trip tracker."""

from datetime import date

import pytest

from models import Expense, Project
from session import Session
from state import AppState
from storage import MemoryStore, save_state

TODAY = date(2024, 3, 20)


@pytest.fixture(autouse=True)
def _isolate_data_dir(tmp_path, monkeypatch):
    """Keep anything that falls back to the default data dir out of the repo."""
    monkeypatch.setenv("EXPENSE_TRACKER_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setattr("config.DATA_DIR", str(tmp_path / "data"))


@pytest.fixture
def trip_expenses():
    return (
        Expense(amount=10.0, category="Food", description="lunch", date=date(2024, 3, 5)),
        Expense(amount=20.0, category="Transport", description="taxi", date=date(2024, 4, 1)),
    )


@pytest.fixture
def trip_state(trip_expenses):
    return AppState(
        projects=(Project(id="proj-1", name="Trip", expenses=trip_expenses),),
        current_project_id="proj-1",
    )


@pytest.fixture
def store(trip_state):
    s = MemoryStore()
    save_state(s, trip_state)
    return s


@pytest.fixture
def session(store):
    return Session(store, confirm=lambda message: True, today=TODAY)
