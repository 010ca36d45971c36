"""Tests for the key-value stores and state persistence."""

import json
import logging
import os

import pytest

import config
from state import AppState
from storage import FileStore, MemoryStore, load_current_id, load_state, save_state


class TestSaveLoad:

    def test_round_trip(self, trip_state):
        store = MemoryStore()
        save_state(store, trip_state)
        loaded = load_state(store)
        assert loaded == trip_state
        assert [e.id for e in loaded.current_project.expenses] == [e.id for e in trip_state.current_project.expenses]

    def test_persisted_shape(self, trip_state):
        store = MemoryStore()
        save_state(store, trip_state)
        projects = json.loads(store.get(config.PROJECTS_KEY))
        assert projects[0]["id"] == "proj-1"
        assert projects[0]["name"] == "Trip"
        assert projects[0]["expenses"][0]["date"] == "2024-03-05"
        assert json.loads(store.get(config.CURRENT_PROJECT_KEY)) == "proj-1"

    def test_absent_current_id_is_not_written(self):
        store = MemoryStore()
        save_state(store, AppState())
        assert store.get(config.PROJECTS_KEY) == "[]"
        assert store.get(config.CURRENT_PROJECT_KEY) is None

    def test_missing_key_is_empty(self):
        assert load_state(MemoryStore()) == AppState()

    @pytest.mark.parametrize(
        "raw",
        [
            "{broken",
            '{"id": "p"}',
            '"text"',
            '[{"name": "no id"}]',
            '[{"id": "p", "name": "x", "expenses": "nope"}]',
            '[{"id": "p", "name": "x", "expenses": [{"amount": "NaN", "date": "2024-01-01"}]}]',
            '[{"id": "p", "name": "x", "expenses": [{"amount": 1}]}]',
            '[{"id": "p", "name": "x", "expenses": [5]}]',
            '[{"id": "p", "name": "x", "expenses": [{"amount": 1' + "0" * 400 + ', "date": "2024-01-01"}]}]',
        ],
    )
    def test_malformed_state_falls_back_to_empty(self, raw, caplog):
        store = MemoryStore({config.PROJECTS_KEY: raw, config.CURRENT_PROJECT_KEY: '"p"'})
        with caplog.at_level(logging.WARNING, logger="expense_tracker"):
            assert load_state(store) == AppState()
        assert "discarding stored projects" in caplog.text

    def test_expenses_without_ids_get_them(self):
        raw = json.dumps([{"id": "p", "name": "P", "expenses": [{"amount": 2, "category": "Food", "description": "", "date": "2024-01-01"}]}])
        loaded = load_state(MemoryStore({config.PROJECTS_KEY: raw}))
        assert loaded.current_project_id == "p"
        assert loaded.current_project.expenses[0].id

    def test_stale_current_id_is_normalized(self, trip_state):
        store = MemoryStore()
        save_state(store, trip_state)
        store.set(config.CURRENT_PROJECT_KEY, json.dumps("gone"))
        assert load_state(store).current_project_id == "proj-1"

    @pytest.mark.parametrize("raw,expected", [('"abc"', "abc"), ("null", None), ("12", None), ("oops", None)])
    def test_load_current_id(self, raw, expected):
        assert load_current_id(MemoryStore({config.CURRENT_PROJECT_KEY: raw})) == expected


class TestFileStore:

    def test_get_missing(self, tmp_path):
        assert FileStore(str(tmp_path / "nowhere")).get("projects") is None

    def test_set_creates_dir_and_reads_back(self, tmp_path):
        root = tmp_path / "data"
        store = FileStore(str(root))
        store.set("projects", '[{"a": "ü"}]')
        assert store.get("projects") == '[{"a": "ü"}]'
        assert (root / "projects.json").exists()

    def test_overwrite_leaves_no_temp_files(self, tmp_path):
        store = FileStore(str(tmp_path))
        store.set("k", "one")
        store.set("k", "two")
        assert store.get("k") == "two"
        assert not [n for n in os.listdir(tmp_path) if n.endswith(".tmp")]

    def test_state_round_trip_on_disk(self, tmp_path, trip_state):
        save_state(FileStore(str(tmp_path)), trip_state)
        assert load_state(FileStore(str(tmp_path))) == trip_state
