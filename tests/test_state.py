"""Tests for the pure project/expense transitions."""

from dataclasses import replace
from datetime import date

import pytest

import state as st
from models import Expense, Project
from state import AppState


def make_expense(amount=5.0, category="Food", description="", when=date(2024, 3, 1)):
    return Expense(amount=amount, category=category, description=description, date=when)


class TestCreateProject:

    def test_prepends_and_selects(self, trip_state):
        new = st.create_project(trip_state, "  Home  ")
        assert len(new.projects) == 2
        assert new.projects[0].name == "Home"
        assert new.projects[0].expenses == ()
        assert new.current_project_id == new.projects[0].id
        assert new.projects[1] is trip_state.projects[0]

    @pytest.mark.parametrize("name", ["", " ", "\t\n"])
    def test_blank_name_is_noop(self, trip_state, name):
        assert st.create_project(trip_state, name) is trip_state

    def test_first_project_on_empty_state(self):
        new = st.create_project(AppState(), "Trip", project_id="proj-x")
        assert new.current_project_id == "proj-x"
        assert new.current_project.name == "Trip"


class TestDeleteProject:

    def test_deleting_current_picks_first_remaining(self, trip_state):
        s = st.create_project(trip_state, "Home")
        home_id = s.current_project_id
        s = st.delete_project(s, home_id)
        assert s.current_project_id == "proj-1"
        assert [p.id for p in s.projects] == ["proj-1"]

    def test_deleting_other_keeps_current(self, trip_state):
        s = st.create_project(trip_state, "Home")
        home_id = s.current_project_id
        s = st.delete_project(s, "proj-1")
        assert s.current_project_id == home_id

    def test_deleting_last_clears_current(self, trip_state):
        s = st.delete_project(trip_state, "proj-1")
        assert s.projects == ()
        assert s.current_project_id is None

    def test_unknown_id_is_noop(self, trip_state):
        assert st.delete_project(trip_state, "nope") is trip_state


class TestRenameAndSelect:

    def test_rename_changes_only_name(self, trip_state):
        s = st.create_project(trip_state, "Home")
        other = s.projects[0]
        renamed = st.rename_project(s, "proj-1", "Vacation")
        trip = renamed.find("proj-1")
        assert trip.name == "Vacation"
        assert trip.id == "proj-1"
        assert trip.expenses == trip_state.projects[0].expenses
        assert renamed.find(other.id) == other

    def test_rename_allows_empty_name(self, trip_state):
        assert st.rename_project(trip_state, "proj-1", "").find("proj-1").name == ""

    def test_rename_unknown_is_noop(self, trip_state):
        assert st.rename_project(trip_state, "nope", "x") is trip_state

    def test_select(self, trip_state):
        s = st.create_project(trip_state, "Home")
        assert st.select_project(s, "proj-1").current_project_id == "proj-1"

    def test_select_unknown_is_noop(self, trip_state):
        assert st.select_project(trip_state, "nope") is trip_state


class TestExpenses:

    def test_append(self, trip_state):
        s = st.upsert_expense(trip_state, "proj-1", make_expense(1.5))
        assert len(s.current_project.expenses) == 3
        assert s.current_project.expenses[-1].amount == 1.5
        assert len(trip_state.current_project.expenses) == 2

    def test_replace_at_index(self, trip_state):
        s = st.upsert_expense(trip_state, "proj-1", make_expense(99.0), edit_index=1)
        assert [e.amount for e in s.current_project.expenses] == [10.0, 99.0]

    def test_out_of_range_index_appends(self, trip_state):
        s = st.upsert_expense(trip_state, "proj-1", make_expense(3.0), edit_index=7)
        assert [e.amount for e in s.current_project.expenses] == [10.0, 20.0, 3.0]

    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), float("-inf"), "12", None])
    def test_non_finite_amount_is_noop(self, trip_state, amount):
        bad = replace(make_expense(), amount=amount)
        assert st.upsert_expense(trip_state, "proj-1", bad) is trip_state

    def test_unknown_project_is_noop(self, trip_state):
        assert st.upsert_expense(trip_state, "nope", make_expense()) is trip_state

    def test_delete_expense(self, trip_state):
        s = st.delete_expense(trip_state, "proj-1", 0)
        assert [e.description for e in s.current_project.expenses] == ["taxi"]

    @pytest.mark.parametrize("index", [-1, 2, 10])
    def test_delete_out_of_range_is_noop(self, trip_state, index):
        assert st.delete_expense(trip_state, "proj-1", index) is trip_state

    def test_replace_expenses(self, trip_state):
        s = st.replace_expenses(trip_state, "proj-1", [make_expense(1.0)])
        assert [e.amount for e in s.current_project.expenses] == [1.0]

    def test_index_of(self, trip_state):
        project = trip_state.current_project
        assert st.index_of(project, project.expenses[1].id) == 1
        assert st.index_of(project, "missing") is None
        assert st.index_of(project, None) is None


class TestNormalize:

    def test_stale_current_falls_back_to_first(self):
        s = AppState(projects=(Project(id="a", name="A"), Project(id="b", name="B")), current_project_id="gone")
        assert st.normalize(s).current_project_id == "a"

    def test_empty_state_clears_current(self):
        assert st.normalize(AppState(current_project_id="gone")).current_project_id is None

    def test_valid_state_unchanged(self, trip_state):
        assert st.normalize(trip_state) is trip_state
