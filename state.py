"""Application state and its pure transitions.

Every transition takes an ``AppState`` and returns a new one. A transition
that changes nothing returns the very same object, which lets the session
skip the persistence write. Inputs are never mutated.
"""

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple
import math

from logging_setup import get_logger
from models import Expense, Project, new_project_id

logger = get_logger(__name__)


@dataclass(frozen=True)
class AppState:
    projects: Tuple[Project, ...] = ()
    current_project_id: Optional[str] = None

    def find(self, project_id: Optional[str]) -> Optional[Project]:
        for p in self.projects:
            if p.id == project_id:
                return p
        return None

    @property
    def current_project(self) -> Optional[Project]:
        return self.find(self.current_project_id)


def normalize(state: AppState) -> AppState:
    """Point the current id at a live project, or clear it."""
    if state.find(state.current_project_id) is not None:
        return state
    fallback = state.projects[0].id if state.projects else None
    if fallback == state.current_project_id:
        return state
    return replace(state, current_project_id=fallback)


def _with_project(state: AppState, project: Project) -> AppState:
    projects = tuple(project if p.id == project.id else p for p in state.projects)
    return replace(state, projects=projects)


def create_project(state: AppState, name: str, project_id: Optional[str] = None) -> AppState:
    name = (name or "").strip()
    if not name:
        return state
    project = Project(id=project_id or new_project_id(), name=name)
    logger.debug("created project %s (%s)", project.id, name)
    return AppState(projects=(project,) + state.projects, current_project_id=project.id)


def delete_project(state: AppState, project_id: str) -> AppState:
    if state.find(project_id) is None:
        return state
    remaining = tuple(p for p in state.projects if p.id != project_id)
    current = state.current_project_id
    if current == project_id:
        current = remaining[0].id if remaining else None
    logger.debug("deleted project %s", project_id)
    return AppState(projects=remaining, current_project_id=current)


def rename_project(state: AppState, project_id: str, new_name: str) -> AppState:
    project = state.find(project_id)
    if project is None:
        return state
    return _with_project(state, replace(project, name=new_name))


def select_project(state: AppState, project_id: str) -> AppState:
    if state.find(project_id) is None or state.current_project_id == project_id:
        return state
    return replace(state, current_project_id=project_id)


def upsert_expense(
    state: AppState,
    project_id: str,
    record: Expense,
    edit_index: Optional[int] = None,
) -> AppState:
    """Replace the record at ``edit_index`` or append a new one."""
    project = state.find(project_id)
    if project is None:
        return state
    amount = record.amount
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount):
        logger.debug("rejected non-finite amount %r", amount)
        return state
    expenses = list(project.expenses)
    if edit_index is not None and 0 <= edit_index < len(expenses):
        expenses[edit_index] = record
    else:
        expenses.append(record)
    return _with_project(state, replace(project, expenses=tuple(expenses)))


def delete_expense(state: AppState, project_id: str, index: int) -> AppState:
    project = state.find(project_id)
    if project is None or not 0 <= index < len(project.expenses):
        return state
    expenses = project.expenses[:index] + project.expenses[index + 1:]
    return _with_project(state, replace(project, expenses=expenses))


def replace_expenses(state: AppState, project_id: str, expenses: Iterable[Expense]) -> AppState:
    """Swap a project's whole expense list in one step (import commit)."""
    project = state.find(project_id)
    if project is None:
        return state
    return _with_project(state, replace(project, expenses=tuple(expenses)))


def index_of(project: Project, expense_id: Optional[str]) -> Optional[int]:
    for i, e in enumerate(project.expenses):
        if e.id == expense_id:
            return i
    return None
