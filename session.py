"""
Session: the one place where user actions meet state and storage.

Holds the application state plus the per-session selected month and edit
cursor. Each action runs a pure transition from ``state`` and writes the
whole store afterwards, but only when the transition changed something.

Imports are two-phase (``begin_import`` then ``finish_import``) because the
file contents arrive later than the user's click. While an import is pending
every mutating action raises ImportPending.
"""

from datetime import date
from typing import Callable, List, Optional

import codec
import state as transitions
from analysis import MonthSummary, aggregate, filter_month, months_of
from errors import ImportPending, InvalidAmount, MalformedImportFile
from logging_setup import get_logger
from models import CATEGORIES, Expense, Project, month_key, parse_amount, parse_date, parse_month
from state import AppState
from storage import load_state, save_state

logger = get_logger(__name__)


class Session:
    def __init__(self, store, confirm: Callable[[str], bool], today: Optional[date] = None):
        self.store = store
        self.confirm = confirm
        self.today = today
        self.state: AppState = load_state(store)
        self.selected_month = month_key(self._today())
        self.edit_cursor: Optional[str] = None
        self._import_target: Optional[str] = None

    def _today(self) -> date:
        return self.today or date.today()

    def _commit(self, new_state: AppState) -> bool:
        if new_state is self.state:
            return False
        self.state = new_state
        save_state(self.store, new_state)
        return True

    def _check_idle(self) -> None:
        if self.import_pending:
            raise ImportPending("An import is still in progress.")

    # projects

    @property
    def current_project(self) -> Optional[Project]:
        return self.state.current_project

    @property
    def projects(self):
        return self.state.projects

    def create_project(self, name: str) -> bool:
        self._check_idle()
        changed = self._commit(transitions.create_project(self.state, name))
        if changed:
            self.edit_cursor = None
        return changed

    def delete_project(self, project_id: str) -> bool:
        self._check_idle()
        if self.state.find(project_id) is None:
            return False
        if not self.confirm("Delete this tracker and all its expenses?"):
            return False
        was_current = project_id == self.state.current_project_id
        changed = self._commit(transitions.delete_project(self.state, project_id))
        if was_current:
            self.edit_cursor = None
        return changed

    def rename_project(self, project_id: str, new_name: str) -> bool:
        self._check_idle()
        return self._commit(transitions.rename_project(self.state, project_id, new_name))

    def select_project(self, project_id: str) -> bool:
        self._check_idle()
        changed = self._commit(transitions.select_project(self.state, project_id))
        if changed:
            self.edit_cursor = None
        return changed

    # expenses

    @property
    def expenses(self) -> List[Expense]:
        project = self.current_project
        return list(project.expenses) if project else []

    def start_edit(self, expense_id: str) -> Expense:
        project = self.current_project
        record = project.find_expense(expense_id) if project else None
        if record is None:
            raise KeyError(f"No expense {expense_id}")
        self.edit_cursor = expense_id
        return record

    def cancel_edit(self) -> None:
        self.edit_cursor = None

    def submit_expense(self, amount, category: str = CATEGORIES[0], description: str = "", when=None) -> Expense:
        """
        Add a new expense, or update the one under the edit cursor.
        Raises InvalidAmount for an empty, non-numeric or non-finite amount.
        """
        self._check_idle()
        project = self.current_project
        if project is None:
            raise LookupError("No tracker selected.")
        if amount is None or (isinstance(amount, str) and not amount.strip()):
            raise InvalidAmount("Amount is required.")
        value = parse_amount(amount)
        when = parse_date(when) if when is not None else self._today()

        index = transitions.index_of(project, self.edit_cursor)
        kwargs = {"id": self.edit_cursor} if index is not None else {}
        record = Expense(amount=value, category=category, description=description or "", date=when, **kwargs)
        self._commit(transitions.upsert_expense(self.state, project.id, record, index))
        self.edit_cursor = None
        return record

    def delete_expense(self, expense_id: str) -> bool:
        self._check_idle()
        project = self.current_project
        if project is None:
            return False
        index = transitions.index_of(project, expense_id)
        if index is None:
            return False
        if not self.confirm("Delete this expense?"):
            return False
        changed = self._commit(transitions.delete_expense(self.state, project.id, index))
        if self.edit_cursor == expense_id:
            self.edit_cursor = None
        return changed

    # month view

    def select_month(self, key: str) -> str:
        self.selected_month = parse_month(key)
        return self.selected_month

    def months(self) -> List[str]:
        return months_of(self.expenses, today=self._today())

    def visible_expenses(self) -> List[Expense]:
        return filter_month(self.expenses, self.selected_month)

    def summary(self) -> MonthSummary:
        return aggregate(self.expenses, self.selected_month, CATEGORIES)

    # export / import

    def export(self, fmt: str) -> str:
        if self.current_project is None:
            raise LookupError("No tracker selected.")
        return codec.dumps(self.expenses, fmt)

    def export_csv(self) -> str:
        return self.export("csv")

    def export_json(self) -> str:
        return self.export("json")

    @property
    def import_pending(self) -> bool:
        return self._import_target is not None

    def begin_import(self) -> str:
        """Reserve the current tracker as the target of an upcoming import."""
        self._check_idle()
        project = self.current_project
        if project is None:
            raise LookupError("No tracker selected.")
        self._import_target = project.id
        return project.id

    def cancel_import(self) -> None:
        self._import_target = None

    def finish_import(self, text: str, fmt: Optional[str] = None) -> int:
        """
        Parse ``text`` and replace the target tracker's expenses in one step.
        The pending flag is cleared whether or not parsing succeeds.
        """
        target = self._import_target
        if target is None:
            raise LookupError("No import was started.")
        self._import_target = None
        fmt = fmt or codec.detect_format(text)
        try:
            imported = codec.loads(text, fmt)
        except (MalformedImportFile, InvalidAmount) as e:
            logger.warning("import into %s rejected: %s", target, e)
            raise
        self._commit(transitions.replace_expenses(self.state, target, imported))
        self.edit_cursor = None
        logger.info("imported %d expenses into %s", len(imported), target)
        return len(imported)

    def import_text(self, text: str, fmt: Optional[str] = None) -> int:
        self.begin_import()
        return self.finish_import(text, fmt)

    def import_file(self, path: str, fmt: Optional[str] = None) -> int:
        self.begin_import()
        try:
            with open(path, "r", encoding="utf-8-sig") as f:
                text = f.read()
        except OSError:
            self.cancel_import()
            raise
        return self.finish_import(text, fmt or codec.detect_format(text, path))
