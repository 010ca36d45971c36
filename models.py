# models.py

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Dict, Any, Tuple
import math
import re
import time
import uuid

from errors import InvalidAmount

CATEGORIES = ["Food", "Transport", "Shopping", "Bills", "Entertainment", "Other"]

CATEGORY_COLORS = {
    "Food": "#8bc34a",
    "Transport": "#2196f3",
    "Shopping": "#ff9800",
    "Bills": "#e91e63",
    "Entertainment": "#9c27b0",
    "Other": "#607d8b",
}

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_amount(raw: Any) -> float:
    """Parse a user- or file-supplied amount into a finite float."""
    if isinstance(raw, bool) or raw is None:
        raise InvalidAmount(f"Invalid amount: {raw!r}")
    try:
        value = float(raw.strip() if isinstance(raw, str) else raw)
    except (TypeError, ValueError, OverflowError):
        raise InvalidAmount(f"Invalid amount: {raw!r}") from None
    if not math.isfinite(value):
        raise InvalidAmount(f"Invalid amount: {raw!r}")
    return value


def parse_date(raw: Any) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    return date.fromisoformat(str(raw).strip())


def month_key(d: date) -> str:
    # built from calendar fields so a reparsed date never shifts month
    return f"{d.year:04d}-{d.month:02d}"


def parse_month(key: str) -> str:
    """Validate a ``YYYY-MM`` key and return it unchanged."""
    m = _MONTH_RE.match(str(key).strip())
    if not m or not 1 <= int(m.group(2)) <= 12:
        raise ValueError(f"Invalid month {key!r}, expected YYYY-MM")
    return m.group(0)


def new_project_id() -> str:
    return f"proj-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


@dataclass(frozen=True)
class Expense:
    amount: float
    category: str
    description: str
    date: date
    id: str = field(default_factory=lambda: str(uuid.uuid4()), compare=False)

    @property
    def month(self) -> str:
        return month_key(self.date)

    def to_dict(self, with_id: bool = True) -> Dict[str, Any]:
        d = {
            "amount": float(self.amount),
            "category": self.category,
            "description": self.description,
            "date": self.date.isoformat(),
        }
        if with_id:
            d["id"] = self.id
        return d

    @staticmethod
    def from_dict(d):
        """Build an Expense from a stored or imported mapping.

        Raises InvalidAmount for a bad amount, KeyError/ValueError/TypeError
        for a missing or malformed date. A missing id gets a fresh one.
        """
        rec_id = d.get("id")
        kwargs = {}
        if isinstance(rec_id, str) and rec_id:
            kwargs["id"] = rec_id
        description = d.get("description")
        category = d.get("category")
        return Expense(
            amount=parse_amount(d.get("amount")),
            category="" if category is None else str(category),
            description="" if description is None else str(description),
            date=parse_date(d["date"]),
            **kwargs,
        )


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    expenses: Tuple[Expense, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "expenses": [e.to_dict() for e in self.expenses],
        }

    @staticmethod
    def from_dict(d):
        return Project(
            id=str(d["id"]),
            name=str(d.get("name", "")),
            expenses=tuple(Expense.from_dict(e) for e in d.get("expenses", [])),
        )

    def find_expense(self, expense_id: str) -> Optional[Expense]:
        for e in self.expenses:
            if e.id == expense_id:
                return e
        return None
