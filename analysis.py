# analysis.py
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence

import pandas as pd

from models import CATEGORIES, Expense, month_key

DF_COLUMNS = ["id", "amount", "category", "description", "date", "month"]


def expenses_to_df(expenses: Sequence[Expense]) -> pd.DataFrame:
    df = pd.DataFrame(
        [dict(e.to_dict(), date=e.date, month=e.month) for e in expenses],
        columns=DF_COLUMNS,
    )
    df["amount"] = df["amount"].astype(float)
    return df


def months_of(expenses: Sequence[Expense], today: Optional[date] = None) -> List[str]:
    """
    Month keys to offer in the selector, most recent first.
    The current month always leads, even with no expenses in it.
    """
    current = month_key(today or date.today())
    found = sorted({e.month for e in expenses}, reverse=True)
    return [current] + [m for m in found if m != current]


def filter_month(expenses: Sequence[Expense], month: str) -> List[Expense]:
    return [e for e in expenses if e.month == month]


@dataclass
class MonthSummary:
    month: str
    total: float = 0.0
    by_category: Dict[str, float] = field(default_factory=dict)
    count: int = 0


def aggregate(expenses: Sequence[Expense], month: str, categories: Sequence[str] = CATEGORIES) -> MonthSummary:
    """
    Total and per-category sums for one month.
    Categories outside ``categories`` count toward the total only.
    """
    df = expenses_to_df(expenses)
    in_month = df[df["month"] == month]
    sums = in_month.groupby("category")["amount"].sum()
    return MonthSummary(
        month=month,
        total=float(in_month["amount"].sum()),
        by_category={c: float(sums.get(c, 0.0)) for c in categories},
        count=len(in_month),
    )
