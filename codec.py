"""CSV and JSON export/import of expense lists.

Both import paths are all-or-nothing: they either return the complete list
of parsed records or raise, so a caller can apply the result in one step.
"""

import io
import json
import re
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from errors import InvalidAmount, MalformedImportFile
from models import Expense, parse_amount, parse_date

CSV_HEADER = "Amount,Category,Description,Date"
FORMATS = ("csv", "json")


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return str(int(amount))
    return repr(float(amount))


def _amount_or_nan(cell: str) -> float:
    try:
        return parse_amount(cell)
    except InvalidAmount:
        return float("nan")


def to_csv(expenses: Sequence[Expense]) -> str:
    rows = [
        f"{format_amount(e.amount)},{_quote(e.category)},{_quote(e.description)},{e.date.isoformat()}"
        for e in expenses
    ]
    return CSV_HEADER + "\n" + "\n".join(rows)


def from_csv(text: str) -> List[Expense]:
    """
    Parse exported CSV. The first line is a header and is skipped unread.
    Every other non-blank row must have exactly four fields.
    """
    try:
        df = pd.read_csv(
            io.StringIO(text),
            header=None,
            skiprows=1,
            dtype=str,
            na_filter=False,
            skipinitialspace=True,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError as e:
        raise MalformedImportFile(f"Invalid CSV file: {e}") from e

    if df.shape[1] != 4:
        raise MalformedImportFile(f"Invalid CSV file: expected 4 columns, found {df.shape[1]}")
    if df.isna().any().any():
        raise MalformedImportFile("Invalid CSV file: a row has fewer than 4 fields")

    # exact per-cell parse; pd.to_numeric can change the last digit
    amounts = df[0].map(_amount_or_nan).to_numpy(dtype=float)
    bad = np.flatnonzero(~np.isfinite(amounts))
    if len(bad):
        raise InvalidAmount(f"Invalid amount {df[0].iloc[bad[0]]!r} in row {bad[0] + 1}")

    imported = []
    for i, (amount, row) in enumerate(zip(amounts, df.itertuples(index=False))):
        try:
            when = parse_date(row[3])
        except ValueError:
            raise MalformedImportFile(f"Invalid CSV file: bad date {row[3]!r} in row {i + 1}") from None
        imported.append(Expense(amount=float(amount), category=row[1], description=row[2], date=when))
    return imported


def to_json(expenses: Sequence[Expense]) -> str:
    return json.dumps([e.to_dict(with_id=False) for e in expenses], indent=2, ensure_ascii=False)


def from_json(text: str) -> List[Expense]:
    try:
        data = json.loads(text)
    except ValueError as e:
        raise MalformedImportFile("Invalid JSON file.") from e
    if not isinstance(data, list) or not data or not isinstance(data[0], dict) or "amount" not in data[0]:
        raise MalformedImportFile("Invalid JSON structure.")

    imported = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise MalformedImportFile(f"Invalid JSON structure: item {i} is not an object.")
        try:
            imported.append(Expense.from_dict({k: v for k, v in item.items() if k != "id"}))
        except InvalidAmount:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedImportFile(f"Invalid JSON structure: item {i} has no valid date.") from e
    return imported


def detect_format(text: str, filename: Optional[str] = None) -> str:
    """Content decides; the file extension only matters for empty content."""
    head = text.lstrip()
    if head:
        return "json" if head[0] in "[{" else "csv"
    if filename and filename.lower().endswith(".json"):
        return "json"
    return "csv"


def export_filename(project_name: str, fmt: str) -> str:
    stem = re.sub(r"\s+", "_", project_name)
    return f"{stem}_expenses.{fmt}"


def dumps(expenses: Sequence[Expense], fmt: str) -> str:
    if fmt == "json":
        return to_json(expenses)
    if fmt == "csv":
        return to_csv(expenses)
    raise ValueError(f"Unknown format {fmt!r}")


def loads(text: str, fmt: str) -> List[Expense]:
    if fmt == "json":
        return from_json(text)
    if fmt == "csv":
        return from_csv(text)
    raise ValueError(f"Unknown format {fmt!r}")
