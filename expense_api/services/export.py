import io
from typing import List, Tuple

import pandas as pd

from expense_api.core.errors import InvalidRequest
from expense_api.models.expense import Expense

COLUMNS = ["id", "description", "amount", "category", "email", "date"]

MEDIA_TYPES = {
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def expenses_frame(expenses: List[Expense]) -> pd.DataFrame:
    rows = [
        {
            "id": e.id,
            "description": e.description,
            "amount": float(e.amount),
            "category": e.category,
            "email": e.email,
            # Excel cannot store tz-aware datetimes
            "date": e.date.replace(tzinfo=None) if e.date else None,
        }
        for e in expenses
    ]
    return pd.DataFrame(rows, columns=COLUMNS)


def export_expenses(expenses: List[Expense], fmt: str = "csv") -> Tuple[bytes, str, str]:
    """Render the expense table as a spreadsheet.

    Returns ``(content, media_type, filename)``.
    """
    fmt = fmt.lower()
    if fmt not in MEDIA_TYPES:
        raise InvalidRequest(f"Unsupported export format: {fmt}")

    df = expenses_frame(expenses)
    if fmt == "csv":
        content = df.to_csv(index=False).encode("utf-8")
    else:
        buffer = io.BytesIO()
        df.to_excel(buffer, index=False, sheet_name="Expenses", engine="openpyxl")
        content = buffer.getvalue()

    return content, MEDIA_TYPES[fmt], f"expenses.{fmt}"
