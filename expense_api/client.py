"""Client for the expense API.

Keeps the fetched expense list and the state of the add/edit form. Every
mutation is followed by a full refetch of the list; the total is always
recomputed from whatever was fetched last.
"""

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

CATEGORIES = ["Food", "Transport", "Entertainment", "Bills", "Other"]
API_PATH = "/api/expenses"


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


@dataclass
class ExpenseDraft:
    description: str = ""
    amount: str = ""
    category: str = "Food"


class ExpenseClient:
    def __init__(self, base_url: str = "http://localhost:5111", http: Optional[httpx.Client] = None):
        self.http = http or httpx.Client(base_url=base_url, timeout=10.0)
        self.expenses: List[dict] = []
        self.draft = ExpenseDraft()
        self.editing_id: Optional[str] = None

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        response = self.http.request(method, API_PATH + path, **kwargs)
        if response.status_code >= 400:
            try:
                message = response.json().get("error", "Operation failed")
            except ValueError:
                message = response.text or "Operation failed"
            logger.warning("%s %s failed: %s %s", method, path or "/", response.status_code, message)
            raise ApiError(response.status_code, message)
        return response

    # --- list ---

    def refresh(self) -> List[dict]:
        self.expenses = self._request("GET", "").json()
        return self.expenses

    def total(self) -> Decimal:
        total = sum((Decimal(str(e["amount"])) for e in self.expenses), Decimal("0"))
        return total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def by_category(self, category: str) -> List[dict]:
        return self._request("GET", f"/category/{quote(category, safe='')}").json()

    # --- form ---

    def edit(self, expense: dict) -> None:
        self.draft = ExpenseDraft(
            description=expense["description"],
            amount=str(expense["amount"]),
            category=expense["category"],
        )
        self.editing_id = expense["id"]

    def reset_draft(self) -> None:
        self.draft = ExpenseDraft()
        self.editing_id = None

    def submit(self) -> dict:
        """Create or update from the draft, then refetch the list."""
        payload = asdict(self.draft)
        if self.editing_id:
            saved = self._request("PUT", f"/{self.editing_id}", json=payload).json()
        else:
            saved = self._request("POST", "", json=payload).json()
        self.refresh()
        self.reset_draft()
        return saved

    def delete(self, expense_id: str) -> None:
        self._request("DELETE", f"/{expense_id}")
        self.refresh()

    # --- totals and snapshots ---

    def save_total(self, email: str) -> dict:
        return self._request(
            "POST", "/save-total", json={"email": email, "totalExpense": str(self.total())}
        ).json()

    def save_snapshot(self, token: Optional[str] = None) -> str:
        """Store the current list and total on the server, return the token."""
        payload = {"totalExpense": str(self.total()), "expenses": self.export_rows()}
        if token:
            payload["token"] = token
        return self._request("POST", "/save-total", json=payload).json()["token"]

    def retrieve(self, email: Optional[str] = None, token: Optional[str] = None) -> dict:
        return self._request("POST", "/retrieve", json={"email": email, "token": token}).json()

    def get_total(self, snapshot_id: str) -> dict:
        return self._request("GET", f"/total/{snapshot_id}").json()

    def export_rows(self) -> List[dict]:
        return [dict(e) for e in self.expenses]

    def close(self) -> None:
        self.http.close()
