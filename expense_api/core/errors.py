"""Domain errors raised by the service layer.

Routers never build error bodies themselves; the handlers registered in
``expense_api.main`` turn these into ``{"error": ..., "details": ...}``
responses with the matching HTTP status.
"""


class ExpenseAPIError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str = None, details=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details


class InvalidRequest(ExpenseAPIError):
    status_code = 400
    message = "Invalid request"


class ExpenseNotFound(ExpenseAPIError):
    status_code = 404
    message = "Expense not found"


class SnapshotNotFound(ExpenseAPIError):
    status_code = 404
    message = "Total expense not found"
