import logging
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from expense_api.core.errors import ExpenseNotFound, InvalidRequest
from expense_api.models.expense import Expense, utcnow
from expense_api.schemas.expense import ExpenseCreate, ExpensePatch

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def _newest_first(query):
    return query.order_by(Expense.date.desc(), Expense.id.desc())


def list_expenses(
    db: Session, page: Optional[int] = None, limit: Optional[int] = None
) -> Tuple[List[Expense], int]:
    """Return ``(rows, total_count)`` newest-first.

    Without ``page`` and ``limit`` every row is returned. An empty table
    gives an empty list, never a not-found error.
    """
    query = _newest_first(db.query(Expense))
    total = db.query(func.count(Expense.id)).scalar() or 0

    if page is None and limit is None:
        return query.all(), total

    page = 1 if page is None else page
    limit = DEFAULT_PAGE_SIZE if limit is None else limit
    if page < 1 or limit < 1 or limit > MAX_PAGE_SIZE:
        raise InvalidRequest(f"page must be >= 1 and limit between 1 and {MAX_PAGE_SIZE}")

    return query.offset((page - 1) * limit).limit(limit).all(), total


def get_expense(db: Session, expense_id: str) -> Expense:
    expense = db.query(Expense).filter(Expense.id == expense_id).first()
    if expense is None:
        raise ExpenseNotFound()
    return expense


def list_by_category(db: Session, category: str) -> List[Expense]:
    return _newest_first(db.query(Expense).filter(Expense.category == category)).all()


def list_by_email(db: Session, email: str) -> List[Expense]:
    return _newest_first(db.query(Expense).filter(Expense.email == email)).all()


def create_expense(db: Session, data: ExpenseCreate) -> Expense:
    new_expense = Expense(
        description=data.description,
        amount=data.amount,
        category=data.category,
        email=data.email,
        date=utcnow(),
    )
    db.add(new_expense)
    db.commit()
    db.refresh(new_expense)
    logger.info("Created expense %s (%s, %s)", new_expense.id, new_expense.category, new_expense.amount)
    return new_expense


def update_expense(db: Session, expense_id: str, patch: ExpensePatch) -> Expense:
    changes = patch.changes()
    if not changes:
        raise InvalidRequest("No fields to update")

    expense = get_expense(db, expense_id)
    for field, value in changes.items():
        setattr(expense, field, value)
    db.commit()
    db.refresh(expense)
    logger.info("Updated expense %s: %s", expense.id, ", ".join(sorted(changes)))
    return expense


def delete_expense(db: Session, expense_id: str) -> None:
    expense = get_expense(db, expense_id)
    db.delete(expense)
    db.commit()
    logger.info("Deleted expense %s", expense_id)
