from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from expense_api.db.session import get_db
from expense_api.schemas.expense import ExpenseCreate, ExpensePatch, ExpenseRead
from expense_api.schemas.snapshot import (
    RetrieveRequest,
    RetrieveResponse,
    SaveTotalRequest,
    SaveTotalResponse,
    SnapshotRead,
)
from expense_api.services import expenses as expense_service
from expense_api.services import snapshots as snapshot_service
from expense_api.services.export import export_expenses
from expense_api.services.mailer import Mailer

router = APIRouter(prefix="/api/expenses", tags=["expenses"])


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


@router.get("", response_model=List[ExpenseRead])
def list_expenses(
    response: Response,
    page: Optional[int] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
):
    expenses, total = expense_service.list_expenses(db, page=page, limit=limit)
    response.headers["X-Total-Count"] = str(total)
    return expenses


@router.post("", response_model=ExpenseRead, status_code=201)
def create_expense(data: ExpenseCreate, db: Session = Depends(get_db)):
    return expense_service.create_expense(db, data)


# --- Fixed paths first so they are not captured by /{expense_id} ---

@router.get("/export")
def export(format: str = Query(default="csv"), db: Session = Depends(get_db)):
    expenses, _ = expense_service.list_expenses(db)
    content, media_type, filename = export_expenses(expenses, format)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/category/{category:path}", response_model=List[ExpenseRead])
def expenses_by_category(category: str, db: Session = Depends(get_db)):
    return expense_service.list_by_category(db, category)


@router.post("/save-total", response_model=SaveTotalResponse)
def save_total(
    data: SaveTotalRequest,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    return snapshot_service.save_total(db, mailer, data)


@router.get("/total/{snapshot_id}", response_model=SnapshotRead)
def get_total(snapshot_id: str, db: Session = Depends(get_db)):
    snapshot = snapshot_service.get_snapshot(db, snapshot_id)
    return snapshot_service.snapshot_payload(snapshot)


@router.post("/retrieve", response_model=RetrieveResponse)
def retrieve(data: RetrieveRequest, db: Session = Depends(get_db)):
    return snapshot_service.retrieve(db, email=data.email, token=data.token)


# --- Single record ---

@router.get("/{expense_id}", response_model=ExpenseRead)
def get_expense(expense_id: str, db: Session = Depends(get_db)):
    return expense_service.get_expense(db, expense_id)


@router.put("/{expense_id}", response_model=ExpenseRead)
def update_expense(expense_id: str, patch: ExpensePatch, db: Session = Depends(get_db)):
    return expense_service.update_expense(db, expense_id, patch)


@router.delete("/{expense_id}", status_code=204)
def delete_expense(expense_id: str, db: Session = Depends(get_db)):
    expense_service.delete_expense(db, expense_id)
    return Response(status_code=204)
