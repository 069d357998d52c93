import logging
import secrets

from sqlalchemy.orm import Session

from expense_api.core.errors import InvalidRequest, SnapshotNotFound
from expense_api.models.snapshot import TotalSnapshot
from expense_api.schemas.snapshot import SaveTotalRequest
from expense_api.services import expenses as expense_service
from expense_api.services.mailer import Mailer

logger = logging.getLogger(__name__)


def generate_token() -> str:
    return secrets.token_urlsafe(16)


def save_total(db: Session, mailer: Mailer, data: SaveTotalRequest) -> dict:
    """Insert or update the snapshot keyed by email (or token).

    Email snapshots capture the live expenses stored under that email and
    trigger a summary mail. Token snapshots keep the items sent by the
    client. The read of the source expenses and the write are not atomic.
    """
    if data.email and data.token:
        raise InvalidRequest("Provide either an email or a token, not both")

    if data.email:
        items = [e.to_item() for e in expense_service.list_by_email(db, data.email)]
        snapshot = db.query(TotalSnapshot).filter(TotalSnapshot.email == data.email).first()
    else:
        token = data.token or generate_token()
        items = [item.model_dump() for item in data.expenses or []]
        snapshot = db.query(TotalSnapshot).filter(TotalSnapshot.token == token).first()

    if snapshot is None:
        snapshot = TotalSnapshot(email=data.email, token=None if data.email else token)
        db.add(snapshot)
    snapshot.total_amount = data.total_expense
    snapshot.items = items
    db.commit()
    db.refresh(snapshot)
    logger.info("Saved total %s for snapshot %s", snapshot.total_amount, snapshot.id)

    email_sent = False
    if snapshot.email:
        # Mail failure is reported in the response, the save already happened
        email_sent = mailer.send(snapshot.email, snapshot.total_amount, items)
        message = (
            "Expense summary saved and email sent successfully"
            if email_sent
            else "Expense saved but email failed to send"
        )
    else:
        message = "Expense summary saved"

    return {
        "success": True,
        "id": snapshot.id,
        "token": snapshot.token,
        "emailSent": email_sent,
        "message": message,
    }


def get_snapshot(db: Session, snapshot_id: str) -> TotalSnapshot:
    snapshot = db.query(TotalSnapshot).filter(TotalSnapshot.id == snapshot_id).first()
    if snapshot is None:
        raise SnapshotNotFound()
    return snapshot


def snapshot_payload(snapshot: TotalSnapshot) -> dict:
    return {
        "id": snapshot.id,
        "totalExpense": float(snapshot.total_amount),
        "email": snapshot.email,
        "token": snapshot.token,
        "expenses": snapshot.items or [],
        "savedAt": snapshot.updated_at,
    }


def retrieve(db: Session, email: str = None, token: str = None) -> dict:
    if email and token:
        raise InvalidRequest("Provide either an email or a token, not both")

    if email:
        expenses = [e.to_item() for e in expense_service.list_by_email(db, email)]
        snapshot = db.query(TotalSnapshot).filter(TotalSnapshot.email == email).first()
        total = float(snapshot.total_amount) if snapshot else 0.0
        return {"success": True, "expenses": expenses, "totalExpense": total}

    if token:
        snapshot = db.query(TotalSnapshot).filter(TotalSnapshot.token == token).first()
        if snapshot is None:
            raise SnapshotNotFound()
        return {
            "success": True,
            "expenses": snapshot.items or [],
            "totalExpense": float(snapshot.total_amount),
        }

    raise InvalidRequest("Provide an email or a token")
