import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Numeric, DateTime

from expense_api.db.session import Base


def generate_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Expense(Base):
    __tablename__ = "expenses"

    # Opaque identifier, assigned by the server at creation
    id = Column(String(32), primary_key=True, default=generate_id)
    description = Column(String(255), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    email = Column(String(255), nullable=True, index=True)
    date = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def to_item(self) -> dict:
        """Plain copy used when a snapshot captures its source expenses."""
        return {
            "description": self.description,
            "amount": float(self.amount),
            "category": self.category,
            "date": self.date.isoformat() if self.date else None,
        }
