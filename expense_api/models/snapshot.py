from sqlalchemy import Column, String, Numeric, DateTime, JSON

from expense_api.db.session import Base
from expense_api.models.expense import generate_id, utcnow


class TotalSnapshot(Base):
    """A saved total for an email or token.

    Point-in-time copy: nothing ties it back to live expense rows once saved.
    """

    __tablename__ = "total_expenses"

    id = Column(String(32), primary_key=True, default=generate_id)
    email = Column(String(255), nullable=True, unique=True)
    token = Column(String(64), nullable=True, unique=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    items = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
