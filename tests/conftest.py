"""Shared fixtures for the expense API tests.

Every test gets its own SQLite file database and a recording mailer, so no
test touches a real database server or sends mail.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from expense_api.core.config import Settings
from expense_api.db.session import Database
from expense_api.main import create_app
from expense_api.models.expense import Expense
from expense_api.services.mailer import Mailer


class RecordingMailer(Mailer):
    """Mailer double that remembers every send and can be told to fail."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent = []

    def send(self, recipient, total, items):
        self.sent.append((recipient, total, list(items)))
        return self.succeed


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL_OVERRIDE=f"sqlite:///{tmp_path / 'expenses.db'}",
        DB_POOL_SIZE=5,
        EMAIL_USER="",
        EMAIL_PASSWORD="",
        LOG_LEVEL="WARNING",
        EXPOSE_ERROR_DETAILS=False,
    )


@pytest.fixture
def database(settings):
    db = Database.from_settings(settings)
    yield db
    db.dispose()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def app(settings, database, mailer):
    return create_app(settings=settings, database=database, mailer=mailer)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def expense_factory(client, database):
    """Insert expenses directly so tests can control the date."""

    def _create_expense(
        description: str = "Groceries",
        amount: str = "12.50",
        category: str = "Food",
        email: str = None,
        date: datetime = None,
    ) -> dict:
        if date is None:
            date = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        with database.session() as session:
            expense = Expense(
                description=description,
                amount=Decimal(amount),
                category=category,
                email=email,
                date=date,
            )
            session.add(expense)
            session.commit()
            return {"id": expense.id, "description": description, "amount": float(amount)}

    return _create_expense


@pytest.fixture
def expense_count(database):
    def _count() -> int:
        with database.session() as session:
            return session.query(Expense).count()

    return _count
