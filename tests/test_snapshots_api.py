from datetime import datetime, timezone
from decimal import Decimal

import pytest


def test_save_total_for_email_then_fetch(client, expense_factory, mailer):
    expense_factory(description="Lunch", amount="8.00", email="ana@example.com")

    saved = client.post(
        "/api/expenses/save-total", json={"email": "ana@example.com", "totalExpense": "19.99"}
    )

    assert saved.status_code == 200
    body = saved.json()
    assert body["success"] is True
    assert body["emailSent"] is True
    assert body["message"] == "Expense summary saved and email sent successfully"

    fetched = client.get(f"/api/expenses/total/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["totalExpense"] == 19.99
    assert fetched.json()["email"] == "ana@example.com"
    assert fetched.json()["savedAt"]


def test_save_total_mails_the_matching_expenses(client, expense_factory, mailer):
    expense_factory(description="Lunch", amount="8.00", email="ana@example.com",
                    date=datetime(2024, 2, 1, tzinfo=timezone.utc))
    expense_factory(description="Taxi", amount="15.50", email="ana@example.com",
                    date=datetime(2024, 2, 2, tzinfo=timezone.utc))
    expense_factory(description="Not mine", amount="1.00", email="bob@example.com")

    client.post("/api/expenses/save-total", json={"email": "ana@example.com", "totalExpense": 23.5})

    assert len(mailer.sent) == 1
    recipient, total, items = mailer.sent[0]
    assert recipient == "ana@example.com"
    assert total == Decimal("23.50")
    assert [item["description"] for item in items] == ["Taxi", "Lunch"]


def test_save_total_upserts_by_email(client):
    first = client.post(
        "/api/expenses/save-total", json={"email": "ana@example.com", "totalExpense": 10}
    ).json()
    second = client.post(
        "/api/expenses/save-total", json={"email": "ana@example.com", "totalExpense": 42}
    ).json()

    assert first["id"] == second["id"]
    assert client.get(f"/api/expenses/total/{first['id']}").json()["totalExpense"] == 42.0


def test_mail_failure_does_not_fail_the_save(client, mailer):
    mailer.succeed = False

    response = client.post(
        "/api/expenses/save-total", json={"email": "ana@example.com", "totalExpense": 5}
    )

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["emailSent"] is False
    assert response.json()["message"] == "Expense saved but email failed to send"
    assert client.get(f"/api/expenses/total/{response.json()['id']}").status_code == 200


def test_save_without_email_or_token_generates_token(client, mailer):
    response = client.post(
        "/api/expenses/save-total",
        json={
            "totalExpense": "12.00",
            "expenses": [{"description": "Coffee", "amount": 4.5, "category": "Food", "id": "x"}],
        },
    )

    body = response.json()
    assert response.status_code == 200
    assert body["token"]
    assert body["emailSent"] is False
    assert mailer.sent == []

    snapshot = client.get(f"/api/expenses/total/{body['id']}").json()
    assert snapshot["token"] == body["token"]
    assert snapshot["email"] is None
    assert snapshot["expenses"] == [
        {"description": "Coffee", "amount": 4.5, "category": "Food", "date": None}
    ]


def test_retrieve_by_token(client):
    client.post(
        "/api/expenses/save-total",
        json={
            "token": "my-token",
            "totalExpense": 3,
            "expenses": [{"description": "Tea", "amount": 3, "category": "Food"}],
        },
    )

    response = client.post("/api/expenses/retrieve", json={"token": "my-token"})

    assert response.status_code == 200
    assert response.json()["totalExpense"] == 3.0
    assert response.json()["expenses"][0]["description"] == "Tea"


def test_retrieve_by_unknown_token_is_404(client):
    response = client.post("/api/expenses/retrieve", json={"token": "nope"})

    assert response.status_code == 404


def test_retrieve_by_email_without_saved_total(client, expense_factory):
    expense_factory(description="Lunch", amount="8.00", email="ana@example.com")

    response = client.post("/api/expenses/retrieve", json={"email": "ana@example.com"})

    assert response.status_code == 200
    assert response.json()["totalExpense"] == 0.0
    assert [e["description"] for e in response.json()["expenses"]] == ["Lunch"]


def test_retrieve_requires_email_or_token(client):
    response = client.post("/api/expenses/retrieve", json={})

    assert response.status_code == 400


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "ana@example.com", "totalExpense": "abc"},
        {"email": "ana@example.com", "totalExpense": -1},
        {"email": "ana@example.com"},
        {"email": "not an email", "totalExpense": 1},
        {"email": "ana@example.com", "token": "t", "totalExpense": 1},
    ],
)
def test_save_total_validation(client, payload):
    response = client.post("/api/expenses/save-total", json=payload)

    assert response.status_code == 400
    assert "error" in response.json()


def test_unknown_snapshot_is_404(client):
    response = client.get("/api/expenses/total/unknown")

    assert response.status_code == 404
    assert response.json() == {"error": "Total expense not found"}


@pytest.mark.parametrize("total", ["1e40", 1e30, 123456789012.5])
def test_save_total_rejects_totals_too_large_for_the_column(client, total):
    response = client.post(
        "/api/expenses/save-total", json={"email": "ana@example.com", "totalExpense": total}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "totalExpense: Amount must not exceed 9999999999.99"


def test_save_total_rejects_token_longer_than_the_column(client):
    response = client.post("/api/expenses/save-total", json={"token": "t" * 65, "totalExpense": 1})

    assert response.status_code == 400


def test_retrieve_rejects_email_and_token_together(client):
    client.post("/api/expenses/save-total", json={"token": "my-token", "totalExpense": 3})

    response = client.post(
        "/api/expenses/retrieve", json={"email": "ana@example.com", "token": "my-token"}
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Provide either an email or a token, not both"}
