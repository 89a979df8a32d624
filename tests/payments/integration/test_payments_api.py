"""Integration tests for the Accounts and Payments API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from payments.api.routes import account_router, payment_router
from shared.api import register_error_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(account_router)
    app.include_router(payment_router)
    return TestClient(app)


def _open_accounts(client, balance=500.0):
    client.post(
        "/accounts/merchants",
        json={"account_id": "acct-merchant", "holder_name": "Fulfillment Store", "biller_code": "93242"},
    )
    response = client.post(
        "/accounts",
        json={"account_id": "acct-jane", "holder_name": "Jane Doe", "opening_balance": balance},
    )
    assert response.status_code == 201


def _instruction(client, order_id="ord-1", amount=100.0):
    return client.post("/payments/instructions", json={"order_id": order_id, "amount": amount})


class TestAccountEndpoints:
    def test_open_and_read_balance(self, client):
        _open_accounts(client)
        response = client.get("/accounts/acct-jane")
        assert response.json() == {"account_id": "acct-jane", "balance": 500.0}

    def test_transfer(self, client):
        _open_accounts(client)
        response = client.post(
            "/accounts/transfers",
            json={"from_account_id": "acct-jane", "to_account_id": "acct-merchant", "amount": 25.0},
        )
        assert response.status_code == 201
        assert response.json()["status"] == "COMPLETED"

    def test_transfer_insufficient_funds_is_conflict(self, client):
        _open_accounts(client, balance=5.0)
        response = client.post(
            "/accounts/transfers",
            json={"from_account_id": "acct-jane", "to_account_id": "acct-merchant", "amount": 25.0},
        )
        assert response.status_code == 409

    def test_unknown_account_is_not_found(self, client):
        assert client.get("/accounts/acct-missing").status_code == 404


class TestPaymentEndpoints:
    def test_issue_instruction(self, client):
        _open_accounts(client)
        response = _instruction(client)

        assert response.status_code == 201
        data = response.json()
        assert data["reference"] == "BP-ord-1"
        assert data["biller_code"] == "93242"
        assert data["status"] == "PENDING"

    def test_confirm_payment(self, client):
        _open_accounts(client)
        _instruction(client)

        response = client.post("/payments/confirm", json={"reference": "BP-ord-1", "payer_account_id": "acct-jane"})

        assert response.status_code == 200
        assert response.json()["status"] == "COMPLETED"
        assert client.get("/accounts/acct-jane").json()["balance"] == 400.0

    def test_get_payment(self, client):
        _open_accounts(client)
        _instruction(client)
        response = client.get("/payments/pay-ord-1")
        assert response.json()["order_id"] == "ord-1"

    def test_refund(self, client):
        _open_accounts(client)
        _instruction(client)
        client.post("/payments/confirm", json={"reference": "BP-ord-1", "payer_account_id": "acct-jane"})

        response = client.post("/payments/orders/ord-1/refund", json={"reason": "USER_CANCELLED"})

        assert response.json()["status"] == "REFUNDED"
        assert client.get("/accounts/acct-jane").json()["balance"] == 500.0

    def test_refund_of_pending_payment_is_bad_request(self, client):
        _open_accounts(client)
        _instruction(client)
        response = client.post("/payments/orders/ord-1/refund", json={"reason": "USER_CANCELLED"})
        assert response.status_code == 400

    def test_void(self, client):
        _open_accounts(client)
        _instruction(client)
        response = client.post("/payments/orders/ord-1/void", json={"reason": "INSTRUCTION_FAILED"})
        assert response.json()["status"] == "FAILED"
