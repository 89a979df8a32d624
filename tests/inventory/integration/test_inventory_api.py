"""Integration tests for the Inventory API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from inventory.api.routes import inventory_router, warehouse_router
from inventory.stock.stock import Inventory
from inventory.warehouse.warehouse import Warehouse
from protean import current_domain
from shared.api import register_error_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(warehouse_router)
    app.include_router(inventory_router)
    return TestClient(app)


def _create_warehouse(client, **overrides):
    defaults = {
        "warehouse_id": "wh-1",
        "name": "Main Warehouse",
        "address": {
            "street": "123 Logistics Way",
            "city": "Dallas",
            "state": "TX",
            "postal_code": "75201",
            "country": "US",
        },
    }
    defaults.update(overrides)
    response = client.post("/warehouses", json=defaults)
    assert response.status_code == 201
    return response.json()["warehouse_id"]


def _stocked(client, quantity=10):
    _create_warehouse(client)
    client.post(
        "/inventory/products",
        json={"product_id": "42", "name": "Trail Running Shoe", "price": 50.0},
    )
    response = client.post(
        "/inventory/stock",
        json={"warehouse_id": "wh-1", "product_id": "42", "quantity": quantity},
    )
    assert response.status_code == 200


def _reserve(client, order_id="ord-1", quantity=4):
    return client.post(
        "/inventory/reservations",
        json={"order_id": order_id, "warehouse_id": "wh-1", "product_id": "42", "quantity": quantity},
    )


class TestWarehouseEndpoints:
    def test_create_warehouse(self, client):
        wh_id = _create_warehouse(client)

        warehouse = current_domain.repository_for(Warehouse).get(wh_id)
        assert warehouse.name == "Main Warehouse"
        assert warehouse.is_active is True

    def test_deactivate_warehouse(self, client):
        wh_id = _create_warehouse(client)
        response = client.put(f"/warehouses/{wh_id}/deactivate")

        assert response.status_code == 200
        assert current_domain.repository_for(Warehouse).get(wh_id).is_active is False

    def test_missing_address_is_rejected(self, client):
        response = client.post("/warehouses", json={"name": "No Address"})
        assert response.status_code == 422


class TestStockEndpoints:
    def test_receive_stock_reports_on_hand(self, client):
        _stocked(client, quantity=10)
        response = client.post(
            "/inventory/stock",
            json={"warehouse_id": "wh-1", "product_id": "42", "quantity": 5},
        )
        assert response.json()["quantity"] == 15

    def test_check_stock(self, client):
        _stocked(client, quantity=10)
        response = client.get("/inventory/stock/42", params={"quantity": 3})

        data = response.json()
        assert data["available"] is True
        assert data["warehouses"] == ["wh-1"]

    def test_check_stock_unavailable(self, client):
        _stocked(client, quantity=2)
        response = client.get("/inventory/stock/42", params={"quantity": 3})

        assert response.json()["available"] is False
        assert response.json()["warehouses"] == []


class TestReservationEndpoints:
    def test_reserve(self, client):
        _stocked(client)
        response = _reserve(client)

        assert response.status_code == 201
        assert response.json()["reservation_id"]
        assert current_domain.repository_for(Inventory).get("wh-1:42").quantity == 6

    def test_insufficient_stock_is_conflict(self, client):
        _stocked(client, quantity=3)
        response = _reserve(client, quantity=4)

        assert response.status_code == 409
        assert "error" in response.json()

    def test_unknown_warehouse_is_not_found(self, client):
        response = _reserve(client)
        assert response.status_code == 404

    def test_commit(self, client):
        _stocked(client)
        reservation_id = _reserve(client).json()["reservation_id"]

        first = client.post(f"/inventory/reservations/{reservation_id}/commit")
        second = client.post(f"/inventory/reservations/{reservation_id}/commit")

        assert first.json()["committed"] is True
        assert second.json()["committed"] is False

    def test_rollback(self, client):
        _stocked(client)
        _reserve(client)

        response = client.post("/inventory/orders/ord-1/rollback")

        assert response.status_code == 200
        assert response.json() == {"order_id": "ord-1", "released": 1}
        assert current_domain.repository_for(Inventory).get("wh-1:42").quantity == 10

    def test_rollback_without_reservations(self, client):
        response = client.post("/inventory/orders/ord-unknown/rollback")
        assert response.json()["released"] == 0
