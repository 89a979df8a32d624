"""Shared BDD fixtures and step definitions for the Inventory domain."""

import pytest
from inventory.stock.ledger import InventoryLedger, reservations_for
from inventory.stock.product import RegisterProduct
from inventory.stock.stock import Inventory
from inventory.warehouse.management import CreateWarehouse
from protean import current_domain
from pytest_bdd import given, parsers, then


@pytest.fixture()
def outcome():
    """Collects the result or error of the last When step."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('product "{product_id}" is in the catalogue'))
def _(product_id):
    current_domain.process(
        RegisterProduct(product_id=product_id, name="Trail Running Shoe", price=50.0),
        asynchronous=False,
    )


@given(parsers.cfparse('warehouse "{warehouse_id}" holds {quantity:d} units of product "{product_id}"'))
def _(warehouse_id, quantity, product_id):
    current_domain.process(
        CreateWarehouse(
            warehouse_id=warehouse_id,
            name=f"Warehouse {warehouse_id}",
            address={"street": "1 Dock Rd", "city": "Newark", "postal_code": "07101", "country": "US"},
        ),
        asynchronous=False,
    )
    InventoryLedger().receive_stock(warehouse_id, product_id, quantity)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('warehouse "{warehouse_id}" holds {quantity:d} units of product "{product_id}"'))
def _(warehouse_id, quantity, product_id):
    row = current_domain.repository_for(Inventory).get(f"{warehouse_id}:{product_id}")
    assert row.quantity == quantity


@then(parsers.re(r'order "(?P<order_id>[^"]+)" has (?P<count>\d+) reservations?'))
def _(order_id, count):
    assert len(reservations_for(order_id)) == int(count)
