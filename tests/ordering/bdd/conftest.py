"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.listing.listing import StockSyncConsumer
from ordering.order.orchestrator import OrderOrchestrator
from pytest_bdd import given, parsers, then
from shared.messaging.messages import StockSync, utcnow
from shared.messaging.streams import INVENTORY_ROLLBACK, PAYMENT_REFUND


@pytest.fixture()
def outcome():
    """Collects the order or error of the last When step."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('product "{product_id}" is listed at {price:f}'))
def _(product_id, price, payments_client, delivery_client):
    StockSyncConsumer()(
        StockSync(
            product_id=product_id,
            name="Trail Running Shoe",
            price=price,
            stock=0,
            published=True,
            timestamp=utcnow(),
        ).to_payload()
    )


@given(parsers.cfparse('warehouse "{warehouse_id}" holds {quantity:d} units of product "{product_id}"'))
def _(warehouse_id, quantity, product_id, inventory_client):
    inventory_client.configure(stock={(warehouse_id, product_id): quantity})


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order ends "{status}"'))
def _(outcome, status):
    assert OrderOrchestrator().get_order(outcome["order"].id).status == status


@then(parsers.cfparse('the order is "{status}" because "{reason}"'))
def _(outcome, status, reason):
    order = OrderOrchestrator().get_order(outcome["order"].id)
    assert order.status == status
    assert order.reason == reason


@then("a stock rollback was requested")
def _(published):
    assert len(published(INVENTORY_ROLLBACK)) == 1


@then("a refund was requested")
def _(published):
    assert len(published(PAYMENT_REFUND)) == 1


@then("no refund was requested")
def _(published):
    assert published(PAYMENT_REFUND) == []


@then("no compensation was requested")
def _(published):
    assert published(INVENTORY_ROLLBACK) == []
    assert published(PAYMENT_REFUND) == []
