"""BDD tests for the shipment lifecycle."""

import pytest
from delivery.shipment.dispatcher import DeliveryDispatcher
from delivery.shipment.notifier import SHIPMENT_STATUS_UPDATE
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/shipment_lifecycle.feature")


@pytest.fixture()
def outcome():
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a shipment for order "{order_id}"'), target_fixture="shipment_id")
def _(order_id):
    shipment = DeliveryDispatcher().create_shipment(
        order_id=order_id,
        warehouse_id="wh-1",
        product_id="42",
        quantity=1,
        recipient_name="Jane Doe",
        recipient_email="jane@example.com",
        address="1 George St, Sydney NSW 2000, AU",
    )
    return shipment.id


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse("the shipment advances {times:d} times"))
def _(shipment_id, times):
    for _ in range(times):
        DeliveryDispatcher().advance_shipment(shipment_id)


@when("the carrier reports the shipment lost")
def _(shipment_id, outcome):
    try:
        DeliveryDispatcher().report_lost(shipment_id)
    except ValidationError as exc:
        outcome["error"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the shipment is "{status}"'))
def _(shipment_id, status):
    assert DeliveryDispatcher().get_shipment(shipment_id).status == status


@then("the actual delivery time is recorded")
def _(shipment_id):
    assert DeliveryDispatcher().get_shipment(shipment_id).actual_delivery is not None


@then(parsers.cfparse("{count:d} status webhooks were pushed"))
def _(webhook_client, count):
    assert len(webhook_client.payloads(SHIPMENT_STATUS_UPDATE)) == count


@then(parsers.cfparse('the last status webhook says "{status}"'))
def _(webhook_client, status):
    assert webhook_client.payloads(SHIPMENT_STATUS_UPDATE)[-1]["status"] == status


@then("the change is rejected")
def _(outcome):
    assert isinstance(outcome.get("error"), ValidationError)
