"""Application tests for the carrier simulator."""

import random

from delivery.shipment.dispatcher import DeliveryDispatcher
from delivery.shipment.notifier import SHIPMENT_STATUS_UPDATE
from delivery.shipment.simulator import DeliverySimulator
from delivery.shipment.shipment import ShipmentStatus


def _create(order_id="ord-1"):
    return DeliveryDispatcher().create_shipment(
        order_id=order_id,
        warehouse_id="wh-1",
        product_id="42",
        quantity=1,
        recipient_name="Jane Doe",
        recipient_email="jane@example.com",
        address="1 George St, Sydney NSW 2000, AU",
    )


def _status(shipment_id):
    return DeliveryDispatcher().get_shipment(shipment_id).status


class TestSimulatorTicks:
    def test_first_tick_starts_processing(self):
        shipment = _create()
        changes = DeliverySimulator(rng=random.Random(7), loss_rate=0.0).tick()

        assert changes == [(shipment.id, ShipmentStatus.PROCESSING.value)]

    def test_reaches_delivered(self):
        shipment = _create()
        simulator = DeliverySimulator(rng=random.Random(7), loss_rate=0.0, step=50)
        for _ in range(4):
            simulator.tick()

        delivered = DeliveryDispatcher().get_shipment(shipment.id)
        assert delivered.status == ShipmentStatus.DELIVERED.value
        assert delivered.actual_delivery is not None

    def test_in_transit_accumulates_progress_without_status_change(self, webhook_client):
        shipment = _create()
        simulator = DeliverySimulator(rng=random.Random(7), loss_rate=0.0, step=20)
        for _ in range(4):
            simulator.tick()

        assert _status(shipment.id) == ShipmentStatus.IN_TRANSIT.value
        assert DeliveryDispatcher().get_shipment(shipment.id).progress == 60
        statuses = [p["status"] for p in webhook_client.payloads(SHIPMENT_STATUS_UPDATE)]
        assert statuses == ["SHIPMENT_CREATED", "PROCESSING", "PICKED_UP", "IN_TRANSIT"]

    def test_certain_loss_loses_processing_shipment(self):
        shipment = _create()
        simulator = DeliverySimulator(rng=random.Random(7), loss_rate=1.0)
        simulator.tick()
        simulator.tick()

        assert _status(shipment.id) == ShipmentStatus.LOST.value

    def test_terminal_shipments_are_not_ticked(self):
        shipment = _create()
        DeliveryDispatcher().report_lost(shipment.id)
        assert DeliverySimulator(loss_rate=0.0).tick() == []

    def test_no_shipments_no_changes(self):
        assert DeliverySimulator().tick() == []
