"""FastAPI routes for the Delivery Dispatcher.

Every status change pushes a webhook, so the routes are sync and run in
the threadpool.
"""

from fastapi import APIRouter, HTTPException

from delivery.api.schemas import (
    CreateShipmentRequest,
    ShipmentResponse,
    SimulationTickResponse,
    UpdateShipmentStatusRequest,
)
from delivery.shipment.dispatcher import DeliveryDispatcher, shipment_for_order
from delivery.shipment.simulator import DeliverySimulator

delivery_router = APIRouter(prefix="/deliveries", tags=["deliveries"])


def _shipment_response(shipment) -> ShipmentResponse:
    return ShipmentResponse(
        shipment_id=str(shipment.id),
        order_id=str(shipment.order_id),
        tracking_number=shipment.tracking_number,
        carrier=shipment.carrier,
        status=shipment.status,
        progress=shipment.progress,
        estimated_delivery=shipment.estimated_delivery,
        actual_delivery=shipment.actual_delivery,
    )


@delivery_router.post("", status_code=201, response_model=ShipmentResponse)
def create_shipment(body: CreateShipmentRequest) -> ShipmentResponse:
    shipment = DeliveryDispatcher().create_shipment(**body.model_dump())
    return _shipment_response(shipment)


@delivery_router.post("/simulation/tick", response_model=SimulationTickResponse)
def simulation_tick() -> SimulationTickResponse:
    changes = DeliverySimulator().tick()
    return SimulationTickResponse(
        changes=[{"shipment_id": shipment_id, "status": status} for shipment_id, status in changes]
    )


@delivery_router.get("/orders/{order_id}", response_model=ShipmentResponse)
def get_shipment_for_order(order_id: str) -> ShipmentResponse:
    shipment = shipment_for_order(order_id)
    if shipment is None:
        raise HTTPException(status_code=404, detail=f"No shipment for order {order_id}")
    return _shipment_response(shipment)


@delivery_router.get("/{shipment_id}", response_model=ShipmentResponse)
def get_shipment(shipment_id: str) -> ShipmentResponse:
    return _shipment_response(DeliveryDispatcher().get_shipment(shipment_id))


@delivery_router.post("/{shipment_id}/advance", response_model=ShipmentResponse)
def advance_shipment(shipment_id: str) -> ShipmentResponse:
    return _shipment_response(DeliveryDispatcher().advance_shipment(shipment_id))


@delivery_router.post("/{shipment_id}/lost", response_model=ShipmentResponse)
def report_lost(shipment_id: str) -> ShipmentResponse:
    return _shipment_response(DeliveryDispatcher().report_lost(shipment_id))


@delivery_router.put("/{shipment_id}/status", response_model=ShipmentResponse)
def update_status(shipment_id: str, body: UpdateShipmentStatusRequest) -> ShipmentResponse:
    return _shipment_response(DeliveryDispatcher().update_status(shipment_id, body.status))
