"""Shipment status webhooks, pushed after the change has committed."""

from webhooks.client import get_webhook_client

from delivery.domain import logger

SHIPMENT_STATUS_UPDATE = "SHIPMENT_STATUS_UPDATE"


def shipment_webhook_payload(shipment) -> dict:
    return {
        "shipment_id": str(shipment.id),
        "status": shipment.status,
        "timestamp": (shipment.updated_at or shipment.created_at).isoformat(),
    }


def push_status_change(shipment) -> bool:
    delivered = get_webhook_client().deliver(SHIPMENT_STATUS_UPDATE, shipment_webhook_payload(shipment))
    if not delivered:
        logger.warning(
            "shipment_webhook_not_delivered",
            shipment_id=str(shipment.id),
            order_id=str(shipment.order_id),
            status=shipment.status,
        )
    return delivered
