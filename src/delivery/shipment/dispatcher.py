"""Delivery Dispatcher — create, advance and lose shipments.

Every status change commits in its own Unit of Work, then pushes the
``SHIPMENT_STATUS_UPDATE`` webhook.
"""

from protean import UnitOfWork
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from delivery.domain import delivery, logger
from delivery.shipment.notifier import push_status_change
from delivery.shipment.shipment import DEFAULT_CARRIER, DEFAULT_ESTIMATED_DAYS, Shipment, ShipmentStatus


def carrier_settings() -> tuple[str, int]:
    custom = current_domain.config.get("custom", {})
    return (
        custom.get("carrier_name", DEFAULT_CARRIER),
        int(custom.get("estimated_delivery_days", DEFAULT_ESTIMATED_DAYS)),
    )


def shipment_for_order(order_id) -> Shipment | None:
    return current_domain.repository_for(Shipment)._dao.query.filter(order_id=str(order_id)).all().first


def active_shipments() -> list[Shipment]:
    active = [s.value for s in ShipmentStatus if s not in (ShipmentStatus.DELIVERED, ShipmentStatus.LOST)]
    return (
        current_domain.repository_for(Shipment)
        ._dao.query.filter(status__in=active)
        .order_by("created_at")
        .limit(None)
        .all()
        .items
    )


@delivery.application_service(part_of=Shipment)
class DeliveryDispatcher:
    def create_shipment(
        self,
        order_id,
        warehouse_id,
        product_id,
        quantity,
        recipient_name,
        recipient_email,
        address,
    ) -> Shipment:
        """Idempotent per order: a repeated request returns the existing shipment."""
        existing = shipment_for_order(order_id)
        if existing is not None:
            logger.info("shipment_already_exists", order_id=str(order_id), shipment_id=str(existing.id))
            return existing

        carrier, estimated_days = carrier_settings()
        shipment = Shipment.create(
            order_id=order_id,
            warehouse_id=warehouse_id,
            product_id=product_id,
            quantity=quantity,
            recipient_name=recipient_name,
            recipient_email=recipient_email,
            address=address,
            carrier=carrier,
            estimated_days=estimated_days,
        )
        with UnitOfWork():
            current_domain.repository_for(Shipment).add(shipment)

        logger.info(
            "shipment_created",
            order_id=str(order_id),
            shipment_id=str(shipment.id),
            tracking_number=shipment.tracking_number,
            warehouse_id=str(warehouse_id),
        )
        push_status_change(shipment)
        return shipment

    def get_shipment(self, shipment_id) -> Shipment:
        return current_domain.repository_for(Shipment).get(str(shipment_id))

    def advance_shipment(self, shipment_id, progress=None) -> Shipment:
        """Move the shipment one step along the graph."""
        return self._change(shipment_id, lambda shipment: shipment.advance(), progress=progress)

    def report_lost(self, shipment_id) -> Shipment:
        return self._change(shipment_id, lambda shipment: shipment.mark_lost())

    def update_status(self, shipment_id, status) -> Shipment:
        try:
            target = ShipmentStatus(status)
        except ValueError as exc:
            raise ValidationError({"status": [f"Unknown shipment status {status}"]}) from exc
        return self._change(shipment_id, lambda shipment: shipment.transition_to(target))

    def record_progress(self, shipment_id, progress) -> Shipment:
        """Progress without a status change. No webhook."""
        repo = current_domain.repository_for(Shipment)
        with UnitOfWork():
            shipment = repo.get(str(shipment_id))
            shipment.progress = min(int(progress), 100)
            repo.add(shipment)
        return shipment

    def _change(self, shipment_id, mutate, progress=None) -> Shipment:
        repo = current_domain.repository_for(Shipment)
        with UnitOfWork():
            shipment = repo.get(str(shipment_id))
            previous = shipment.status
            mutate(shipment)
            if progress is not None and shipment.status != ShipmentStatus.DELIVERED.value:
                shipment.progress = min(int(progress), 100)
            repo.add(shipment)

        logger.info(
            "shipment_status_changed",
            shipment_id=str(shipment.id),
            order_id=str(shipment.order_id),
            previous=previous,
            status=shipment.status,
            progress=shipment.progress,
        )
        push_status_change(shipment)
        return shipment
