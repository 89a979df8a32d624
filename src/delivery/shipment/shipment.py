"""Shipment aggregate — one parcel from one warehouse to one customer.

State Machine:
    SHIPMENT_CREATED → PROCESSING → PICKED_UP → IN_TRANSIT → DELIVERED
    any non-terminal state → LOST
"""

from datetime import UTC, datetime, timedelta
from enum import Enum
from uuid import uuid4

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from delivery.domain import delivery

DEFAULT_CARRIER = "DeliveryCo Express"
DEFAULT_ESTIMATED_DAYS = 4


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ShipmentStatus(Enum):
    SHIPMENT_CREATED = "SHIPMENT_CREATED"
    PROCESSING = "PROCESSING"
    PICKED_UP = "PICKED_UP"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    LOST = "LOST"


_NEXT_STATUS = {
    ShipmentStatus.SHIPMENT_CREATED: ShipmentStatus.PROCESSING,
    ShipmentStatus.PROCESSING: ShipmentStatus.PICKED_UP,
    ShipmentStatus.PICKED_UP: ShipmentStatus.IN_TRANSIT,
    ShipmentStatus.IN_TRANSIT: ShipmentStatus.DELIVERED,
}

_TERMINAL_STATUSES = {ShipmentStatus.DELIVERED, ShipmentStatus.LOST}

_VALID_TRANSITIONS = {
    ShipmentStatus.SHIPMENT_CREATED: {ShipmentStatus.PROCESSING, ShipmentStatus.LOST},
    ShipmentStatus.PROCESSING: {ShipmentStatus.PICKED_UP, ShipmentStatus.LOST},
    ShipmentStatus.PICKED_UP: {ShipmentStatus.IN_TRANSIT, ShipmentStatus.LOST},
    ShipmentStatus.IN_TRANSIT: {ShipmentStatus.DELIVERED, ShipmentStatus.LOST},
    ShipmentStatus.DELIVERED: set(),  # Terminal
    ShipmentStatus.LOST: set(),  # Terminal
}


def _short_code() -> str:
    return uuid4().hex[:8].upper()


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@delivery.aggregate
class Shipment:
    order_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=20)
    carrier = String(max_length=100, default=DEFAULT_CARRIER)
    warehouse_id = Identifier()
    product_id = Identifier()
    quantity = Integer(min_value=1, default=1)
    recipient_name = String(max_length=255)
    recipient_email = String(max_length=255)
    address = Text()
    status = String(choices=ShipmentStatus, default=ShipmentStatus.SHIPMENT_CREATED.value)
    progress = Integer(default=0, min_value=0, max_value=100)
    estimated_delivery = DateTime()
    actual_delivery = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_id,
        warehouse_id,
        product_id,
        quantity,
        recipient_name,
        recipient_email,
        address,
        carrier=DEFAULT_CARRIER,
        estimated_days=DEFAULT_ESTIMATED_DAYS,
    ):
        now = datetime.now(UTC)
        return cls(
            id=f"SHIP-{_short_code()}",
            order_id=str(order_id),
            tracking_number=f"TRK-{_short_code()}",
            carrier=carrier,
            warehouse_id=warehouse_id,
            product_id=product_id,
            quantity=quantity,
            recipient_name=recipient_name,
            recipient_email=recipient_email,
            address=address,
            status=ShipmentStatus.SHIPMENT_CREATED.value,
            progress=0,
            estimated_delivery=now + timedelta(days=estimated_days),
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_terminal(self) -> bool:
        return ShipmentStatus(self.status) in _TERMINAL_STATUSES

    def next_status(self) -> ShipmentStatus | None:
        return _NEXT_STATUS.get(ShipmentStatus(self.status))

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def transition_to(self, target: ShipmentStatus) -> None:
        current = ShipmentStatus(self.status)
        if target not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        if target is ShipmentStatus.DELIVERED:
            self.progress = 100
            self.actual_delivery = now

    def advance(self) -> ShipmentStatus:
        target = self.next_status()
        if target is None:
            raise ValidationError({"status": [f"Shipment is already {self.status}"]})
        self.transition_to(target)
        return target

    def mark_lost(self) -> None:
        self.transition_to(ShipmentStatus.LOST)
