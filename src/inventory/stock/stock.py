"""Inventory and Reservation aggregates — the Inventory Ledger's data.

Stock Model:
    Inventory:   one row per (warehouse, product). ``quantity`` is what can
                 still be reserved. It is never written directly, only
                 through a compare-and-swap on ``revision``.
    Reservation: a hold for one order at one warehouse. Its existence means
                 ``quantity`` units were already debited from the matching
                 Inventory row; deleting it credits exactly that back.

Rows reference each other by id only.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from inventory.domain import inventory


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ReservationStatus(Enum):
    RESERVED = "Reserved"
    COMMITTED = "Committed"


def inventory_id_for(warehouse_id, product_id) -> str:
    """Inventory rows are keyed by (warehouse, product)."""
    return f"{warehouse_id}:{product_id}"


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------
@inventory.aggregate
class Inventory:
    """Stock of one product at one warehouse."""

    warehouse_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(default=0, min_value=0)
    revision = Integer(default=0)
    updated_at = DateTime()

    @classmethod
    def open(cls, warehouse_id, product_id, quantity=0):
        if quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})
        return cls(
            id=inventory_id_for(warehouse_id, product_id),
            warehouse_id=str(warehouse_id),
            product_id=str(product_id),
            quantity=quantity,
            revision=0,
            updated_at=datetime.now(UTC),
        )

    def can_cover(self, quantity) -> bool:
        return self.quantity >= quantity


@inventory.aggregate
class Reservation:
    """Units of a product held at one warehouse for one order.

    RESERVED → COMMITTED once the order is paid. Rollback deletes the row
    whatever its status, crediting the quantity back.
    """

    order_id = Identifier(required=True)
    warehouse_id = Identifier(required=True)
    product_id = Identifier(required=True)
    inventory_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    status = String(
        max_length=20,
        choices=ReservationStatus,
        default=ReservationStatus.RESERVED.value,
    )
    reserved_at = DateTime(required=True)
    committed_at = DateTime()

    @classmethod
    def hold(cls, order_id, warehouse_id, product_id, quantity):
        return cls(
            order_id=str(order_id),
            warehouse_id=str(warehouse_id),
            product_id=str(product_id),
            inventory_id=inventory_id_for(warehouse_id, product_id),
            quantity=quantity,
            status=ReservationStatus.RESERVED.value,
            reserved_at=datetime.now(UTC),
        )

    @property
    def is_committed(self) -> bool:
        return self.status == ReservationStatus.COMMITTED.value

    def commit(self) -> bool:
        """Mark the hold final. Returns False when it already was."""
        if self.is_committed:
            return False
        self.status = ReservationStatus.COMMITTED.value
        self.committed_at = datetime.now(UTC)
        return True
