"""Warehouse aggregate — a pickup location holding Inventory rows.

Inventory rows and shipments refer to a warehouse by id only.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String, ValueObject

from inventory.domain import inventory


@inventory.value_object(part_of="Warehouse")
class WarehouseAddress:
    """Physical address of a warehouse."""

    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@inventory.aggregate
class Warehouse:
    """A physical location where inventory is stored."""

    name = String(required=True, max_length=255)
    address = ValueObject(WarehouseAddress)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, name, address, warehouse_id=None):
        """Create a new warehouse."""
        now = datetime.now(UTC)
        kwargs = {"id": warehouse_id} if warehouse_id else {}
        return cls(
            name=name,
            address=WarehouseAddress(**address) if isinstance(address, dict) else address,
            created_at=now,
            updated_at=now,
            **kwargs,
        )

    def deactivate(self):
        """Stop reserving from this warehouse. Existing reservations remain valid."""
        if not self.is_active:
            raise ValidationError({"is_active": ["Warehouse is already inactive"]})
        self.is_active = False
        self.updated_at = datetime.now(UTC)
