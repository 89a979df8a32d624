"""Order aggregate — the saga's own state.

State Machine:
    PENDING → PROCESSING → (PICKED_UP → DELIVERING) → DELIVERED
    PENDING | PROCESSING → CANCELLED
    PROCESSING | PICKED_UP | DELIVERING → REFUNDED

The status only moves through ``transition_order``, a compare-and-swap on
``revision``. ``total_amount`` is fixed when the order is placed.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, ValueObject

from ordering.domain import ordering


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    PICKED_UP = "PICKED_UP"
    DELIVERING = "DELIVERING"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class ReasonCode(Enum):
    PAYMENT_FAILED = "PAYMENT_FAILED"
    INSTRUCTION_FAILED = "INSTRUCTION_FAILED"
    CANCELLED_BY_USER = "CANCELLED_BY_USER"
    SHIPMENT_LOST = "SHIPMENT_LOST"
    PAYMENT_AFTER_CANCEL = "PAYMENT_AFTER_CANCEL"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {
        OrderStatus.PICKED_UP,
        OrderStatus.DELIVERING,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
        OrderStatus.REFUNDED,
    },
    OrderStatus.PICKED_UP: {OrderStatus.DELIVERING, OrderStatus.DELIVERED, OrderStatus.REFUNDED},
    OrderStatus.DELIVERING: {OrderStatus.DELIVERED, OrderStatus.REFUNDED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.REFUNDED: set(),  # Terminal
}

CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PROCESSING})


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShippingAddress:
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)

    def one_line(self) -> str:
        parts = [self.street, self.city, self.state, self.postal_code, self.country]
        return ", ".join(part for part in parts if part)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    total_amount = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    reason = String(choices=ReasonCode)
    recipient_name = String(required=True, max_length=255)
    recipient_email = String(required=True, max_length=255)
    shipping_address = ValueObject(ShippingAddress)

    # References into other contexts, by id only
    warehouse_id = Identifier()
    reservation_id = Identifier()
    payment_id = Identifier()
    payment_reference = String(max_length=255)
    payment_status = String(max_length=20)
    shipment_id = String(max_length=50)

    actual_delivery = DateTime()
    revision = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        user_id,
        product_id,
        quantity,
        unit_price,
        recipient_name,
        recipient_email,
        shipping_address: dict,
        order_id=None,
    ):
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        now = datetime.now(UTC)
        return cls(
            id=order_id or str(uuid4()),
            user_id=str(user_id),
            product_id=str(product_id),
            quantity=quantity,
            unit_price=unit_price,
            total_amount=round(unit_price * quantity, 2),
            status=OrderStatus.PENDING.value,
            recipient_name=recipient_name,
            recipient_email=recipient_email,
            shipping_address=ShippingAddress(**shipping_address),
            revision=0,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in _VALID_TRANSITIONS[OrderStatus(self.status)]

    @property
    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[OrderStatus(self.status)]

    @property
    def is_cancellable(self) -> bool:
        return OrderStatus(self.status) in CANCELLABLE_STATUSES

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "COMPLETED"
