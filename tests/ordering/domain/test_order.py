"""Tests for the Order aggregate and its status table."""

import pytest
from ordering.order.order import Order, OrderStatus
from protean.exceptions import ValidationError


def _make_order(**overrides):
    defaults = {
        "user_id": "user-1",
        "product_id": "42",
        "quantity": 2,
        "unit_price": 50.0,
        "recipient_name": "Jane Doe",
        "recipient_email": "jane@example.com",
        "shipping_address": {
            "street": "123 Main St",
            "city": "Springfield",
            "state": "IL",
            "postal_code": "62701",
            "country": "US",
        },
    }
    defaults.update(overrides)
    return Order.place(**defaults)


class TestPlaceOrder:
    def test_starts_pending(self):
        order = _make_order()
        assert order.status == OrderStatus.PENDING.value
        assert order.revision == 0
        assert order.reason is None

    def test_total_is_price_times_quantity(self):
        assert _make_order(quantity=3, unit_price=19.99).total_amount == 59.97

    def test_explicit_order_id(self):
        assert _make_order(order_id="ord-1").id == "ord-1"

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            _make_order(quantity=0)

    def test_address_one_line(self):
        order = _make_order()
        assert order.shipping_address.one_line() == "123 Main St, Springfield, IL, 62701, US"

    def test_address_without_state(self):
        order = _make_order(
            shipping_address={"street": "1 George St", "city": "Sydney", "postal_code": "2000", "country": "AU"}
        )
        assert order.shipping_address.one_line() == "1 George St, Sydney, 2000, AU"


class TestStatusTable:
    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.PENDING, OrderStatus.PROCESSING),
            (OrderStatus.PENDING, OrderStatus.CANCELLED),
            (OrderStatus.PROCESSING, OrderStatus.PICKED_UP),
            (OrderStatus.PROCESSING, OrderStatus.REFUNDED),
            (OrderStatus.PICKED_UP, OrderStatus.DELIVERING),
            (OrderStatus.DELIVERING, OrderStatus.DELIVERED),
            (OrderStatus.DELIVERING, OrderStatus.REFUNDED),
        ],
    )
    def test_allowed(self, current, target):
        order = _make_order()
        order.status = current.value
        assert order.can_transition_to(target) is True

    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.PENDING, OrderStatus.DELIVERED),
            (OrderStatus.PENDING, OrderStatus.REFUNDED),
            (OrderStatus.PICKED_UP, OrderStatus.CANCELLED),
            (OrderStatus.DELIVERED, OrderStatus.REFUNDED),
            (OrderStatus.CANCELLED, OrderStatus.PROCESSING),
            (OrderStatus.REFUNDED, OrderStatus.CANCELLED),
        ],
    )
    def test_rejected(self, current, target):
        order = _make_order()
        order.status = current.value
        assert order.can_transition_to(target) is False

    @pytest.mark.parametrize("status", [OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REFUNDED])
    def test_terminal(self, status):
        order = _make_order()
        order.status = status.value
        assert order.is_terminal

    def test_cancellable_only_before_pickup(self):
        order = _make_order()
        assert order.is_cancellable
        order.status = OrderStatus.PROCESSING.value
        assert order.is_cancellable
        order.status = OrderStatus.PICKED_UP.value
        assert not order.is_cancellable

    def test_is_paid_follows_payment_status(self):
        order = _make_order()
        assert not order.is_paid
        order.payment_status = "COMPLETED"
        assert order.is_paid
