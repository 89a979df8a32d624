"""Order Orchestrator — the fulfillment saga.

Forward path:

    create_order         reserve stock → persist PENDING → payment instruction → PROCESSING
    payment COMPLETED    commit reservation → request shipment (order stays PROCESSING)
    delivery updates     PICKED_UP → DELIVERING → DELIVERED

Compensations (published as broker messages, each idempotent, in no
particular order):

    payment FAILED       rollback                         → CANCELLED
    instruction failed   rollback + refund                → CANCELLED
    shipment LOST        rollback + refund                → REFUNDED
    user cancellation    rollback + refund                → CANCELLED or REFUNDED
    paid after cancel    refund

Calls into other contexts happen outside any Unit of Work. Order writes go
through ``transition_order``/``update_order`` and anything they publish
waits for commit.
"""

from datetime import datetime

from protean import UnitOfWork
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain
from shared.errors import FulfillmentError, InsufficientStockError, RemoteTimeoutError
from shared.messaging.messages import EmailType

from ordering.clients import get_delivery_client, get_inventory_client, get_payments_client
from ordering.domain import logger, ordering
from ordering.listing.listing import ProductListing
from ordering.order.compensation import notify_customer, request_refund, request_rollback
from ordering.order.order import CANCELLABLE_STATUSES, Order, OrderStatus, ReasonCode
from ordering.order.transitions import transition_order, update_order

# Shipment status → order status. Anything else is ignored.
_DELIVERY_STATUS_MAP = {
    "PICKED_UP": OrderStatus.PICKED_UP,
    "IN_TRANSIT": OrderStatus.DELIVERING,
    "DELIVERED": OrderStatus.DELIVERED,
    "LOST": OrderStatus.REFUNDED,
}

_REQUIRED_SHIPPING_FIELDS = ("recipient_name", "recipient_email", "street", "city", "postal_code", "country")


def _shipping_errors(shipping: dict) -> dict:
    missing = [name for name in _REQUIRED_SHIPPING_FIELDS if not (shipping or {}).get(name)]
    return {name: ["This field is required"] for name in missing}


def find_order_by_shipment(shipment_id) -> Order | None:
    return current_domain.repository_for(Order)._dao.query.filter(shipment_id=str(shipment_id)).all().first


@ordering.application_service(part_of=Order)
class OrderOrchestrator:
    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def get_order(self, order_id) -> Order:
        return current_domain.repository_for(Order).get(str(order_id))

    # -------------------------------------------------------------------
    # createOrder
    # -------------------------------------------------------------------
    def create_order(self, product_id, quantity, shipping: dict, user_id) -> Order:
        """Reserve, persist and request payment.

        Raises ``InsufficientStockError`` with no order created when no
        warehouse can cover the quantity. Once the order exists, failures
        surface as its status and reason instead.
        """
        errors = _shipping_errors(shipping)
        if quantity is None or quantity <= 0:
            errors["quantity"] = ["Quantity must be positive"]
        if not user_id:
            errors["user_id"] = ["User is required"]
        if errors:
            raise ValidationError(errors)

        try:
            listing = current_domain.repository_for(ProductListing).get(str(product_id))
        except ObjectNotFoundError as exc:
            raise ValidationError({"product_id": [f"Unknown product {product_id}"]}) from exc
        if not listing.published:
            raise ValidationError({"product_id": [f"Product {product_id} is not available"]})

        address = {key: shipping.get(key) for key in ("street", "city", "state", "postal_code", "country")}
        order = Order.place(
            user_id=user_id,
            product_id=product_id,
            quantity=quantity,
            unit_price=listing.price,
            recipient_name=shipping["recipient_name"],
            recipient_email=shipping["recipient_email"],
            shipping_address=address,
        )

        warehouse_id, reservation_id = self._reserve(order)

        order.warehouse_id = warehouse_id
        order.reservation_id = reservation_id
        with UnitOfWork():
            current_domain.repository_for(Order).add(order)
        logger.info(
            "order_created",
            order_id=str(order.id),
            product_id=str(product_id),
            quantity=quantity,
            total_amount=order.total_amount,
            warehouse_id=warehouse_id,
        )

        return self._request_payment(order)

    def _reserve(self, order) -> tuple[str, str]:
        inventory = get_inventory_client()
        candidates = inventory.find_warehouses(str(order.product_id), order.quantity)
        if not candidates:
            raise InsufficientStockError(
                f"No warehouse holds {order.quantity} of product {order.product_id}",
                product_id=str(order.product_id),
                requested=order.quantity,
            )

        last_error = None
        for warehouse_id in candidates:
            try:
                reservation_id = inventory.reserve(
                    str(order.id), warehouse_id, str(order.product_id), order.quantity
                )
            except InsufficientStockError as exc:
                # Drained between the lookup and the reserve; try the next one
                last_error = exc
                continue
            except RemoteTimeoutError:
                # The debit may or may not have happened; release whatever did
                with UnitOfWork():
                    request_rollback(order, ReasonCode.INSTRUCTION_FAILED.value)
                raise
            return warehouse_id, reservation_id

        raise last_error

    def _request_payment(self, order) -> Order:
        try:
            instruction = get_payments_client().request_instruction(str(order.id), order.total_amount)
        except (FulfillmentError, ValidationError) as exc:
            logger.warning(
                "payment_instruction_failed",
                order_id=str(order.id),
                error_type=type(exc).__name__,
                error=str(exc),
            )
            reason = ReasonCode.INSTRUCTION_FAILED.value

            def compensate(current, _target):
                request_rollback(current, reason)
                request_refund(current, reason)
                notify_customer(current, EmailType.ORDER_CANCELLED, reason=reason)

            return transition_order(order.id, OrderStatus.CANCELLED, after=compensate, reason=reason).order

        result = transition_order(
            order.id,
            OrderStatus.PROCESSING,
            allowed_from={OrderStatus.PENDING},
            payment_id=instruction.payment_id,
            payment_reference=instruction.reference,
            payment_status="PENDING",
        )
        logger.info(
            "payment_instruction_obtained",
            order_id=str(order.id),
            reference=instruction.reference,
            biller_code=instruction.biller_code,
            amount=instruction.amount,
        )
        return result.order

    # -------------------------------------------------------------------
    # handlePaymentWebhook
    # -------------------------------------------------------------------
    def handle_payment_webhook(self, event_type, order_id, payment_id=None, amount=None, paid_at=None) -> Order | None:
        """React to a payment status push. Unknown orders are ignored."""
        try:
            order = self.get_order(order_id)
        except ObjectNotFoundError:
            logger.warning("payment_webhook_unknown_order", order_id=str(order_id), type=event_type)
            return None

        logger.info(
            "payment_webhook_received",
            order_id=str(order_id),
            type=event_type,
            status=order.status,
            payment_status=order.payment_status,
        )

        if event_type == "COMPLETED":
            return self._on_payment_completed(order, payment_id)
        if event_type == "FAILED":
            return self._on_payment_failed(order, payment_id)
        if event_type == "REFUNDED":
            if order.payment_status == "REFUNDED":
                return order

            def confirm(current):
                notify_customer(current, EmailType.REFUND_CONFIRMATION, amount=amount)

            return update_order(order.id, after=confirm, payment_status="REFUNDED")

        # PENDING / PROCESSING are informational
        if order.payment_status in (None, "PENDING") and event_type == "PROCESSING":
            return update_order(order.id, payment_status=event_type)
        return order

    def _on_payment_completed(self, order, payment_id) -> Order:
        if order.payment_status == "COMPLETED" and order.shipment_id:
            logger.info("payment_webhook_duplicate", order_id=str(order.id))
            return order

        if order.is_terminal:
            # Paid after the saga already gave up: give the money back
            def refund(current):
                request_refund(current, ReasonCode.PAYMENT_AFTER_CANCEL.value)

            return update_order(
                order.id,
                after=refund,
                payment_status="COMPLETED",
                payment_id=payment_id or order.payment_id,
            )

        if OrderStatus(order.status) is OrderStatus.PENDING:
            transition_order(order.id, OrderStatus.PROCESSING, allowed_from={OrderStatus.PENDING})

        if order.payment_status != "COMPLETED":
            order = update_order(order.id, payment_status="COMPLETED", payment_id=payment_id or order.payment_id)
        else:
            # Redelivery after a failed commit or shipment request: finish the step
            order = self.get_order(order.id)
            logger.info("payment_completion_resumed", order_id=str(order.id))

        if OrderStatus(order.status) is not OrderStatus.PROCESSING:
            # Cancelled between the read above and this write
            if order.is_terminal:
                with UnitOfWork():
                    request_refund(order, ReasonCode.PAYMENT_AFTER_CANCEL.value)
            return order

        # Commit and shipment request are idempotent, so a redelivered webhook re-runs both
        get_inventory_client().commit(str(order.reservation_id))
        with UnitOfWork():
            notify_customer(order, EmailType.ORDER_CONFIRMATION, payment_reference=order.payment_reference)
        return self._request_shipment(order)

    def _request_shipment(self, order) -> Order:
        try:
            ticket = get_delivery_client().request_shipment(
                order_id=str(order.id),
                warehouse_id=str(order.warehouse_id),
                product_id=str(order.product_id),
                quantity=order.quantity,
                recipient_name=order.recipient_name,
                recipient_email=order.recipient_email,
                address=order.shipping_address.one_line(),
            )
        except (FulfillmentError, ValidationError) as exc:
            # Surfaces as non-2xx so the payment webhook is redelivered
            logger.error(
                "delivery_request_failed",
                order_id=str(order.id),
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

        logger.info(
            "delivery_requested",
            order_id=str(order.id),
            shipment_id=ticket.shipment_id,
            tracking_number=ticket.tracking_number,
        )
        return update_order(order.id, shipment_id=ticket.shipment_id)

    def _on_payment_failed(self, order, payment_id) -> Order:
        reason = ReasonCode.PAYMENT_FAILED.value

        def compensate(current, _target):
            request_rollback(current, reason)
            notify_customer(current, EmailType.PAYMENT_FAILED, reason=reason)

        result = transition_order(
            order.id,
            OrderStatus.CANCELLED,
            allowed_from=CANCELLABLE_STATUSES,
            after=compensate,
            reason=reason,
            payment_status="FAILED",
            payment_id=payment_id or order.payment_id,
        )
        if not result.applied and result.order.payment_status != "FAILED":
            return update_order(order.id, payment_status="FAILED")
        return result.order

    # -------------------------------------------------------------------
    # handleDeliveryWebhook
    # -------------------------------------------------------------------
    def handle_delivery_webhook(self, shipment_id, status, timestamp: datetime | None = None) -> Order | None:
        order = find_order_by_shipment(shipment_id)
        if order is None:
            logger.warning("delivery_webhook_unknown_shipment", shipment_id=str(shipment_id), status=status)
            return None

        target = _DELIVERY_STATUS_MAP.get(status)
        if target is None:
            logger.info("delivery_webhook_ignored", order_id=str(order.id), shipment_id=str(shipment_id), status=status)
            return order

        if target is OrderStatus.REFUNDED:
            reason = ReasonCode.SHIPMENT_LOST.value

            def compensate(current, _target):
                request_rollback(current, reason)
                request_refund(current, reason)
                notify_customer(current, EmailType.ORDER_CANCELLED, reason=reason)

            return transition_order(order.id, target, after=compensate, reason=reason).order

        def announce(current, new_status):
            notify_customer(
                current,
                EmailType.DELIVERY_UPDATE,
                discriminator=new_status.value,
                status=new_status.value,
                shipment_id=str(shipment_id),
            )

        changes = {"actual_delivery": timestamp} if target is OrderStatus.DELIVERED else {}
        return transition_order(order.id, target, after=announce, **changes).order

    # -------------------------------------------------------------------
    # cancelOrder
    # -------------------------------------------------------------------
    def cancel_order(self, order_id, requester_id) -> Order:
        """Cancel while PENDING or PROCESSING. A paid order ends REFUNDED."""
        order = self.get_order(order_id)
        if str(order.user_id) != str(requester_id):
            raise ValidationError({"user_id": ["Only the customer who placed the order can cancel it"]})

        reason = ReasonCode.CANCELLED_BY_USER.value

        def choose(current):
            return OrderStatus.REFUNDED if current.is_paid else OrderStatus.CANCELLED

        def compensate(current, _target):
            request_rollback(current, reason)
            request_refund(current, reason, user_id=requester_id)
            notify_customer(current, EmailType.ORDER_CANCELLED, reason=reason)

        result = transition_order(
            order.id,
            choose,
            allowed_from=CANCELLABLE_STATUSES,
            after=compensate,
            reason=reason,
        )
        if not result.applied:
            raise ValidationError({"status": [f"Order in status {result.previous_status} cannot be cancelled"]})
        return result.order
