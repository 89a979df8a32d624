"""Consumes rollback requests published by the Order Orchestrator."""

from shared.messaging.consumer import IdempotentConsumer
from shared.messaging.messages import RollbackRequest
from shared.messaging.streams import INVENTORY_ROLLBACK

from inventory.domain import inventory, logger
from inventory.inbox import ProcessedMessage
from inventory.stock.ledger import release_reservation, reservations_for
from inventory.stock.stock_sync import publish_stock_sync


@inventory.subscriber(stream=INVENTORY_ROLLBACK)
class InventoryRollbackConsumer(IdempotentConsumer):
    """Releases every hold of the order named in the message.

    The release, the stock-sync announcement and the idempotency marker
    commit together.
    """

    message_class = RollbackRequest
    processed_message_cls = ProcessedMessage

    def apply(self, message: RollbackRequest) -> None:
        reservations = reservations_for(message.order_id)
        if not reservations:
            logger.warning(
                "rollback_request_without_reservations",
                order_id=message.order_id,
                reason=message.reason,
                event_id=message.event_id,
            )
            return

        released = [release_reservation(str(r.id)) for r in reservations]
        restored = sum(r.quantity for r in released if r is not None)
        if restored != message.amount:
            logger.warning(
                "rollback_amount_mismatch",
                order_id=message.order_id,
                requested=message.amount,
                restored=restored,
            )

        for product_id in sorted({r.product_id for r in released if r is not None}):
            publish_stock_sync(product_id)

        logger.info(
            "rollback_request_applied",
            order_id=message.order_id,
            reason=message.reason,
            restored=restored,
        )
