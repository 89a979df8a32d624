"""Email consumers — one subscriber per ``email.<TYPE>`` stream.

Each message is rendered, sent through the email channel and logged. The
SENT log and the idempotency marker commit together. A send failure raises
``EmailSendError`` (transient), is logged as FAILED on its own and goes back
to the broker for redelivery.
"""

from protean import UnitOfWork
from protean.utils.globals import current_domain
from shared.messaging.consumer import IdempotentConsumer
from shared.messaging.messages import EmailNotification, EmailType
from shared.messaging.streams import email_stream

from notifications.channel import EmailSendError, get_email_channel
from notifications.domain import logger, notifications
from notifications.inbox import ProcessedMessage
from notifications.notification.email_log import EmailLog
from notifications.templates import render


def sender_settings() -> tuple[str, str]:
    custom = current_domain.config.get("custom", {})
    return (
        str(custom.get("sender_address", "orders@fulfillment.local")),
        str(custom.get("store_name", "Fulfillment Store")),
    )


class EmailConsumer(IdempotentConsumer):
    message_class = EmailNotification
    processed_message_cls = ProcessedMessage
    attempt = None  # (message, rendered) of the send in flight

    def consume(self, payload) -> bool:
        self.attempt = None
        try:
            return super().consume(payload)
        except EmailSendError as exc:
            if self.attempt is not None:
                message, rendered = self.attempt
                with UnitOfWork():
                    current_domain.repository_for(EmailLog).add(EmailLog.failed(message, rendered, str(exc)))
            raise

    def apply(self, message: EmailNotification) -> None:
        sender, store_name = sender_settings()
        context = {**message.details, "order_id": message.order_id, "store_name": store_name}
        rendered = render(message.type, context)
        self.attempt = (message, rendered)

        provider_message_id = get_email_channel().send(
            to=message.recipient,
            subject=rendered["subject"],
            body=rendered["body"],
            sender=sender,
        )
        current_domain.repository_for(EmailLog).add(EmailLog.sent(message, rendered, provider_message_id))
        logger.info(
            "email_sent",
            email_type=message.type.value,
            order_id=message.order_id,
            recipient=message.recipient,
            event_id=message.event_id,
        )


@notifications.subscriber(stream=email_stream(EmailType.ORDER_CONFIRMATION.value))
class OrderConfirmationEmailConsumer(EmailConsumer):
    pass


@notifications.subscriber(stream=email_stream(EmailType.PAYMENT_FAILED.value))
class PaymentFailedEmailConsumer(EmailConsumer):
    pass


@notifications.subscriber(stream=email_stream(EmailType.ORDER_CANCELLED.value))
class OrderCancelledEmailConsumer(EmailConsumer):
    pass


@notifications.subscriber(stream=email_stream(EmailType.REFUND_CONFIRMATION.value))
class RefundConfirmationEmailConsumer(EmailConsumer):
    pass


@notifications.subscriber(stream=email_stream(EmailType.DELIVERY_UPDATE.value))
class DeliveryUpdateEmailConsumer(EmailConsumer):
    pass


EMAIL_CONSUMERS = {
    EmailType.ORDER_CONFIRMATION: OrderConfirmationEmailConsumer,
    EmailType.PAYMENT_FAILED: PaymentFailedEmailConsumer,
    EmailType.ORDER_CANCELLED: OrderCancelledEmailConsumer,
    EmailType.REFUND_CONFIRMATION: RefundConfirmationEmailConsumer,
    EmailType.DELIVERY_UPDATE: DeliveryUpdateEmailConsumer,
}
