"""Order cancellation template — sent whenever the saga gives up on an order."""

from shared.messaging.messages import EmailType

_REASONS = {
    "CANCELLED_BY_USER": "You cancelled the order",
    "INSTRUCTION_FAILED": "We could not set up payment for the order",
    "PAYMENT_FAILED": "The payment did not go through",
    "SHIPMENT_LOST": "The carrier lost the shipment",
}


class OrderCancellationTemplate:
    email_type = EmailType.ORDER_CANCELLED

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        reason = context.get("reason")
        return {
            "subject": f"Order #{order_id} Cancelled",
            "body": (
                f"Hi {context.get('recipient_name', 'there')},\n\n"
                f"Your order #{order_id} has been cancelled.\n\n"
                f"Reason: {_REASONS.get(reason, reason or 'not specified')}\n\n"
                "If payment was captured, a refund will be processed "
                "automatically.\n\n"
                "If you have questions, please contact our support team."
            ),
        }
