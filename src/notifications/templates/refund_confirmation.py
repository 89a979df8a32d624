"""Refund confirmation template — sent when the payment is refunded."""

from shared.messaging.messages import EmailType


class RefundConfirmationTemplate:
    email_type = EmailType.REFUND_CONFIRMATION

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        amount = context.get("amount")
        if amount is None:
            amount = context.get("total_amount", 0.0)
        return {
            "subject": f"Refund Processed - USD {float(amount):.2f}",
            "body": (
                f"A refund of USD {float(amount):.2f} has been processed "
                f"for order #{order_id}.\n\n"
                "The refund should appear in your account within 5-10 "
                "business days, depending on your bank.\n\n"
                "Thank you for your patience."
            ),
        }
