"""Payment failure template — sent when the order is cancelled for non-payment."""

from shared.messaging.messages import EmailType


class PaymentFailedTemplate:
    email_type = EmailType.PAYMENT_FAILED

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        total_amount = context.get("total_amount", 0.0)
        return {
            "subject": f"Payment Failed for Order #{order_id}",
            "body": (
                f"Hi {context.get('recipient_name', 'there')},\n\n"
                f"We could not collect USD {float(total_amount):.2f} for order #{order_id}, "
                "so the order has been cancelled and the items released.\n\n"
                "No money has been taken. You are welcome to place the order again."
            ),
        }
