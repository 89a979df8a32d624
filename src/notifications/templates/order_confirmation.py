"""Order confirmation template — sent once payment has settled."""

from shared.messaging.messages import EmailType


class OrderConfirmationTemplate:
    email_type = EmailType.ORDER_CONFIRMATION

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        total_amount = context.get("total_amount", 0.0)
        quantity = context.get("quantity", 1)
        reference = context.get("payment_reference", "N/A")
        return {
            "subject": f"Order #{order_id} Confirmed",
            "body": (
                f"Hi {context.get('recipient_name', 'there')},\n\n"
                f"Your payment for order #{order_id} has been received.\n\n"
                f"Quantity: {quantity}\n"
                f"Order Total: USD {float(total_amount):.2f}\n"
                f"Payment Reference: {reference}\n\n"
                "We'll let you know as soon as your order is picked up by the carrier.\n\n"
                f"Thank you for shopping with {context.get('store_name', 'us')}!"
            ),
        }
