"""Delivery update template — one email per shipment milestone."""

from shared.messaging.messages import EmailType

_HEADLINES = {
    "PICKED_UP": "Your order has been picked up by the carrier",
    "DELIVERING": "Your order is on its way",
    "DELIVERED": "Your order has been delivered",
}


class DeliveryUpdateTemplate:
    email_type = EmailType.DELIVERY_UPDATE

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        status = context.get("status", "UPDATED")
        headline = _HEADLINES.get(status, f"Delivery status: {status}")
        return {
            "subject": f"Order #{order_id}: {headline}",
            "body": (
                f"Hi {context.get('recipient_name', 'there')},\n\n"
                f"{headline}.\n\n"
                f"Shipment: {context.get('shipment_id', 'N/A')}\n"
                f"Status: {status}\n"
            ),
        }
