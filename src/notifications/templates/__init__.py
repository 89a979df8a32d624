"""Template registry — maps each email type to its template class."""

from shared.messaging.messages import EmailType

from notifications.templates.delivery_update import DeliveryUpdateTemplate
from notifications.templates.order_cancellation import OrderCancellationTemplate
from notifications.templates.order_confirmation import OrderConfirmationTemplate
from notifications.templates.payment_failed import PaymentFailedTemplate
from notifications.templates.refund_confirmation import RefundConfirmationTemplate

TEMPLATE_REGISTRY: dict[EmailType, type] = {
    EmailType.ORDER_CONFIRMATION: OrderConfirmationTemplate,
    EmailType.PAYMENT_FAILED: PaymentFailedTemplate,
    EmailType.ORDER_CANCELLED: OrderCancellationTemplate,
    EmailType.REFUND_CONFIRMATION: RefundConfirmationTemplate,
    EmailType.DELIVERY_UPDATE: DeliveryUpdateTemplate,
}


def get_template(email_type: EmailType):
    """Look up a template class by email type."""
    template_cls = TEMPLATE_REGISTRY.get(email_type)
    if template_cls is None:
        raise ValueError(f"No template registered for email type: {email_type}")
    return template_cls


def render(email_type: EmailType, context: dict) -> dict:
    return get_template(email_type).render(context)
