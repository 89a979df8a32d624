"""FastAPI routes for the Webhook Registry."""

from fastapi import APIRouter, HTTPException

from webhooks.api.schemas import RegisterWebhookRequest, RegistrationResponse
from webhooks.registration.registry import WebhookRegistry

webhook_router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@webhook_router.put("/registrations", response_model=RegistrationResponse)
def register_webhook(body: RegisterWebhookRequest) -> RegistrationResponse:
    registered = WebhookRegistry().register(body.event, body.callback_url)
    return RegistrationResponse(
        event=body.event,
        callback_url=body.callback_url if registered else None,
        registered=registered,
    )


@webhook_router.get("/registrations/{event}", response_model=RegistrationResponse)
def get_registration(event: str) -> RegistrationResponse:
    callback_url = WebhookRegistry().lookup(event)
    if callback_url is None:
        raise HTTPException(status_code=404, detail=f"No webhook registered for {event}")
    return RegistrationResponse(event=event, callback_url=callback_url, registered=True)
