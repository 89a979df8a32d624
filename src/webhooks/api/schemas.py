"""Pydantic request/response schemas for the Webhooks API (external contracts)."""

from pydantic import BaseModel, Field


class RegisterWebhookRequest(BaseModel):
    event: str = Field(..., min_length=1, max_length=255)
    callback_url: str = Field(..., min_length=1, max_length=2048)


class RegistrationResponse(BaseModel):
    event: str
    callback_url: str | None = None
    registered: bool
