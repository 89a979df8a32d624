"""Pydantic request/response schemas for the Payments API.

These are external contracts (anti-corruption layer) — separate from
internal Protean aggregates.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Account Schemas
# ---------------------------------------------------------------------------
class OpenAccountRequest(BaseModel):
    account_id: str | None = None
    holder_name: str = Field(min_length=1, max_length=255)
    opening_balance: float = Field(default=0.0, ge=0)


class OpenMerchantAccountRequest(BaseModel):
    account_id: str | None = None
    holder_name: str = Field(min_length=1, max_length=255)
    biller_code: str = Field(min_length=1, max_length=20)


class AccountIdResponse(BaseModel):
    account_id: str


class BalanceResponse(BaseModel):
    account_id: str
    balance: float


class TransferRequest(BaseModel):
    from_account_id: str
    to_account_id: str
    amount: float = Field(gt=0)
    description: str = ""


class TransactionResponse(BaseModel):
    transaction_id: str
    status: str
    amount: float


# ---------------------------------------------------------------------------
# Payment Schemas
# ---------------------------------------------------------------------------
class PaymentInstructionRequest(BaseModel):
    order_id: str = Field(min_length=1)
    amount: float = Field(gt=0)

    model_config = {
        "json_schema_extra": {
            "examples": [{"order_id": "ord-001", "amount": 100.0}],
        }
    }


class PaymentInstructionResponse(BaseModel):
    payment_id: str
    order_id: str
    biller_code: str
    reference: str
    amount: float
    status: str
    expires_at: datetime


class ConfirmPaymentRequest(BaseModel):
    reference: str = Field(min_length=1)
    payer_account_id: str = Field(min_length=1)


class CompensationRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=500)


class PaymentResponse(BaseModel):
    payment_id: str
    order_id: str
    reference: str
    amount: float
    status: str
    failure_reason: str | None = None
    paid_at: datetime | None = None
