"""FastAPI routes for the Payments domain — accounts, transfers and payments.

Operations that push webhooks run as sync routes in the threadpool.
"""

from fastapi import APIRouter

from payments.account.transfers import AccountLedger
from payments.api.schemas import (
    AccountIdResponse,
    BalanceResponse,
    CompensationRequest,
    ConfirmPaymentRequest,
    OpenAccountRequest,
    OpenMerchantAccountRequest,
    PaymentInstructionRequest,
    PaymentInstructionResponse,
    PaymentResponse,
    TransactionResponse,
    TransferRequest,
)
from payments.payment.ledger import PaymentLedger

# ---------------------------------------------------------------------------
# Account Router
# ---------------------------------------------------------------------------
account_router = APIRouter(prefix="/accounts", tags=["accounts"])


@account_router.post("", status_code=201, response_model=AccountIdResponse)
def open_account(body: OpenAccountRequest) -> AccountIdResponse:
    account_id = AccountLedger().open_account(body.holder_name, body.opening_balance, account_id=body.account_id)
    return AccountIdResponse(account_id=account_id)


@account_router.post("/merchants", status_code=201, response_model=AccountIdResponse)
def open_merchant_account(body: OpenMerchantAccountRequest) -> AccountIdResponse:
    account_id = AccountLedger().open_merchant_account(body.holder_name, body.biller_code, account_id=body.account_id)
    return AccountIdResponse(account_id=account_id)


@account_router.get("/{account_id}", response_model=BalanceResponse)
def get_balance(account_id: str) -> BalanceResponse:
    return BalanceResponse(account_id=account_id, balance=AccountLedger().balance_of(account_id))


@account_router.post("/transfers", status_code=201, response_model=TransactionResponse)
def transfer(body: TransferRequest) -> TransactionResponse:
    record = AccountLedger().transfer(body.from_account_id, body.to_account_id, body.amount, body.description)
    return TransactionResponse(transaction_id=str(record.id), status=record.status, amount=record.amount)


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


def _payment_response(payment) -> PaymentResponse:
    return PaymentResponse(
        payment_id=str(payment.id),
        order_id=str(payment.order_id),
        reference=payment.reference,
        amount=payment.amount,
        status=payment.status,
        failure_reason=payment.failure_reason,
        paid_at=payment.paid_at,
    )


@payment_router.post("/instructions", status_code=201, response_model=PaymentInstructionResponse)
def issue_instruction(body: PaymentInstructionRequest) -> PaymentInstructionResponse:
    instruction = PaymentLedger().issue_instruction(body.order_id, body.amount)
    return PaymentInstructionResponse(**instruction.__dict__)


@payment_router.post("/confirm", response_model=PaymentResponse)
def confirm_payment(body: ConfirmPaymentRequest) -> PaymentResponse:
    ledger = PaymentLedger()
    ledger.confirm_payment(body.reference, body.payer_account_id)
    return _payment_response(ledger.find_by_reference(body.reference))


@payment_router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(payment_id: str) -> PaymentResponse:
    return _payment_response(PaymentLedger().get_payment(payment_id))


@payment_router.post("/orders/{order_id}/refund", response_model=PaymentResponse)
def refund_payment(order_id: str, body: CompensationRequest) -> PaymentResponse:
    return _payment_response(PaymentLedger().refund_payment(order_id, body.reason))


@payment_router.post("/orders/{order_id}/void", response_model=PaymentResponse)
def void_payment(order_id: str, body: CompensationRequest) -> PaymentResponse:
    return _payment_response(PaymentLedger().void_payment(order_id, body.reason))
