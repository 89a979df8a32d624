"""BDD tests for the payment lifecycle."""

from payments.account.account import Account
from payments.payment.ledger import PaymentLedger
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, when

scenarios("features/payment_lifecycle.feature")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("the customer account holds only {balance:f}"))
def _(payer_id, balance):
    repo = current_domain.repository_for(Account)
    account = repo.get(payer_id)
    account.balance = balance
    repo.add(account)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the customer pays the instruction")
def _(instruction, payer_id):
    PaymentLedger().confirm_payment(instruction.reference, payer_id)


@when(parsers.cfparse('the payment is refunded for "{reason}"'))
def _(instruction, reason):
    PaymentLedger().refund_payment(instruction.order_id, reason)
