"""Shared BDD fixtures and step definitions for the Payments domain."""

from payments.account.account import Account
from payments.account.transfers import AccountLedger
from payments.payment.ledger import PaymentLedger, payment_for_order
from payments.payment.notifier import PAYMENT_EVENT
from protean import current_domain
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the merchant behind biller code "{biller_code}"'))
def _(biller_code):
    AccountLedger().open_merchant_account("Fulfillment Store", biller_code, account_id="acct-merchant")


@given(parsers.cfparse("a customer account holding {balance:f}"), target_fixture="payer_id")
def _(balance):
    return AccountLedger().open_account("Jane Doe", opening_balance=balance, account_id="acct-jane")


@given(parsers.cfparse('a payment instruction for order "{order_id}" of {amount:f}'), target_fixture="instruction")
def _(order_id, amount):
    return PaymentLedger().issue_instruction(order_id, amount)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the payment is "{status}"'))
def _(instruction, status):
    assert payment_for_order(instruction.order_id).status == status


@then(parsers.cfparse("the customer account holds {balance:f}"))
def _(payer_id, balance):
    assert current_domain.repository_for(Account).get(payer_id).balance == balance


@then(parsers.cfparse('the webhooks pushed were "{statuses}"'))
def _(webhook_client, statuses):
    pushed = [payload["type"] for payload in webhook_client.payloads(PAYMENT_EVENT)]
    assert pushed == [status.strip() for status in statuses.split(",")]
