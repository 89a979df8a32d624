"""Account transfers.

``move_funds`` is the guarded core: it debits and credits two accounts with
one compare-and-swap each, inside the caller's Unit of Work. A lost race
raises ``RevisionMismatch`` and the whole attempt, log entry included, is
rolled back.

``AccountLedger`` wraps it for callers that are not already in a Unit of
Work: it writes the PROCESSING log entry first, retries the move, then
closes the entry as COMPLETED or FAILED.
"""

from datetime import UTC, datetime

from protean import UnitOfWork
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from shared.concurrency import retry_on_conflict, swap_or_raise
from shared.errors import ConcurrencyConflict, InsufficientFundsError, NotFoundError

from payments.account.account import Account
from payments.account.transaction import TransactionRecord
from payments.domain import logger, payments


def merchant_account_for(biller_code) -> Account:
    account = (
        current_domain.repository_for(Account)._dao.query.filter(biller_code=str(biller_code)).all().first
    )
    if account is None:
        raise NotFoundError(f"No merchant account for biller code {biller_code}")
    return account


def move_funds(from_account_id, to_account_id, amount) -> None:
    """Debit one account and credit another. Must run inside a Unit of Work."""
    repo = current_domain.repository_for(Account)
    payer = repo.get(str(from_account_id))
    payee = repo.get(str(to_account_id))

    if not payer.can_cover(amount):
        raise InsufficientFundsError(
            f"Account {payer.id} holds {payer.balance:.2f}, {amount:.2f} requested",
            account_id=str(payer.id),
            balance=payer.balance,
            requested=amount,
        )

    now = datetime.now(UTC)
    swap_or_raise(repo, payer.id, payer.revision, balance=round(payer.balance - amount, 2), updated_at=now)
    swap_or_raise(repo, payee.id, payee.revision, balance=round(payee.balance + amount, 2), updated_at=now)


@payments.application_service(part_of=Account)
class AccountLedger:
    def open_account(self, holder_name, opening_balance=0.0, account_id=None) -> str:
        account = Account.open(holder_name, opening_balance, account_id=account_id)
        with UnitOfWork():
            current_domain.repository_for(Account).add(account)
        logger.info("account_opened", account_id=str(account.id), balance=account.balance)
        return str(account.id)

    def open_merchant_account(self, holder_name, biller_code, account_id=None) -> str:
        account = Account.open_merchant(holder_name, biller_code, account_id=account_id)
        with UnitOfWork():
            current_domain.repository_for(Account).add(account)
        logger.info("merchant_account_opened", account_id=str(account.id), biller_code=biller_code)
        return str(account.id)

    def balance_of(self, account_id) -> float:
        return current_domain.repository_for(Account).get(str(account_id)).balance

    def transfer(self, from_account_id, to_account_id, amount, description="") -> TransactionRecord:
        """Move ``amount`` between two accounts and log it.

        Returns the log entry, COMPLETED on success. On insufficient funds or
        an exhausted retry budget the entry is closed as FAILED and the error
        propagates.
        """
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Transfer amount must be positive"]})
        if str(from_account_id) == str(to_account_id):
            raise ValidationError({"to_account_id": ["Cannot transfer to the same account"]})

        records = current_domain.repository_for(TransactionRecord)
        record = TransactionRecord.start(from_account_id, to_account_id, amount, description)
        with UnitOfWork():
            records.add(record)

        def attempt() -> None:
            with UnitOfWork():
                move_funds(from_account_id, to_account_id, amount)
                entry = records.get(record.id)
                entry.complete()
                records.add(entry)

        try:
            retry_on_conflict(attempt, operation="payments.transfer")
        except (InsufficientFundsError, ConcurrencyConflict, NotFoundError) as exc:
            with UnitOfWork():
                entry = records.get(record.id)
                entry.fail(str(exc))
                records.add(entry)
            logger.warning(
                "transfer_failed",
                transaction_id=str(record.id),
                from_account_id=str(from_account_id),
                to_account_id=str(to_account_id),
                amount=amount,
                error=str(exc),
            )
            raise

        logger.info(
            "transfer_completed",
            transaction_id=str(record.id),
            from_account_id=str(from_account_id),
            to_account_id=str(to_account_id),
            amount=amount,
        )
        return records.get(record.id)

    def reverse(self, transaction_id, description="") -> TransactionRecord:
        """Refund a COMPLETED entry. Must run inside a Unit of Work.

        Moves the amount back, logs a COMPLETED reversal entry and marks the
        original REFUNDED.
        """
        records = current_domain.repository_for(TransactionRecord)
        original = records.get(str(transaction_id))
        original.mark_refunded()

        move_funds(original.to_account_id, original.from_account_id, original.amount)

        reversal = TransactionRecord.start(
            original.to_account_id,
            original.from_account_id,
            original.amount,
            description or f"Refund of {original.id}",
            refund_of=str(original.id),
        )
        reversal.complete()
        records.add(reversal)
        records.add(original)
        return reversal
