"""Account aggregate — a balance that moves only through guarded transfers.

The balance is never assigned through ``repo.add`` after creation. Transfers
use compare-and-swap on ``revision`` (see ``payments.account.transfers``).
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String

from payments.domain import payments


class AccountType(Enum):
    PERSONAL = "Personal"
    MERCHANT = "Merchant"


@payments.aggregate
class Account:
    holder_name = String(required=True, max_length=255)
    account_type = String(choices=AccountType, default=AccountType.PERSONAL.value)
    balance = Float(default=0.0, min_value=0.0)
    biller_code = String(max_length=20)  # Merchant accounts only
    revision = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def open(cls, holder_name, opening_balance=0.0, account_id=None):
        if opening_balance is None or opening_balance < 0:
            raise ValidationError({"balance": ["Opening balance cannot be negative"]})
        now = datetime.now(UTC)
        kwargs = dict(
            holder_name=holder_name,
            account_type=AccountType.PERSONAL.value,
            balance=round(float(opening_balance), 2),
            revision=0,
            created_at=now,
            updated_at=now,
        )
        if account_id:
            kwargs["id"] = account_id
        return cls(**kwargs)

    @classmethod
    def open_merchant(cls, holder_name, biller_code, account_id=None):
        if not biller_code:
            raise ValidationError({"biller_code": ["Merchant accounts need a biller code"]})
        account = cls.open(holder_name, 0.0, account_id=account_id)
        account.account_type = AccountType.MERCHANT.value
        account.biller_code = str(biller_code)
        return account

    def can_cover(self, amount) -> bool:
        return round(self.balance - amount, 2) >= 0
