"""Payments bounded context — the Payment Ledger.

Issues biller-code payment instructions for orders, settles them by moving
funds between accounts, and refunds or voids them when the saga compensates.
Every status change is pushed to the ``PAYMENT_EVENT`` webhook.
"""

import structlog
from protean.domain import Domain

payments = Domain(name="payments")

logger = structlog.get_logger(__name__)
