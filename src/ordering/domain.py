"""Ordering bounded context — the Order Orchestrator.

Runs the fulfillment saga for single-product orders: reserve stock, obtain a
payment instruction, react to payment and delivery webhooks, and publish the
compensating messages (inventory rollback, payment refund) when the order
cannot complete. Also keeps a product listing read model fed by stock-sync
messages.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
