"""Inventory bounded context — the Inventory Ledger.

Owns per-warehouse stock counts and the reservations held against them.
Exposes CheckStock/Reserve/Commit/Rollback to the Order Orchestrator and
consumes rollback requests from the broker.
"""

import structlog
from protean.domain import Domain

inventory = Domain(name="inventory")

logger = structlog.get_logger(__name__)
