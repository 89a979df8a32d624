"""Webhooks bounded context — the Webhook Registry and outbound delivery.

Maps each event name to exactly one callback URL (last write wins, guarded
by a conditional write) and pushes status-change payloads to it with
bounded retry.
"""

import structlog
from protean.domain import Domain

webhooks = Domain(name="webhooks")

logger = structlog.get_logger(__name__)
