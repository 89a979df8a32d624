"""Notifications bounded context — customer email for saga transitions.

Consumes the ``email.<TYPE>`` streams published by the Order Orchestrator,
renders one email per message, sends it through the email channel and keeps
an ``EmailLog`` of every attempt.
"""

import structlog
from protean.domain import Domain

notifications = Domain(name="notifications")

logger = structlog.get_logger(__name__)
