"""Delivery bounded context — the Delivery Dispatcher.

Creates one shipment per paid order, moves it along the carrier's status
graph (driven by a simulator or by the carrier API) and pushes every change
to the ``SHIPMENT_STATUS_UPDATE`` webhook.
"""

import structlog
from protean.domain import Domain

delivery = Domain(name="delivery")

logger = structlog.get_logger(__name__)
