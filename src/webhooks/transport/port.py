"""Outbound webhook transport port.

The registry decides where and how often to send; the transport only knows
how to hand one JSON payload to one URL.
"""

from abc import ABC, abstractmethod
from typing import Any

from shared.errors import TransientInfraError


class WebhookDeliveryError(TransientInfraError):
    """The receiver was unreachable, timed out, or answered with a non-2xx status."""


class WebhookTransport(ABC):
    """Abstract webhook transport."""

    @abstractmethod
    def post(self, url: str, event: str, payload: dict[str, Any], timeout: float) -> int:
        """POST ``payload`` as JSON and return the HTTP status.

        Raises ``WebhookDeliveryError`` unless the receiver answered 2xx.
        """
        ...
