"""Webhook client port — how other contexts reach the Webhook Registry.

Payments and Delivery push status changes through this interface after
their own Unit of Work has committed. Neither knows where the registry
lives.
"""

from abc import ABC, abstractmethod
from typing import Any


class WebhookClient(ABC):
    @abstractmethod
    def register(self, event: str, callback_url: str) -> bool:
        """Register ``callback_url`` for ``event``. Never raises."""
        ...

    @abstractmethod
    def deliver(self, event: str, payload: dict[str, Any]) -> bool:
        """Push ``payload`` to whoever is registered for ``event``."""
        ...
