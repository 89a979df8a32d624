"""Recording webhook client for tests.

Keeps every registration and push so tests can assert on the exact
payloads, or hand them straight to the receiving context.
"""

from typing import Any

from webhooks.client.port import WebhookClient


class RecordingWebhookClient(WebhookClient):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.registrations: dict[str, str] = {}
        self.deliveries: list[tuple[str, dict]] = []

    def configure(self, should_succeed: bool) -> None:
        self.should_succeed = should_succeed

    def register(self, event: str, callback_url: str) -> bool:
        if not self.should_succeed:
            return False
        self.registrations[event] = callback_url
        return True

    def deliver(self, event: str, payload: dict[str, Any]) -> bool:
        self.deliveries.append((event, payload))
        return self.should_succeed

    def payloads(self, event: str) -> list[dict]:
        return [payload for name, payload in self.deliveries if name == event]
