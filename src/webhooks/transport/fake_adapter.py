"""Recording webhook transport for development and tests.

Fails the next ``failures`` posts, then succeeds. Every attempt is kept in
``calls`` so tests can assert on retries; accepted payloads also land in
``delivered``.
"""

from typing import Any

from webhooks.transport.port import WebhookDeliveryError, WebhookTransport


class FakeTransport(WebhookTransport):
    def __init__(self) -> None:
        self.failures: int = 0
        self.failure_reason: str = "Connection refused"
        self.calls: list[dict] = []
        self.delivered: list[dict] = []

    def configure(self, failures: int = 0, failure_reason: str = "Connection refused") -> None:
        """Make the next ``failures`` posts raise."""
        self.failures = failures
        self.failure_reason = failure_reason

    def post(self, url: str, event: str, payload: dict[str, Any], timeout: float) -> int:
        self.calls.append({"url": url, "event": event, "payload": payload, "timeout": timeout})
        if self.failures > 0:
            self.failures -= 1
            raise WebhookDeliveryError(self.failure_reason, url=url, event=event)
        self.delivered.append({"url": url, "event": event, "payload": payload})
        return 200
