"""HTTP webhook transport backed by httpx."""

from typing import Any

import httpx

from webhooks.transport.port import WebhookDeliveryError, WebhookTransport


class HttpxTransport(WebhookTransport):
    def __init__(self, client: httpx.Client | None = None) -> None:
        self._client = client or httpx.Client()

    def post(self, url: str, event: str, payload: dict[str, Any], timeout: float) -> int:
        try:
            response = self._client.post(
                url,
                json=payload,
                headers={"X-Webhook-Event": event},
                timeout=timeout,
            )
        except httpx.TimeoutException as exc:
            raise WebhookDeliveryError(f"Timed out after {timeout}s", url=url, event=event) from exc
        except httpx.HTTPError as exc:
            raise WebhookDeliveryError(str(exc), url=url, event=event) from exc

        if not response.is_success:
            raise WebhookDeliveryError(
                f"Receiver answered {response.status_code}",
                url=url,
                event=event,
                status_code=response.status_code,
            )
        return response.status_code
