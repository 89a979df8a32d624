"""Webhook Registry — register, lookup and deliver.

``register`` is an upsert guarded by compare-and-swap on the registration's
revision, so concurrent registrations for one event serialize and the last
committed write wins. It never raises: services register at startup and a
registry hiccup must not keep them from booting.

``deliver`` looks the URL up and POSTs with bounded exponential backoff.
"""

import time
from datetime import UTC, datetime
from typing import Any

from protean import UnitOfWork
from protean.exceptions import DatabaseError, ExpectedVersionError, ObjectNotFoundError, TransactionError
from protean.utils.globals import current_domain
from shared.concurrency import RevisionMismatch, retry_on_conflict, swap_or_raise

from webhooks.domain import logger, webhooks
from webhooks.registration.registration import WebhookRegistration, validate_registration
from webhooks.transport import WebhookDeliveryError, get_transport


def delivery_policy() -> tuple[int, float, float, float]:
    custom = current_domain.config.get("custom", {})
    return (
        int(custom.get("webhook_max_attempts", 3)),
        float(custom.get("webhook_backoff_seconds", 0.5)),
        float(custom.get("webhook_backoff_multiplier", 2.0)),
        float(custom.get("webhook_timeout_seconds", 5.0)),
    )


@webhooks.application_service(part_of=WebhookRegistration)
class WebhookRegistry:
    # -------------------------------------------------------------------
    # Register
    # -------------------------------------------------------------------
    def register(self, event, callback_url) -> bool:
        """Point ``event`` at ``callback_url``. Returns False instead of raising."""
        try:
            validate_registration(event, callback_url)
            retry_on_conflict(
                lambda: self._upsert(str(event).strip(), callback_url),
                operation="webhooks.register",
            )
        except Exception as exc:
            logger.error(
                "webhook_registration_failed",
                webhook_event=str(event),
                callback_url=callback_url,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return False

        logger.info("webhook_registered", webhook_event=str(event), callback_url=callback_url)
        return True

    def _upsert(self, event, callback_url) -> None:
        repo = current_domain.repository_for(WebhookRegistration)
        with UnitOfWork():
            try:
                existing = repo.get(event)
            except ObjectNotFoundError:
                existing = None
            if existing is not None:
                if existing.callback_url != callback_url:
                    swap_or_raise(
                        repo,
                        existing.id,
                        existing.revision,
                        callback_url=callback_url,
                        updated_at=datetime.now(UTC),
                    )
                return

        # First registration: a concurrent first writer turns into an update on retry
        try:
            with UnitOfWork():
                repo.add(WebhookRegistration.create(event, callback_url))
        except (DatabaseError, ExpectedVersionError, TransactionError) as exc:
            raise RevisionMismatch(f"{event}@new") from exc

    # -------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------
    def lookup(self, event) -> str | None:
        try:
            registration = current_domain.repository_for(WebhookRegistration).get(str(event))
        except ObjectNotFoundError:
            return None
        return registration.callback_url

    # -------------------------------------------------------------------
    # Deliver
    # -------------------------------------------------------------------
    def deliver(self, event, payload: dict[str, Any]) -> bool:
        """POST ``payload`` to the URL registered for ``event``.

        Returns False when nothing is registered or every attempt failed.
        """
        url = self.lookup(event)
        if url is None:
            logger.warning("webhook_not_registered", webhook_event=str(event))
            return False

        max_attempts, backoff, multiplier, timeout = delivery_policy()
        transport = get_transport()
        for attempt in range(1, max_attempts + 1):
            try:
                transport.post(url, str(event), payload, timeout)
            except WebhookDeliveryError as exc:
                logger.warning(
                    "webhook_delivery_failed",
                    webhook_event=str(event),
                    url=url,
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error=str(exc),
                )
                if attempt < max_attempts:
                    delay = backoff * multiplier ** (attempt - 1)
                    if delay > 0:
                        time.sleep(delay)
            else:
                logger.info("webhook_delivered", webhook_event=str(event), url=url, attempt=attempt)
                return True

        logger.error("webhook_delivery_exhausted", webhook_event=str(event), url=url, attempts=max_attempts)
        return False
