"""Idempotent broker consumers.

Delivery is at-least-once, so every consumer checks its context's
``ProcessedMessage`` ledger inside the same Unit of Work as the side effect:

1. validate the payload (``MalformedMessageError`` on schema violations)
2. open a Unit of Work
3. skip if ``(message_id, consumer)`` is already recorded
4. apply the side effect and record the marker
5. commit, retrying the whole attempt if a compare-and-swap lost its race
6. run ``after_commit`` for outbound calls that must not see uncommitted state

Failures are routed through ``classify``: RETRY re-raises so the broker
subscription nacks and redelivers up to its ceiling, DEAD_LETTER parks the
payload on ``<stream>:dlq`` and acks, DROP logs and acks.
"""

from typing import Any, ClassVar

import structlog
from protean import UnitOfWork
from protean.core.subscriber import BaseSubscriber
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from shared.concurrency import retry_on_conflict
from shared.messaging.classification import Disposition, classify
from shared.messaging.messages import BrokerMessage, parse_message, utcnow
from shared.messaging.streams import dead_letter_stream

logger = structlog.get_logger(__name__)


def processed_key(consumer: str, message_id: str) -> str:
    return f"{consumer}:{message_id}"


class IdempotentConsumer(BaseSubscriber):
    """Base for ``@domain.subscriber`` classes.

    Subscribers must inherit from it explicitly; Protean rebuilds undecorated
    classes on top of ``BaseSubscriber`` and would drop this base.

    Subclasses set ``message_class`` and ``processed_message_cls`` and
    implement ``apply``. ``apply`` runs inside an open Unit of Work and must
    not start compare-and-swap retry loops of its own.
    """

    message_class: ClassVar[type[BrokerMessage]]
    processed_message_cls: ClassVar[type]

    @property
    def consumer_name(self) -> str:
        return type(self).__name__

    @property
    def stream(self) -> str:
        return self.meta_.stream

    def __call__(self, payload: dict[str, Any]) -> None:
        try:
            self.consume(payload)
        except Exception as exc:
            disposition = classify(exc)
            log = logger.bind(
                consumer=self.consumer_name,
                stream=self.stream,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            if disposition is Disposition.RETRY:
                log.warning("message_failed_will_retry")
                raise
            if disposition is Disposition.DEAD_LETTER:
                log.error("message_dead_lettered")
                self.dead_letter(payload, exc)
            else:
                log.info("message_dropped")

    def consume(self, payload: dict[str, Any]) -> bool:
        """Apply ``payload`` once. Returns False when it was a duplicate."""
        message = parse_message(self.message_class, payload)
        applied = retry_on_conflict(
            lambda: self._apply_once(message),
            operation=f"consume:{self.consumer_name}",
        )
        if applied:
            self.after_commit(message)
        return applied

    def _apply_once(self, message: BrokerMessage) -> bool:
        key = processed_key(self.consumer_name, message.message_id)
        with UnitOfWork():
            ledger = current_domain.repository_for(self.processed_message_cls)
            try:
                ledger.get(key)
            except ObjectNotFoundError:
                pass
            else:
                logger.info(
                    "message_duplicate_skipped",
                    consumer=self.consumer_name,
                    message_id=message.message_id,
                )
                return False

            self.apply(message)

            ledger.add(
                self.processed_message_cls(
                    id=key,
                    message_id=message.message_id,
                    consumer=self.consumer_name,
                    processed_at=utcnow(),
                )
            )
        return True

    def apply(self, message: BrokerMessage) -> None:
        raise NotImplementedError

    def after_commit(self, message: BrokerMessage) -> None:
        """Runs once the side effect is durable, outside any Unit of Work."""

    def dead_letter(self, payload: Any, exc: BaseException) -> None:
        current_domain.brokers["default"].publish(
            dead_letter_stream(self.stream),
            {
                "stream": self.stream,
                "consumer": self.consumer_name,
                "payload": payload if isinstance(payload, dict) else {"raw": repr(payload)},
                "error_type": type(exc).__name__,
                "error": str(exc),
                "failed_at": utcnow().isoformat(),
            },
        )
