"""In-process relay between per-domain inline brokers.

Each Protean domain owns its own broker. With the Redis broker every
context reads the same streams and no relay is needed. With the inline
broker (development and tests) a message published by one domain never
reaches a subscriber registered in another, so the relay drains the
producing domain's stream and hands each message to the consuming
domain's subscriber inside that domain's context.

Acknowledgement follows the consumer: a message is acked once the
subscriber returns and nacked when it raises, so the broker's retry
ceiling and dead-letter queue apply exactly as they would under an Engine.
"""

from dataclasses import dataclass

import structlog
from protean.domain import Domain

logger = structlog.get_logger(__name__)

RELAY_CONSUMER_GROUP = "relay"


@dataclass(frozen=True)
class Route:
    stream: str
    source: Domain
    target: Domain
    subscriber: type


def relay(routes, consumer_group: str = RELAY_CONSUMER_GROUP) -> int:
    """Deliver every pending message along ``routes``. Returns how many were acked."""
    delivered = 0
    for route in routes:
        broker = route.source.brokers["default"]
        while (entry := broker.get_next(route.stream, consumer_group)) is not None:
            identifier, payload = entry
            try:
                with route.target.domain_context():
                    route.subscriber()(payload)
            except Exception as exc:
                logger.warning(
                    "relay_delivery_failed",
                    stream=route.stream,
                    subscriber=route.subscriber.__name__,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                broker.nack(route.stream, identifier, consumer_group)
                continue
            broker.ack(route.stream, identifier, consumer_group)
            delivered += 1
    return delivered


def drain(routes, consumer_group: str = RELAY_CONSUMER_GROUP, max_rounds: int = 10) -> int:
    """Relay until no route has pending messages, following chains of reactions."""
    total = 0
    for _ in range(max_rounds):
        delivered = relay(routes, consumer_group)
        if delivered == 0:
            break
        total += delivered
    return total
