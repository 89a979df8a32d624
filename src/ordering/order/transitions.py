"""Guarded order writes.

``transition_order`` is the only way an order changes status. It re-reads
the order, checks the transition table (and an optional set of statuses the
caller insists on), then writes with compare-and-swap on ``revision``. A
concurrent writer makes the attempt start over from a fresh read, so a
webhook-driven transition and a user cancellation cannot both win.

Messages published from ``after`` join the same Unit of Work and go out
only if the write commits.
"""

from collections.abc import Callable, Collection
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from protean import UnitOfWork
from protean.utils.globals import current_domain
from shared.concurrency import retry_on_conflict, swap_or_raise

from ordering.domain import logger
from ordering.order.order import Order, OrderStatus


@dataclass(frozen=True)
class TransitionResult:
    applied: bool
    previous_status: str
    order: Order


def transition_order(
    order_id,
    target: OrderStatus | Callable[[Order], OrderStatus],
    *,
    allowed_from: Collection[OrderStatus] | None = None,
    after: Callable[[Order, OrderStatus], None] | None = None,
    **changes: Any,
) -> TransitionResult:
    """Move the order into ``target`` if the current status allows it.

    ``target`` may be a callable choosing the status from the freshly read
    order. ``after(order, target)`` runs inside the winning attempt.
    """
    repo = current_domain.repository_for(Order)

    def attempt() -> tuple[bool, str]:
        with UnitOfWork():
            order = repo.get(str(order_id))
            chosen = target(order) if callable(target) else target
            current = OrderStatus(order.status)
            if (allowed_from is not None and current not in allowed_from) or not order.can_transition_to(chosen):
                return False, order.status

            swap_or_raise(
                repo,
                order.id,
                order.revision,
                status=chosen.value,
                updated_at=datetime.now(UTC),
                **changes,
            )
            if after is not None:
                after(order, chosen)
            return True, order.status

    applied, previous = retry_on_conflict(attempt, operation="ordering.transition")
    order = repo.get(str(order_id))
    if applied:
        logger.info(
            "order_status_changed",
            order_id=str(order_id),
            previous=previous,
            status=order.status,
            reason=order.reason,
        )
    else:
        logger.info(
            "order_transition_rejected",
            order_id=str(order_id),
            status=previous,
            target=target.value if isinstance(target, OrderStatus) else None,
        )
    return TransitionResult(applied=applied, previous_status=previous, order=order)


def update_order(order_id, after: Callable[[Order], None] | None = None, **changes: Any) -> Order:
    """Write non-status fields under the same compare-and-swap discipline."""
    repo = current_domain.repository_for(Order)

    def attempt() -> None:
        with UnitOfWork():
            order = repo.get(str(order_id))
            swap_or_raise(repo, order.id, order.revision, updated_at=datetime.now(UTC), **changes)
            if after is not None:
                after(order)

    retry_on_conflict(attempt, operation="ordering.update")
    return repo.get(str(order_id))
