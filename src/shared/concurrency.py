"""Optimistic concurrency: an explicit compare-and-swap on a ``revision`` counter.

Aggregates that take part (Inventory, Account, Order, WebhookRegistration)
carry an integer ``revision`` field. Every mutation of their guarded state is a
single conditional write::

    UPDATE ... SET <changes>, revision = expected + 1
    WHERE id = :id AND revision = :expected

and succeeds only when exactly one row matched. Callers decide what to do on
a miss, usually re-reading and retrying through ``retry_on_conflict``.

On relational providers the guarded write takes the row lock, so two writers
holding the same revision cannot both win. The memory provider writes to a
per-session snapshot, so its guard is checked a second time against the live
store at commit, and the losing writer gets ``ExpectedVersionError``, which
``retry_on_conflict`` treats like any other lost race.
"""

import time
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import structlog
from protean.adapters.repository.memory import MemorySession
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain
from protean.utils.query import Q

from shared.errors import ConcurrencyConflict

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = (0.05, 0.1, 0.2)


class RevisionMismatch(Exception):
    """Raised inside one attempt when a guarded write lost its race."""


def compare_and_swap(repo, identifier: str, expected_revision: int, **changes: Any) -> bool:
    """Write ``changes`` only if the row still carries ``expected_revision``.

    Bumps the revision in the same statement. Joins the active Unit of Work,
    if any, so the write commits or rolls back with the rest of it.
    """
    dao = repo._dao
    if not dao._is_standalone:
        session = dao._get_session()
        if isinstance(session, MemorySession):
            return _memory_compare_and_swap(dao, session, identifier, expected_revision, changes)

    matched = dao._update_all(
        Q(id=identifier, revision=expected_revision),
        revision=expected_revision + 1,
        **changes,
    )
    return matched == 1


def _memory_compare_and_swap(dao, session, identifier, expected_revision: int, changes: dict) -> bool:
    """Guarded write for the memory provider.

    The memory session reads and writes a private snapshot, so the guard
    must hold again against the live store when the Unit of Work commits.
    The write bumps the record's ``_version`` and registers the old one as a
    commit-time version check: a session whose snapshot was overtaken by
    another commit fails with ``ExpectedVersionError`` and changes nothing.
    """
    record = session._db["data"][dao.schema_name].get(identifier)
    if record is None or record.get("revision") != expected_revision:
        return False

    version = record.get("_version")
    if version is not None:
        session.record_version_check(dao.schema_name, identifier, version)
        changes = {**changes, "_version": version + 1}

    matched = dao._update_all(
        Q(id=identifier, revision=expected_revision),
        revision=expected_revision + 1,
        **changes,
    )
    return matched == 1


def swap_or_raise(repo, identifier: str, expected_revision: int, **changes: Any) -> None:
    if not compare_and_swap(repo, identifier, expected_revision, **changes):
        raise RevisionMismatch(f"{identifier}@{expected_revision}")


def cas_policy() -> tuple[int, Sequence[float]]:
    """Attempt budget and backoff schedule from the active domain's ``[custom]`` config."""
    custom = current_domain.config.get("custom", {})
    max_attempts = int(custom.get("cas_max_attempts", DEFAULT_MAX_ATTEMPTS))
    backoff = custom.get("cas_backoff_seconds", DEFAULT_BACKOFF_SECONDS)
    return max_attempts, tuple(float(delay) for delay in backoff)


def retry_on_conflict(
    attempt: Callable[[], T],
    *,
    operation: str,
    max_attempts: int | None = None,
    backoff: Sequence[float] | None = None,
) -> T:
    """Run ``attempt`` until it stops losing compare-and-swap races.

    Each call of ``attempt`` must open its own Unit of Work so that a retry
    re-reads committed state. After ``max_attempts`` misses the caller gets
    ``ConcurrencyConflict``.
    """
    if max_attempts is None or backoff is None:
        configured_attempts, configured_backoff = cas_policy()
        max_attempts = max_attempts or configured_attempts
        backoff = configured_backoff if backoff is None else backoff

    for number in range(1, max_attempts + 1):
        try:
            return attempt()
        except (RevisionMismatch, ExpectedVersionError) as exc:
            logger.info(
                "cas_conflict",
                operation=operation,
                attempt=number,
                max_attempts=max_attempts,
                row=str(exc),
            )
            if number < max_attempts and backoff:
                delay = backoff[min(number - 1, len(backoff) - 1)]
                if delay > 0:
                    time.sleep(delay)

    raise ConcurrencyConflict(
        f"{operation} lost {max_attempts} compare-and-swap attempts",
        operation=operation,
    )
