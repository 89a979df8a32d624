"""Tests for mapping consumer failures to broker dispositions."""

import pytest
from protean.exceptions import DatabaseError
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError
from shared.errors import (
    ConcurrencyConflict,
    InsufficientStockError,
    MalformedMessageError,
    NotFoundError,
    RemoteTimeoutError,
    TransientInfraError,
    ValidationError,
)
from shared.messaging.classification import Disposition, classify


class _Strict(BaseModel):
    amount: int


def _schema_error():
    try:
        _Strict.model_validate({"amount": "lots"})
    except SchemaError as exc:
        return exc


class TestClassify:
    @pytest.mark.parametrize(
        "exc",
        [
            MalformedMessageError("bad payload"),
            ValidationError({"amount": ["must be positive"]}),
            NotFoundError("no such order"),
        ],
    )
    def test_unprocessable_messages_are_dead_lettered(self, exc):
        assert classify(exc) is Disposition.DEAD_LETTER

    def test_schema_errors_are_dead_lettered(self):
        assert classify(_schema_error()) is Disposition.DEAD_LETTER

    @pytest.mark.parametrize(
        "exc",
        [
            TransientInfraError("broker down"),
            ConcurrencyConflict("lost the race"),
            RemoteTimeoutError("too slow"),
            DatabaseError("connection reset"),
            ConnectionError("refused"),
            TimeoutError(),
        ],
    )
    def test_transient_failures_are_retried(self, exc):
        assert classify(exc) is Disposition.RETRY

    def test_settled_business_rejection_is_dropped(self):
        assert classify(InsufficientStockError("gone")) is Disposition.DROP

    def test_unknown_failures_are_retried(self):
        assert classify(RuntimeError("surprise")) is Disposition.RETRY
