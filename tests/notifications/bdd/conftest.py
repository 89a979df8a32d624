"""Shared BDD fixtures for the Notifications domain."""

import pytest


@pytest.fixture()
def outcome():
    """Holds the payload under test and any errors raised while delivering it."""
    return {"errors": []}
