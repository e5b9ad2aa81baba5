"""Shared test fixtures for all relayon tests."""

import pytest

from relayon import Emitter


@pytest.fixture
def emitter() -> Emitter:
    """Fresh emitter with default options."""
    return Emitter()


@pytest.fixture
def calls() -> list:
    """Shared sequence listeners append to."""
    return []
