"""Shared pytest fixtures for sigpackage tests."""

import pytest

from sigpackage.builder import build_package

from sample_keys import KEY_A


@pytest.fixture
def payload():
    """A fixed 32-byte payload."""
    return bytes(range(32))


@pytest.fixture
def package(payload):
    """A valid package signed with KEY_A."""
    return build_package(payload, KEY_A)
