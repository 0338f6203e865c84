"""Shared test fixtures."""

import pytest

from tests.fakes import FakeAgent, FakePort


@pytest.fixture
def port() -> FakePort:
    """Fixture providing a port that echoes its input."""
    return FakePort()


@pytest.fixture
def researcher() -> FakeAgent:
    return FakeAgent("researcher", description="Finds facts about a topic")


@pytest.fixture
def writer() -> FakeAgent:
    return FakeAgent("writer", description="Writes clear prose")
