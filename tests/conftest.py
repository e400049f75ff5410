"""Pytest configuration and shared fixtures."""

import pytest

from helpers import FakeSource, ManualSpawner


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def spawner() -> ManualSpawner:
    return ManualSpawner()
