"""
Global pytest fixtures for the longlink test suite.

Responsibilities:
    - Provide isolated in-memory Storage and Analytics fixtures
    - Provide a LinkManager wired to the Storage fixture (fresh caches per test)
    - Provide scripted existence checks and id factories so retry behaviour
      can be asserted exactly

Why fresh instances?
    Collision and resolution caches belong to the manager, so constructing one
    per test removes cross-test state without any global reset.
"""

import itertools
from typing import Iterable, List
from unittest.mock import AsyncMock

import pytest

from longlink.analytics.analytics import Analytics
from longlink.manager.collision import CollisionChecker
from longlink.manager.link_manager import LinkManager
from longlink.storage.storage import Storage


class SequentialIds:
    """id_factory that hands out ID001, ID002, ... and remembers what it produced."""

    def __init__(self, prefix: str = "ID"):
        self.prefix = prefix
        self.produced: List[str] = []
        self._counter = itertools.count(1)

    def __call__(self, length: int) -> str:
        value = f"{self.prefix}{next(self._counter):0{max(length - len(self.prefix), 1)}d}"[:length]
        self.produced.append(value)
        return value


def scripted_check(results: Iterable) -> AsyncMock:
    """
    AsyncMock existence check returning (or raising) each item in turn.
    Exceptions in `results` are raised instead of returned.
    """
    return AsyncMock(side_effect=list(results))


@pytest.fixture
def storage() -> Storage:
    return Storage()


@pytest.fixture
def analytics() -> Analytics:
    return Analytics()


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture
def scripted():
    return scripted_check


@pytest.fixture
def checker_factory():
    """Build a CollisionChecker around a scripted backing check."""

    def _make(results: Iterable, degrade: bool = True) -> CollisionChecker:
        return CollisionChecker(scripted_check(results), degrade_on_check_failure=degrade)

    return _make


@pytest.fixture
def manager(storage: Storage) -> LinkManager:
    """LinkManager over the storage fixture with default settings."""
    return LinkManager(storage=storage, domain="yourdomain.co")
