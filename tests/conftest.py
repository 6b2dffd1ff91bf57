from datetime import date
from typing import Callable, List

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

import storage


@pytest.fixture
def today() -> date:
    return date(2024, 3, 15)


@pytest.fixture
def memory_engine():
    """In-memory SQLite shared across connections, installed as the storage engine."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    storage.set_engine(engine)
    storage.init_db()
    yield engine
    storage.set_engine(None)
    engine.dispose()


@pytest.fixture
def scripted_pick() -> Callable[[List[int]], Callable[[int], int]]:
    """Factory for pick(n) that replays fixed indices and records each pool size."""

    def make(indices: List[int]) -> Callable[[int], int]:
        queue = list(indices)

        def pick(n: int) -> int:
            pick.calls.append(n)
            return queue.pop(0)

        pick.calls = []
        return pick

    return make
