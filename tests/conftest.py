"""Shared pytest fixtures and configuration."""

from datetime import datetime, timedelta, timezone

import pytest

from shishatimer.core.engine import SessionEngine
from shishatimer.core.registry import MemorySnapshotStore, TableRegistry
from shishatimer.models import TableStatus

T0 = datetime(2026, 10, 19, 18, 0, 0, tzinfo=timezone.utc)
SESSION = timedelta(minutes=30)


class FakeClock:
    """Settable clock for driving the engine through time."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class RecordingNotifier:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemorySnapshotStore()


@pytest.fixture
def registry(store):
    registry = TableRegistry(store)
    registry.load()
    return registry


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def engine(registry, notifier, clock):
    return SessionEngine(registry, notifier=notifier, clock=clock)


def assert_invariants(tables):
    """available <=> no changes and no timers, for every table."""
    for table in tables.values():
        session = table.session
        baseline = (
            session.current_change == 0
            and session.timer_start_time is None
            and session.timer_end_time is None
        )
        assert (session.status is TableStatus.AVAILABLE) == baseline, table
        assert 0 <= session.current_change <= 2
