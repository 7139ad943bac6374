from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from eztodo.main import create_app
from eztodo.state import AppState


class FakeClock:
    """Manually advanced replacement for datetime.now."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    # Monday
    return FakeClock(datetime(2025, 3, 10, 9, 0))


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def state(data_dir, clock):
    return AppState.open(data_dir, clock=clock)


@pytest.fixture
def reopen(data_dir, clock):
    """Load a fresh AppState from the same data directory, as a restart would."""
    def _reopen():
        return AppState.open(data_dir, clock=clock)
    return _reopen


@pytest.fixture
def client(state):
    return TestClient(create_app(state))
