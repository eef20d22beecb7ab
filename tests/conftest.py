import pytest
from fastapi.testclient import TestClient

from task_manager.main import create_app
from task_manager.store import TaskStore


class FakeClock:
    """Deterministic nanosecond clock: every read advances by `step`."""

    def __init__(self, start: int = 1_000, step: int = 10):
        self.now = start
        self.step = step

    def __call__(self) -> int:
        self.now += self.step
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> TaskStore:
    return TaskStore(clock=clock)


@pytest.fixture()
def client(store: TaskStore) -> TestClient:
    return TestClient(create_app(store))
