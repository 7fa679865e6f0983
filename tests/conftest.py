from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from checkin_queue.core.config import Settings
from checkin_queue.core.storage import DailyStore
from checkin_queue.main import create_app
from checkin_queue.services.notification_service import DisplayNotifier
from checkin_queue.services.queue_service import QueueService

CST = timezone(timedelta(hours=8))


class FakeClock:
    """Manually advanced clock"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, hour: int, minute: int = 0) -> datetime:
        self.now = self.now.replace(hour=hour, minute=minute, second=0, microsecond=0)
        return self.now


def at(hour: int, minute: int = 0, day: int = 20) -> datetime:
    return datetime(2024, 5, day, hour, minute, tzinfo=CST)


@pytest.fixture
def clock():
    return FakeClock(at(9, 0))


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def store(data_dir):
    return DailyStore(data_dir)


@pytest.fixture
def notifier():
    return DisplayNotifier()


@pytest.fixture
def service(store, notifier, clock):
    queue = QueueService(store, notifier=notifier, clock=clock)
    queue.load()
    return queue


@pytest.fixture
def settings(data_dir):
    return Settings(_env_file=None, DATA_DIR=str(data_dir), SCHEDULER_ENABLED=False)


@pytest.fixture
def app(settings, clock):
    return create_app(settings, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
