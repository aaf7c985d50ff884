"""Shared fixtures: a controllable clock, a recording notifier, a temp store."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from taskminder.adapters.json_task_store import JsonTaskStore
from taskminder.config import Config
from taskminder.workflows import Services

IST = ZoneInfo("Asia/Kolkata")


class FakeClock:
    """Clock whose time only moves when a test says so."""

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def set_local(self, *args) -> None:
        self.current = datetime(*args, tzinfo=IST).astimezone(timezone.utc)

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class FakeNotifier:
    """Records sends; owners in `fail_for` raise instead."""

    def __init__(self):
        self.sent: list[tuple[str, str, bool]] = []
        self.fail_for: set[str] = set()

    async def send(self, owner_id: str, text: str, *, rich: bool = False) -> None:
        if owner_id in self.fail_for:
            raise RuntimeError(f"chat {owner_id} unreachable")
        self.sent.append((owner_id, text, rich))


class FakeExtractor:
    """Returns canned candidates and remembers what it was asked."""

    def __init__(self, results=None):
        self.results = results or []
        self.calls: list[tuple[str, datetime]] = []

    def extract(self, text, now_local):
        self.calls.append((text, now_local))
        return list(self.results)


def ist(*args) -> datetime:
    """Aware datetime in Asia/Kolkata."""
    return datetime(*args, tzinfo=IST)


@pytest.fixture
def clock():
    # Wed Nov 6 2024, 09:00 IST
    return FakeClock(ist(2024, 11, 6, 9, 0).astimezone(timezone.utc))


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def tasks_file(tmp_path):
    return tmp_path / "data" / "tasks.json"


@pytest.fixture
def store(tasks_file, clock):
    return JsonTaskStore(tasks_file, clock=clock, timezone="Asia/Kolkata")


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def config(tasks_file):
    return Config(tasks_file=str(tasks_file), timezone="Asia/Kolkata", cli_owner="local")


@pytest.fixture
def services(config, clock, store, extractor):
    return Services(config, clock=clock, store=store, extractor=extractor)
