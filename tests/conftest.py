import json
from datetime import datetime, timedelta, timezone

import pytest

from src.database.connection import DatabaseManager
from src.database.setup import DatabaseSetup
from src.database.storage import KeyValueStore, get_storage_key
from src.gamification.engine import GamificationEngine
from src.gamification.random_source import RandomSource


class ManualClock:
    """Clock that only moves when a test moves it"""

    def __init__(self, start):
        self.current = start
        self.scheduled = []

    def now(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)

    def schedule(self, interval_seconds, callback):
        handle = ScheduledCallback(interval_seconds, callback)
        self.scheduled.append(handle)
        return handle

    def fire(self):
        for handle in self.scheduled:
            if not handle.cancelled:
                handle.callback()


class ScheduledCallback:
    def __init__(self, interval_seconds, callback):
        self.interval_seconds = interval_seconds
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ScriptedRandom(RandomSource):
    """Returns queued uniform() values, then 0.0 forever"""

    def __init__(self, values=None):
        super().__init__(seed=0)
        self.values = list(values or [])

    def push(self, *values):
        self.values.extend(values)

    def uniform(self):
        if self.values:
            return self.values.pop(0)
        return 0.0


class InMemoryStore:
    """Persistence stand-in that JSON round-trips like the real store"""

    def __init__(self):
        self.data = {}
        self.fail_saves = False
        self.save_calls = 0

    def get(self, key, default=None):
        return json.loads(self.data[key]) if key in self.data else default

    def set(self, key, value):
        if self.fail_saves:
            return False
        self.data[key] = json.dumps(value)
        return True

    def remove(self, key):
        self.data.pop(key, None)
        return True

    def load(self, kind, user_id=None, default=None):
        return self.get(get_storage_key(kind, user_id), default)

    def save(self, kind, value, user_id=None):
        self.save_calls += 1
        return self.set(get_storage_key(kind, user_id), value)


# Monday 2024-01-15 10:00 in UTC+7
START = datetime(2024, 1, 15, 3, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return ManualClock(START)


@pytest.fixture
def rng():
    return ScriptedRandom()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def engine(store, clock, rng):
    return GamificationEngine(user_id='tester', store=store, clock=clock, rng=rng)


@pytest.fixture
def sqlite_store(tmp_path):
    db = DatabaseManager(db_path=str(tmp_path / "test_bot_data.db"))
    DatabaseSetup(db).initialize_database()
    return KeyValueStore(db)
