import itertools

import pytest

from habit_store import HabitStore
from repo_json import MemoryStorage


class FakeScheduler:
    """Manual clock with Tk's after/after_cancel interface."""

    def __init__(self):
        self.now = 0
        self.timers = {}
        self._ids = itertools.count(1)

    def after(self, delay_ms, callback):
        handle = next(self._ids)
        self.timers[handle] = (self.now + delay_ms, callback)
        return handle

    def after_cancel(self, handle):
        self.timers.pop(handle, None)

    def advance(self, ms):
        self.now += ms
        due = sorted(
            (when, handle) for handle, (when, _) in self.timers.items() if when <= self.now
        )
        for _, handle in due:
            _, callback = self.timers.pop(handle)
            callback()


class CountingStorage(MemoryStorage):
    def __init__(self, initial=None):
        super().__init__(initial)
        self.writes = []

    def set_item(self, key, value):
        self.writes.append(key)
        super().set_item(key, value)


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def storage():
    return CountingStorage()


@pytest.fixture
def store(storage):
    return HabitStore(storage)
