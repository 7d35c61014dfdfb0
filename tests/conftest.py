"""
Shared fixtures for the stak test suite.
"""
from datetime import datetime, timedelta

import pytest

from stak.service import EntryService
from stak.storage import DayFileStore


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


def run_now(target):
    target()


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 15, 9, 30, 0))


@pytest.fixture
def store(tmp_path):
    s = DayFileStore(tmp_path / "notes")
    s.initialize()
    return s


@pytest.fixture
def titles():
    """Records the urls passed to the title fetcher."""
    return []


@pytest.fixture
def service(store, clock, titles):
    def fake_fetch(url):
        titles.append(url)
        return "Fetched Title"

    return EntryService(store, fetch_title=fake_fetch, spawn=run_now, clock=clock)


@pytest.fixture
def reopen(store):
    """Opens a second store on the same directory, so reads parse the files on disk."""
    return lambda: DayFileStore(store.data_dir, date_format=store.date_format)
