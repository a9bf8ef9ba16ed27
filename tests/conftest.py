"""
Pytest fixtures for MoodMash analytics tests.
"""
import sys
import pytest
from pathlib import Path
from datetime import datetime, timedelta, timezone
from dotenv import load_dotenv

# Ensure src/ and the repo root are on sys.path so tests can import
# mood_analytics, automation and server.dashboard_api.
ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
for path in (SRC, ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

# Load environment variables
load_dotenv()

from mood_analytics.engine import AdaptiveEngine  # noqa: E402
from mood_analytics.models import MoodEntry  # noqa: E402
from mood_analytics.persistence import MemoryStore  # noqa: E402


# Sunday, 7 January 2024, noon UTC
BASE_TIME = datetime(2024, 1, 7, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# Test Doubles
# ============================================================================


class FixedClock:
    """Controllable clock; call it to read the current time."""

    def __init__(self, start: datetime = BASE_TIME):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class ManualScheduler:
    """
    Scheduler that records timers instead of running them.

    Tests fire debounced timers with fire() and periodic ones with tick().
    """

    def __init__(self):
        self.debounced = {}
        self.periodic = {}
        self.cancelled = []
        self.stopped = False

    def debounce(self, name, delay_seconds, callback):
        self.debounced[name] = (delay_seconds, callback)

    def every(self, name, interval_seconds, callback, run_immediately=False):
        self.periodic[name] = (interval_seconds, callback)
        if run_immediately:
            callback()

    def cancel(self, name):
        self.cancelled.append(name)
        found = self.debounced.pop(name, None) or self.periodic.pop(name, None)
        return found is not None

    def shutdown(self):
        self.stopped = True
        self.debounced.clear()
        self.periodic.clear()

    def fire(self, name):
        _, callback = self.debounced.pop(name)
        return callback()

    def tick(self, name):
        _, callback = self.periodic[name]
        return callback()


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def clock():
    """Clock fixed at Sunday 2024-01-07 12:00 UTC."""
    return FixedClock()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def engine(store, scheduler, clock):
    """Adaptive engine wired to an in-memory store and a manual scheduler."""
    return AdaptiveEngine(store=store, scheduler=scheduler, clock=clock)


@pytest.fixture
def make_entry():
    """
    Factory fixture for mood entries.

    Defaults to a "happy" entry of intensity 5 logged at BASE_TIME.
    """

    def _make_entry(emotion="happy", intensity=5, created_at=None, note=None, tags=()):
        return MoodEntry(
            emotion=emotion,
            intensity=intensity,
            created_at=created_at or BASE_TIME,
            note=note,
            tags=tags,
        )

    return _make_entry
