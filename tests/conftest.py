"""
Pytest configuration and shared fixtures
"""
import os
import tempfile
from datetime import datetime, timedelta

# Keep test log files out of the working tree
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "connections_bot_test_logs"))
os.environ.setdefault("TIMEZONE", "UTC")

import pytest
import pytest_asyncio
import pytz

from bot.database.database import Database
from bot.services.announcements import Notifier
from bot.services.leaderboard_store import InMemoryLeaderboardStore, SqlLeaderboardStore
from bot.utils.leaderboard_exceptions import NotifierError

Y, G, B, P = '🟨', '🟩', '🟦', '🟪'


def make_submission(*rows: str, header: str = "Connections\nPuzzle #512") -> str:
    """Build pasted result text from grid lines."""
    return header + "\n" + "\n".join(rows)


PERFECT_ROWS = (Y * 4, G * 4, B * 4, P * 4)


class FakeClock:
    """Controllable clock whose sleep advances time instead of waiting."""

    def __init__(self, now: datetime, stop_after: datetime = None, advance_ratio: float = 1.0):
        self.now = now
        self.stop_after = stop_after
        self.advance_ratio = advance_ratio
        self.sleeps = []

    def __call__(self) -> datetime:
        return self.now

    async def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        if self.stop_after and self.now >= self.stop_after:
            raise StopLoop()
        # Ratios below one simulate waking up early
        self.now += timedelta(seconds=seconds * self.advance_ratio + 1)


class StopLoop(Exception):
    """Raised by FakeClock.sleep to end a run_forever test."""


class RecordingNotifier(Notifier):
    def __init__(self, clock=None, failing_channels=()):
        self.clock = clock
        self.failing_channels = set(failing_channels)
        self.sent = []

    async def send(self, channel_id: int, message: str):
        if channel_id in self.failing_channels:
            raise NotifierError(channel_id, "missing access")
        self.sent.append((channel_id, message, self.clock() if self.clock else None))


class FakeServerRegistry:
    """In-memory stand-in for ServerConfigService."""

    def __init__(self, channels=None, fail_listing=False):
        self.channels = dict(channels or {})
        self.fail_listing = fail_listing

    async def get_all_server_ids(self):
        if self.fail_listing:
            raise RuntimeError("registry unavailable")
        return list(self.channels)

    async def get_announcement_channel(self, server_id):
        return self.channels.get(server_id)


def utc(*args) -> datetime:
    return pytz.utc.localize(datetime(*args))


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(database_url=f"sqlite+aiosqlite:///{tmp_path / 'test_connections.db'}")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def sql_store(database):
    return SqlLeaderboardStore(database.session_factory)


@pytest_asyncio.fixture(params=["sql", "memory"])
async def store(request, tmp_path):
    """Every LeaderboardStore backend behind the same contract."""
    if request.param == "memory":
        yield InMemoryLeaderboardStore()
        return

    db = Database(database_url=f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await db.initialize()
    yield SqlLeaderboardStore(db.session_factory)
    await db.close()
