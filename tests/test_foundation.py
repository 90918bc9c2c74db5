"""
Tests for foundation components: configuration and database initialization
"""
import pytest
from sqlalchemy import inspect

from bot.config import Config
from bot.database.database import Database
from bot.database.models import ServerConfig


def test_async_database_url(monkeypatch):
    monkeypatch.setattr(Config, 'DATABASE_URL', 'sqlite:///connections.db')
    assert Config.get_async_database_url() == 'sqlite+aiosqlite:///connections.db'

    monkeypatch.setattr(Config, 'DATABASE_URL', 'postgresql+asyncpg://db/connections')
    assert Config.get_async_database_url() == 'postgresql+asyncpg://db/connections'


def test_guild_ids(monkeypatch):
    monkeypatch.setattr(Config, 'DISCORD_GUILD_IDS', '1, 2,3')
    assert Config.get_guild_ids() == [1, 2, 3]

    monkeypatch.setattr(Config, 'DISCORD_GUILD_IDS', '')
    monkeypatch.setattr(Config, 'DISCORD_GUILD_ID', 7)
    assert Config.get_guild_ids() == [7]

    monkeypatch.setattr(Config, 'DISCORD_GUILD_ID', 0)
    assert Config.get_guild_ids() == []


def test_invalid_guild_ids(monkeypatch):
    monkeypatch.setattr(Config, 'DISCORD_GUILD_IDS', '1,abc')
    with pytest.raises(ValueError):
        Config.get_guild_ids()


def test_validate(monkeypatch):
    monkeypatch.setattr(Config, 'DISCORD_TOKEN', 'token')
    monkeypatch.setattr(Config, 'TIMEZONE', 'America/New_York')
    monkeypatch.setattr(Config, 'SUBMISSION_MAX_RETRIES', 3)
    Config.validate()

    monkeypatch.setattr(Config, 'TIMEZONE', 'Mars/Olympus_Mons')
    with pytest.raises(ValueError, match="not a known timezone"):
        Config.validate()

    monkeypatch.setattr(Config, 'TIMEZONE', 'UTC')
    monkeypatch.setattr(Config, 'DISCORD_TOKEN', None)
    with pytest.raises(ValueError, match="DISCORD_TOKEN"):
        Config.validate()


@pytest.mark.asyncio
async def test_database_initialization_creates_tables(database):
    async with database.engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))

    assert {'server_configs', 'leaderboard_entries', 'archived_periods'} <= tables


@pytest.mark.asyncio
async def test_database_session_rolls_back_on_error(database):
    with pytest.raises(RuntimeError):
        async with database.get_session() as session:
            session.add(ServerConfig(server_id=1))
            await session.flush()
            raise RuntimeError("abort")

    async with database.get_session() as session:
        assert await session.get(ServerConfig, 1) is None


@pytest.mark.asyncio
async def test_close_without_initialize():
    await Database().close()
