"""
Tests for Discord announcement delivery
"""
from types import SimpleNamespace

import discord
import pytest

from bot.services.announcements import DiscordNotifier
from bot.utils.leaderboard_exceptions import NotifierError


def http_error(error_cls, status):
    return error_cls(SimpleNamespace(status=status, reason="error"), "request failed")


class FakeChannel(discord.abc.Messageable):
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    async def _get_channel(self):
        return self

    async def send(self, content=None, **kwargs):
        if self.error:
            raise self.error
        self.sent.append(content)


class FakeClient:
    def __init__(self, cached=None, fetched=None, fetch_error=None):
        self.cached = cached or {}
        self.fetched = fetched or {}
        self.fetch_error = fetch_error
        self.fetch_calls = []

    def get_channel(self, channel_id):
        return self.cached.get(channel_id)

    async def fetch_channel(self, channel_id):
        self.fetch_calls.append(channel_id)
        if self.fetch_error:
            raise self.fetch_error
        return self.fetched[channel_id]


@pytest.mark.asyncio
async def test_sends_to_cached_channel():
    channel = FakeChannel()
    client = FakeClient(cached={100: channel})

    await DiscordNotifier(client).send(100, "hello")

    assert channel.sent == ["hello"]
    assert client.fetch_calls == []


@pytest.mark.asyncio
async def test_fetches_uncached_channel():
    channel = FakeChannel()
    client = FakeClient(fetched={100: channel})

    await DiscordNotifier(client).send(100, "hello")

    assert channel.sent == ["hello"]
    assert client.fetch_calls == [100]


@pytest.mark.asyncio
@pytest.mark.parametrize("fetch_error", [
    http_error(discord.NotFound, 404),
    http_error(discord.Forbidden, 403),
    http_error(discord.HTTPException, 500),
    discord.InvalidData("unknown channel type"),
])
async def test_channel_lookup_failures_become_notifier_errors(fetch_error):
    notifier = DiscordNotifier(FakeClient(fetch_error=fetch_error))

    with pytest.raises(NotifierError):
        await notifier.send(100, "hello")


@pytest.mark.asyncio
async def test_non_text_channel_is_rejected():
    notifier = DiscordNotifier(FakeClient(cached={100: object()}))

    with pytest.raises(NotifierError):
        await notifier.send(100, "hello")


@pytest.mark.asyncio
async def test_send_failure_becomes_notifier_error():
    channel = FakeChannel(error=http_error(discord.Forbidden, 403))
    notifier = DiscordNotifier(FakeClient(cached={100: channel}))

    with pytest.raises(NotifierError):
        await notifier.send(100, "hello")
