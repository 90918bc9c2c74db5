"""
Announcement delivery for monthly winners.

The rotation loop only knows the ``Notifier`` interface. ``DiscordNotifier``
resolves the configured channel through the bot's cache (falling back to an
API fetch) and posts the message.
"""

import logging
from abc import ABC, abstractmethod

import discord

from bot.utils.leaderboard_exceptions import NotifierError

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Sends a text message to a configured destination."""

    @abstractmethod
    async def send(self, channel_id: int, message: str):
        """
        Deliver ``message`` to ``channel_id``.

        Raises:
            NotifierError: Delivery failed
        """


class DiscordNotifier(Notifier):
    """Posts announcements to Discord text channels."""

    def __init__(self, client: discord.Client):
        self.client = client

    async def _resolve_channel(self, channel_id: int):
        channel = self.client.get_channel(channel_id)
        if channel is not None:
            return channel
        try:
            return await self.client.fetch_channel(channel_id)
        except (discord.NotFound, discord.Forbidden) as e:
            raise NotifierError(channel_id, f"channel unavailable ({e})")
        except discord.InvalidData as e:
            raise NotifierError(channel_id, f"unknown channel type ({e})")
        except discord.HTTPException as e:
            raise NotifierError(channel_id, f"HTTP {e.status}: {e.text}")

    async def send(self, channel_id: int, message: str):
        channel = await self._resolve_channel(channel_id)

        if not isinstance(channel, discord.abc.Messageable):
            raise NotifierError(channel_id, "channel is not text based")

        try:
            await channel.send(message)
        except discord.HTTPException as e:
            raise NotifierError(channel_id, f"HTTP {e.status}: {e.text}")

        logger.debug(f"Announcement delivered to channel {channel_id}")
