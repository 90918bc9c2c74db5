"""
Connections submission cog.

Watches channel messages for pasted Connections results, scores them and
replies with the day's points and the running monthly total.
"""

import discord
from discord.ext import commands
import logging

from bot.utils.formatting import format_submission_reply
from bot.utils.grid_parser import is_connections_submission
from bot.utils.leaderboard_exceptions import (
    DuplicateSubmissionError, ParseError, StoreError
)

logger = logging.getLogger(__name__)

class ConnectionsCog(commands.Cog):
    """Daily Connections result submissions."""

    def __init__(self, bot):
        self.bot = bot
        self.leaderboard_service = bot.leaderboard_service

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message):
        if message.author.bot or message.guild is None:
            return

        content = message.content.strip()
        if not is_connections_submission(content):
            return

        server_id = message.guild.id
        try:
            result = await self.leaderboard_service.submit(server_id, message.author.id, content)
        except ParseError as e:
            await message.reply(e.user_message)
            return
        except DuplicateSubmissionError as e:
            await message.reply(e.user_message)
            return
        except StoreError as e:
            logger.error(f"Submission from user {message.author.id} in server {server_id} failed during {e.operation}: {e}")
            await message.reply(e.user_message)
            return

        await message.reply(format_submission_reply(result))

async def setup(bot):
    await bot.add_cog(ConnectionsCog(bot))
