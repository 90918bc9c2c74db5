import discord
from discord.ext import commands
import logging

from bot.utils.leaderboard_exceptions import StoreError

logger = logging.getLogger(__name__)

class EventsCog(commands.Cog):
    """Guild lifecycle listeners that keep the server registry current"""

    def __init__(self, bot):
        self.bot = bot
        self.server_configs = bot.server_configs

    @commands.Cog.listener()
    async def on_guild_join(self, guild: discord.Guild):
        """Register a guild the bot was just added to"""
        try:
            await self.server_configs.register_server(guild.id)
            logger.info(f"Joined new guild: {guild.name} ({guild.id})")
        except StoreError as e:
            logger.error(f"Error setting up new guild {guild.id}: {e}")

async def setup(bot):
    await bot.add_cog(EventsCog(bot))
