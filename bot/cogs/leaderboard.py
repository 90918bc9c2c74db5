import discord
from discord import app_commands
from discord.ext import commands
from bot.services.rate_limiter import rate_limit
from bot.utils.error_embeds import ErrorEmbeds
from bot.utils.leaderboard_exceptions import StoreError
import logging

logger = logging.getLogger(__name__)

class LeaderboardCog(commands.Cog):
    """Monthly leaderboard display and announcement settings"""

    def __init__(self, bot):
        self.bot = bot
        self.leaderboard_service = bot.leaderboard_service
        self.server_configs = bot.server_configs

    @app_commands.command(name="leaderboard", description="Show the current month's leaderboard")
    @app_commands.guild_only()
    @rate_limit("leaderboard", limit=5, window=60)
    async def leaderboard(self, interaction: discord.Interaction):
        """Display this month's Connections leaderboard."""
        await interaction.response.defer()

        try:
            text = await self.leaderboard_service.render_current_leaderboard(interaction.guild.id)
            await interaction.followup.send(text)
        except StoreError as e:
            logger.error(f"Error showing leaderboard for server {interaction.guild.id}: {e}")
            await interaction.followup.send(embed=ErrorEmbeds.database_error(), ephemeral=True)

    @commands.command(name="leaderboard")
    @commands.guild_only()
    async def leaderboard_prefix(self, ctx: commands.Context):
        """Prefix version of /leaderboard."""
        try:
            text = await self.leaderboard_service.render_current_leaderboard(ctx.guild.id)
            await ctx.reply(text)
        except StoreError as e:
            logger.error(f"Error showing leaderboard for server {ctx.guild.id}: {e}")
            await ctx.reply("An error occurred. Please try again.")

    @app_commands.command(
        name="setannouncementchannel",
        description="Set the channel for leaderboard announcements"
    )
    @app_commands.describe(channel="The channel to announce winners in")
    @app_commands.guild_only()
    @app_commands.checks.has_permissions(administrator=True)
    async def set_announcement_channel(self, interaction: discord.Interaction, channel: discord.TextChannel):
        """Set where monthly winners are announced (administrators only)."""
        try:
            await self.server_configs.set_announcement_channel(interaction.guild.id, channel.id)
        except StoreError as e:
            logger.error(f"Error setting announcement channel for server {interaction.guild.id}: {e}")
            await interaction.response.send_message(
                "An error occurred. Please try again.", ephemeral=True
            )
            return

        logger.info(
            f"Announcement channel for server {interaction.guild.id} set to {channel.id} "
            f"by {interaction.user.id} ({interaction.user.name})"
        )
        await interaction.response.send_message(
            f"Announcement channel set to {channel.name}!", ephemeral=True
        )

async def setup(bot):
    await bot.add_cog(LeaderboardCog(bot))
