"""
Housekeeping Cog - Monthly Rotation Background Task

Starts the monthly leaderboard rotation once the bot is ready and exposes
owner commands to inspect it or trigger the catch-up manually.
"""

from discord.ext import commands

from bot.services.rotation_scheduler import RotationScheduler
from bot.utils.leaderboard_exceptions import StoreError
from bot.utils.logger import setup_logger

logger = setup_logger(__name__)


class HousekeepingCog(commands.Cog):
    """Background monthly rotation"""

    def __init__(self, bot):
        self.bot = bot
        self.scheduler: RotationScheduler = bot.rotation_scheduler
        self.logger = logger

    @commands.Cog.listener()
    async def on_ready(self):
        """Register known guilds, then start the rotation loop (on_ready may fire again on reconnect)"""
        if self.scheduler.is_running:
            return

        # Registration first so the startup catch-up sees every guild
        for guild in self.bot.guilds:
            try:
                await self.bot.server_configs.register_server(guild.id)
            except StoreError as e:
                self.logger.error(f"Error registering guild {guild.id}: {e}")

        self.scheduler.start()
        self.logger.info("HousekeepingCog: Monthly rotation started")

    async def cog_unload(self):
        """Stop the rotation loop when the cog is unloaded"""
        await self.scheduler.stop()
        self.logger.info("HousekeepingCog: Monthly rotation stopped")

    @commands.command(name="rotation_status")
    @commands.is_owner()
    async def rotation_status(self, ctx):
        """Show when the next monthly rotation fires (owner only)"""
        boundary = self.scheduler.next_boundary()
        days = self.scheduler.seconds_until_next_rotation() / 86400
        lines = [
            f"Next rotation: {boundary.strftime('%Y-%m-%d %H:%M %Z')} (in {days:.1f} days)",
            f"Scheduler running: {'yes' if self.scheduler.is_running else 'no'}",
        ]

        report = self.scheduler.last_report
        if report:
            lines.append(
                f"Last rotation ({report.period}): {len(report.archived)} archived, "
                f"{len(report.announced)} announced, {len(report.failed)} failed"
            )
        await ctx.send('\n'.join(lines))

    @commands.command(name="rotation_catchup")
    @commands.is_owner()
    async def rotation_catchup(self, ctx):
        """Resolve last month for any server not yet archived (owner only)"""
        report = await self.scheduler.catch_up()
        self.logger.info(f"Manual rotation catch-up for {report.period} run by {ctx.author.id}")

        message = (
            f"✅ Rotation for {report.period}: {len(report.archived)} archived, "
            f"{len(report.announced)} announced, {len(report.skipped_empty)} empty, "
            f"{len(report.already_archived)} already archived."
        )
        if report.failed:
            message += f"\n❌ Failed: {', '.join(str(server_id) for server_id in report.failed)}"
        await ctx.send(message)


async def setup(bot):
    await bot.add_cog(HousekeepingCog(bot))
