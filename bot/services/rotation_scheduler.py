"""
Monthly rotation for the Connections leaderboard.

Once per calendar month the scheduler wakes at the first instant of the new
month, and for every registered server:

1. Skips the server if the closed month was already archived
2. Resolves the closed month's winner (skipping servers with no entries)
3. Announces the winner in the server's configured channel, if any
4. Archives the closed month

Each server is processed independently: a storage or delivery failure in one
server is logged and recorded in the report, and the rest still run. The
next wake-up is recomputed from the clock after every firing instead of
using a fixed interval, so restarts and late wake-ups never cause drift or
a second firing for the same month.
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from bot.config import Config
from bot.data_models.leaderboard import RotationReport
from bot.services.announcements import Notifier
from bot.services.leaderboard_store import LeaderboardStore
from bot.utils.formatting import format_winner_announcement
from bot.utils.leaderboard_exceptions import NotifierError
from bot.utils.periods import (
    RotationPeriod, get_timezone, local_now, next_month_boundary, seconds_until
)

logger = logging.getLogger(__name__)

# Long waits are split so a suspended host or clock change is noticed
MAX_SLEEP_SECONDS = 6 * 60 * 60


class RotationScheduler:
    """Background loop that closes each month's leaderboard."""

    def __init__(
        self,
        store: LeaderboardStore,
        server_configs,
        notifier: Notifier,
        clock: Optional[Callable[[], datetime]] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        timezone_name: Optional[str] = None,
        catch_up: Optional[bool] = None,
    ):
        """
        Args:
            store: Leaderboard storage backend
            server_configs: Registry exposing get_all_server_ids() and
                get_announcement_channel(server_id)
            notifier: Announcement sink
            clock: Returns the current timezone-aware time
            sleep: Awaitable sleep used while waiting for the boundary
            timezone_name: Timezone month boundaries are computed in
            catch_up: Resolve the previous month once before the first wait
        """
        self.store = store
        self.server_configs = server_configs
        self.notifier = notifier
        self.tz = get_timezone(timezone_name)
        self.clock = clock or (lambda: local_now(self.tz))
        self.sleep = sleep or asyncio.sleep
        self.catch_up_enabled = Config.ROTATION_CATCH_UP if catch_up is None else catch_up

        self.next_rotation_at: Optional[datetime] = None
        self.last_report: Optional[RotationReport] = None
        self._task: Optional[asyncio.Task] = None
        self._firing_lock = asyncio.Lock()

    # Timing

    def next_boundary(self, now: Optional[datetime] = None) -> datetime:
        """First instant of the month after ``now`` (default: the clock)."""
        return next_month_boundary(now or self.clock())

    def seconds_until_next_rotation(self, now: Optional[datetime] = None) -> float:
        now = now or self.clock()
        return seconds_until(next_month_boundary(now), now)

    async def _sleep_until(self, boundary: datetime):
        while True:
            remaining = seconds_until(boundary, self.clock())
            if remaining <= 0:
                return
            await self.sleep(min(remaining, MAX_SLEEP_SECONDS))

    # Firing

    async def rotate_community(self, server_id: int, period: RotationPeriod, report: RotationReport):
        """Resolve, announce and archive one server's closed month."""
        if await self.store.is_period_archived(server_id, period):
            report.already_archived.append(server_id)
            return

        winner = await self.store.get_winner(server_id, period)
        if winner is None:
            logger.debug(f"No entries for server {server_id} in {period}")
            report.skipped_empty.append(server_id)
            return

        channel_id = await self.server_configs.get_announcement_channel(server_id)
        if channel_id:
            try:
                await self.notifier.send(channel_id, format_winner_announcement(winner))
                report.announced.append(server_id)
                logger.info(f"Winner announced in server {server_id} for {period}")
            except NotifierError as e:
                # Not retried; the month is still archived
                logger.error(f"Winner announcement failed for server {server_id}, {period}: {e}")
                report.notifier_failures.append(server_id)

        await self.store.archive_period(server_id, period, winner)
        report.archived.append(server_id)

    async def perform_rotation(self, period: Optional[RotationPeriod] = None) -> RotationReport:
        """
        Run the monthly rotation for every registered server.

        Args:
            period: Closed month to resolve (default: the month before now)

        Returns:
            Per-server outcome of the rotation. Never raises for a
            server-level failure.
        """
        period = period or RotationPeriod.containing(self.clock()).previous()
        report = RotationReport(period=period)

        async with self._firing_lock:
            try:
                server_ids = await self.server_configs.get_all_server_ids()
            except Exception as e:
                logger.error(f"Monthly rotation for {period} could not list servers: {e}", exc_info=True)
                self.last_report = report
                return report

            for server_id in server_ids:
                try:
                    await self.rotate_community(server_id, period, report)
                except Exception as e:
                    logger.error(
                        f"Error processing monthly rotation for server {server_id}, {period}: {e}",
                        exc_info=True
                    )
                    report.failed[server_id] = str(e)

        self.last_report = report
        logger.info(
            f"Monthly rotation for {period} completed: {len(report.archived)} archived, "
            f"{len(report.announced)} announced, {len(report.skipped_empty)} empty, "
            f"{len(report.already_archived)} already archived, {len(report.failed)} failed"
        )
        return report

    async def catch_up(self) -> RotationReport:
        """Resolve the previous month for servers a missed boundary left open."""
        return await self.perform_rotation(RotationPeriod.containing(self.clock()).previous())

    # Loop lifecycle

    async def run_forever(self):
        """Wait for each month boundary and rotate, until cancelled."""
        if self.catch_up_enabled:
            await self.catch_up()

        while True:
            boundary = self.next_boundary()
            self.next_rotation_at = boundary
            logger.info(
                f"Monthly rotation scheduled for {boundary.isoformat()} "
                f"(in {self.seconds_until_next_rotation() / 86400:.1f} days)"
            )

            await self._sleep_until(boundary)
            await self.perform_rotation(RotationPeriod.containing(boundary).previous())

    def start(self) -> asyncio.Task:
        """Start the background loop; a running loop is left untouched."""
        if self._task and not self._task.done():
            return self._task
        self._task = asyncio.create_task(self.run_forever(), name="monthly-rotation")
        self._task.add_done_callback(self._on_task_done)
        logger.info("Monthly rotation scheduler started")
        return self._task

    def _on_task_done(self, task: asyncio.Task):
        if task.cancelled():
            return
        error = task.exception()
        if error:
            logger.error(f"Monthly rotation scheduler stopped unexpectedly: {error}", exc_info=error)

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def stop(self):
        """Cancel the background loop and wait for it to finish."""
        if self._task:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
            logger.info("Monthly rotation scheduler stopped")
