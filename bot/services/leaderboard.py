"""
Leaderboard service for daily Connections submissions.

Runs the submission pipeline (parse, score, record) and serves the current
month's standings. The store is injected, so the service holds no
leaderboard state of its own.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from bot.data_models.leaderboard import RankedEntry, SubmissionResult
from bot.services.leaderboard_store import LeaderboardStore
from bot.utils.formatting import format_leaderboard
from bot.utils.grid_parser import parse_connections_grid
from bot.utils.leaderboard_exceptions import LeaderboardException, StoreError
from bot.utils.periods import RotationPeriod, get_timezone, local_now
from bot.utils.ranking import RankingUtility
from bot.utils.scoring import calculate_connections_score

logger = logging.getLogger(__name__)


class LeaderboardService:
    """Submission handling and current-month leaderboard queries."""

    def __init__(self, store: LeaderboardStore,
                 clock: Optional[Callable[[], datetime]] = None,
                 timezone_name: Optional[str] = None):
        self.store = store
        tz = get_timezone(timezone_name)
        self.clock = clock or (lambda: local_now(tz))

    def current_period(self) -> RotationPeriod:
        return RotationPeriod.containing(self.clock())

    async def submit(self, server_id: int, user_id: int, text: str) -> SubmissionResult:
        """
        Score a pasted Connections result and add it to this month's total.

        Raises:
            ParseError: The text is not a valid grid
            DuplicateSubmissionError: The user already submitted today
            StoreError: The store failed
        """
        grid = parse_connections_grid(text)
        score = calculate_connections_score(grid)

        today = self.clock().date()
        try:
            total = await self.store.record_submission(server_id, user_id, score, today)
        except LeaderboardException:
            raise
        except Exception as e:
            logger.error(f"Score submission failed for server {server_id}, user {user_id}: {e}", exc_info=True)
            raise StoreError("score submission", str(e))

        logger.info(f"User {user_id} in server {server_id} scored {score} (total {total})")
        return SubmissionResult(score=score, total=total, period=RotationPeriod.containing(today))

    async def current_standings(self, server_id: int) -> List[RankedEntry]:
        """Competition-ranked standings for the current month."""
        entries = await self.store.get_entries(server_id, self.current_period())
        return RankingUtility.rank_entries(entries)

    async def render_current_leaderboard(self, server_id: int) -> str:
        return format_leaderboard(await self.current_standings(server_id))
