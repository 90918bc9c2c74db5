"""
Leaderboard storage for monthly Connections scores.

Two backends share the ``LeaderboardStore`` contract:

- ``SqlLeaderboardStore`` keys every record by (server, user, year, month).
  Starting a new month is simply writing under a new key, and archiving
  only records that the closed month was resolved.
- ``InMemoryLeaderboardStore`` keeps live scores in a mutable accumulator
  and snapshots-and-clears it on archive. It needs no database and is used
  in tests.

In both, the once-per-day guard and the score increment happen atomically.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select, update, or_, func
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from bot.config import Config
from bot.data_models.leaderboard import ScoreEntry
from bot.database.models import ArchivedPeriod, LeaderboardEntry
from bot.services.base import BaseService
from bot.utils.leaderboard_exceptions import DuplicateSubmissionError, StoreError
from bot.utils.periods import RotationPeriod

logger = logging.getLogger(__name__)


class LeaderboardStore(ABC):
    """Read/write contract the submission pipeline and rotation depend on."""

    @abstractmethod
    async def record_submission(self, server_id: int, user_id: int, score: int, today: date) -> int:
        """
        Add a daily score to the user's total for the period containing ``today``.

        Returns:
            The user's new total for the period

        Raises:
            DuplicateSubmissionError: The user already submitted on ``today``
            StoreError: The backend failed
        """

    @abstractmethod
    async def get_entries(self, server_id: int, period: RotationPeriod) -> List[ScoreEntry]:
        """Entries for a period, highest score first, ties in creation order."""

    async def get_winner(self, server_id: int, period: RotationPeriod) -> Optional[ScoreEntry]:
        """Top entry of a period, or None when nobody submitted."""
        entries = await self.get_entries(server_id, period)
        return entries[0] if entries else None

    @abstractmethod
    async def get_user_total(self, server_id: int, user_id: int, period: RotationPeriod) -> int:
        """User's accumulated score for a period (0 when absent)."""

    @abstractmethod
    async def is_period_archived(self, server_id: int, period: RotationPeriod) -> bool:
        """Whether a closed period was already resolved."""

    @abstractmethod
    async def archive_period(self, server_id: int, period: RotationPeriod,
                             winner: Optional[ScoreEntry] = None) -> bool:
        """
        Mark a closed period as resolved.

        Returns:
            False when the period had already been archived (no-op)
        """


class SqlLeaderboardStore(BaseService, LeaderboardStore):
    """Period-indexed store backed by SQLAlchemy."""

    def __init__(self, session_factory, max_retries: int = None):
        super().__init__(session_factory)
        self.max_retries = max_retries or Config.SUBMISSION_MAX_RETRIES

    @staticmethod
    def _entry_filter(server_id: int, period: RotationPeriod):
        return (
            LeaderboardEntry.server_id == server_id,
            LeaderboardEntry.year == period.year,
            LeaderboardEntry.month == period.month,
        )

    async def record_submission(self, server_id: int, user_id: int, score: int, today: date) -> int:
        """Record a daily score with retry on concurrent first submissions."""
        period = RotationPeriod.containing(today)

        async def record_attempt():
            return await self._record_submission_attempt(server_id, user_id, score, today, period)

        try:
            return await self.execute_with_retry(
                record_attempt, max_retries=self.max_retries, retry_on=(IntegrityError, OperationalError)
            )
        except SQLAlchemyError as e:
            logger.error(
                f"Score submission failed for server {server_id}, user {user_id}, "
                f"period {period}: {e}"
            )
            raise StoreError("score submission", str(e))

    async def _record_submission_attempt(self, server_id: int, user_id: int, score: int,
                                         today: date, period: RotationPeriod) -> int:
        """Single attempt: conditional increment, falling back to insert for a new user."""
        entry_key = self._entry_filter(server_id, period) + (LeaderboardEntry.user_id == user_id,)

        async with self.get_session() as session:
            # Day guard and increment in one statement
            increment = (
                update(LeaderboardEntry)
                .where(
                    *entry_key,
                    or_(
                        LeaderboardEntry.last_submission_date.is_(None),
                        LeaderboardEntry.last_submission_date != today,
                    ),
                )
                .values(
                    score=LeaderboardEntry.score + score,
                    last_submission_date=today,
                    last_submission_at=func.now(),
                )
                .execution_options(synchronize_session=False)
            )
            result = await session.execute(increment)

            if result.rowcount == 0:
                existing_id = await session.scalar(select(LeaderboardEntry.id).where(*entry_key))
                if existing_id is not None:
                    raise DuplicateSubmissionError(server_id, user_id)

                # First submission this period; a concurrent insert raises IntegrityError here
                session.add(LeaderboardEntry(
                    server_id=server_id,
                    user_id=user_id,
                    year=period.year,
                    month=period.month,
                    score=score,
                    last_submission_date=today,
                    last_submission_at=func.now(),
                ))
                await session.flush()

            total = await session.scalar(select(LeaderboardEntry.score).where(*entry_key))

        logger.debug(f"Recorded {score} for user {user_id} in server {server_id} ({period}), total {total}")
        return total

    async def get_entries(self, server_id: int, period: RotationPeriod) -> List[ScoreEntry]:
        stmt = (
            select(LeaderboardEntry.user_id, LeaderboardEntry.score)
            .where(*self._entry_filter(server_id, period))
            .order_by(LeaderboardEntry.score.desc(), LeaderboardEntry.id.asc())
        )
        try:
            async with self.get_session() as session:
                result = await session.execute(stmt)
                return [ScoreEntry(user_id=row.user_id, score=row.score) for row in result]
        except SQLAlchemyError as e:
            logger.error(f"Leaderboard query failed for server {server_id}, period {period}: {e}")
            raise StoreError("leaderboard query", str(e))

    async def get_winner(self, server_id: int, period: RotationPeriod) -> Optional[ScoreEntry]:
        stmt = (
            select(LeaderboardEntry.user_id, LeaderboardEntry.score)
            .where(*self._entry_filter(server_id, period))
            .order_by(LeaderboardEntry.score.desc(), LeaderboardEntry.id.asc())
            .limit(1)
        )
        try:
            async with self.get_session() as session:
                row = (await session.execute(stmt)).first()
        except SQLAlchemyError as e:
            logger.error(f"Winner query failed for server {server_id}, period {period}: {e}")
            raise StoreError("winner query", str(e))
        return ScoreEntry(user_id=row.user_id, score=row.score) if row else None

    async def get_user_total(self, server_id: int, user_id: int, period: RotationPeriod) -> int:
        stmt = select(LeaderboardEntry.score).where(
            *self._entry_filter(server_id, period),
            LeaderboardEntry.user_id == user_id,
        )
        try:
            async with self.get_session() as session:
                total = await session.scalar(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Score lookup failed for server {server_id}, user {user_id}: {e}")
            raise StoreError("score lookup", str(e))
        return total or 0

    async def is_period_archived(self, server_id: int, period: RotationPeriod) -> bool:
        stmt = select(ArchivedPeriod.id).where(
            ArchivedPeriod.server_id == server_id,
            ArchivedPeriod.year == period.year,
            ArchivedPeriod.month == period.month,
        )
        try:
            async with self.get_session() as session:
                return await session.scalar(stmt) is not None
        except SQLAlchemyError as e:
            logger.error(f"Archive lookup failed for server {server_id}, period {period}: {e}")
            raise StoreError("archive lookup", str(e))

    async def archive_period(self, server_id: int, period: RotationPeriod,
                             winner: Optional[ScoreEntry] = None) -> bool:
        # Entries are already period-indexed, so archiving only records the resolution
        try:
            async with self.get_session() as session:
                session.add(ArchivedPeriod(
                    server_id=server_id,
                    year=period.year,
                    month=period.month,
                    winner_user_id=winner.user_id if winner else None,
                    winner_score=winner.score if winner else None,
                ))
        except IntegrityError:
            logger.info(f"Period {period} already archived for server {server_id}")
            return False
        except SQLAlchemyError as e:
            logger.error(f"Archiving failed for server {server_id}, period {period}: {e}")
            raise StoreError("archive", str(e))

        logger.info(f"Leaderboard archived for {server_id} - {period}")
        return True


class InMemoryLeaderboardStore(LeaderboardStore):
    """
    Single mutable accumulator with explicit snapshot-and-clear on archive.

    Live scores for each (server, period) are held until the period is
    archived, at which point they are frozen into a snapshot and removed.
    """

    def __init__(self):
        # (server_id, period) -> {user_id: [score, last_submission_date]}, insertion ordered
        self._live: Dict[Tuple[int, RotationPeriod], Dict[int, list]] = {}
        self._snapshots: Dict[Tuple[int, RotationPeriod], List[ScoreEntry]] = {}
        self._lock = asyncio.Lock()

    async def record_submission(self, server_id: int, user_id: int, score: int, today: date) -> int:
        period = RotationPeriod.containing(today)
        async with self._lock:
            users = self._live.setdefault((server_id, period), {})
            record = users.get(user_id)
            if record is None:
                users[user_id] = [score, today]
                return score
            if record[1] == today:
                raise DuplicateSubmissionError(server_id, user_id)
            record[0] += score
            record[1] = today
            return record[0]

    async def get_entries(self, server_id: int, period: RotationPeriod) -> List[ScoreEntry]:
        async with self._lock:
            key = (server_id, period)
            if key in self._snapshots:
                entries = list(self._snapshots[key])
            else:
                entries = [
                    ScoreEntry(user_id=user_id, score=record[0])
                    for user_id, record in self._live.get(key, {}).items()
                ]
        return sorted(entries, key=lambda entry: entry.score, reverse=True)

    async def get_user_total(self, server_id: int, user_id: int, period: RotationPeriod) -> int:
        for entry in await self.get_entries(server_id, period):
            if entry.user_id == user_id:
                return entry.score
        return 0

    async def is_period_archived(self, server_id: int, period: RotationPeriod) -> bool:
        async with self._lock:
            return (server_id, period) in self._snapshots

    async def archive_period(self, server_id: int, period: RotationPeriod,
                             winner: Optional[ScoreEntry] = None) -> bool:
        async with self._lock:
            key = (server_id, period)
            if key in self._snapshots:
                return False
            users = self._live.pop(key, {})
            self._snapshots[key] = [
                ScoreEntry(user_id=user_id, score=record[0]) for user_id, record in users.items()
            ]
        logger.info(f"Leaderboard snapshot archived for {server_id} - {period}")
        return True
