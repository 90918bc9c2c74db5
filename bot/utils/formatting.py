"""
Chat text for leaderboards, submissions and winner announcements.
"""

from typing import Sequence

from bot.constants import MessageTemplates
from bot.data_models.leaderboard import RankedEntry, ScoreEntry, SubmissionResult


def format_leaderboard(entries: Sequence[RankedEntry]) -> str:
    """Render ranked entries as the monthly leaderboard message."""
    if not entries:
        return MessageTemplates.LEADERBOARD_EMPTY

    lines = [MessageTemplates.LEADERBOARD_HEADER]
    lines.extend(
        MessageTemplates.LEADERBOARD_LINE.format(
            rank=entry.rank, user_id=entry.user_id, score=entry.score
        )
        for entry in entries
    )
    return '\n'.join(lines)


def format_submission_reply(result: SubmissionResult) -> str:
    return MessageTemplates.SUBMISSION_ACCEPTED.format(score=result.score, total=result.total)


def format_winner_announcement(winner: ScoreEntry) -> str:
    return MessageTemplates.WINNER_ANNOUNCEMENT.format(user_id=winner.user_id, score=winner.score)
