"""
Shared ranking utilities for leaderboard display and winner resolution.

Ranks use the competition scheme: tied scores share a rank and the next
distinct score is ranked by its position, so scores 10, 10, 7 rank 1, 1, 3.
"""

from typing import Iterable, List

from bot.data_models.leaderboard import RankedEntry, ScoreEntry


class RankingUtility:
    """Shared ranking logic for consistent leaderboard ordering."""

    @staticmethod
    def sort_entries(entries: Iterable[ScoreEntry]) -> List[ScoreEntry]:
        """Sort by score descending, keeping the incoming order between ties."""
        return sorted(entries, key=lambda entry: entry.score, reverse=True)

    @staticmethod
    def rank_entries(entries: Iterable[ScoreEntry]) -> List[RankedEntry]:
        """
        Assign competition ranks to score entries.

        Args:
            entries: (user, score) entries in query order

        Returns:
            Ranked rows ordered by score descending
        """
        ranked: List[RankedEntry] = []
        for position, entry in enumerate(RankingUtility.sort_entries(entries), start=1):
            if ranked and entry.score == ranked[-1].score:
                rank = ranked[-1].rank
            else:
                rank = position
            ranked.append(RankedEntry(rank=rank, user_id=entry.user_id, score=entry.score))
        return ranked
