"""
Leaderboard data models for the monthly Connections leaderboard.

Provides immutable data transfer objects passed between the store, the
services and the chat layer.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from bot.utils.periods import RotationPeriod


@dataclass(frozen=True)
class ScoreEntry:
    """A user's accumulated score for one period."""
    user_id: int
    score: int


@dataclass(frozen=True)
class RankedEntry:
    """Single leaderboard row."""
    rank: int
    user_id: int
    score: int


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of an accepted daily submission."""
    score: int
    total: int
    period: RotationPeriod


@dataclass
class RotationReport:
    """What a monthly rotation did for each community."""
    period: RotationPeriod
    announced: List[int] = field(default_factory=list)
    archived: List[int] = field(default_factory=list)
    skipped_empty: List[int] = field(default_factory=list)
    already_archived: List[int] = field(default_factory=list)
    notifier_failures: List[int] = field(default_factory=list)
    failed: Dict[int, str] = field(default_factory=dict)

    @property
    def processed_count(self) -> int:
        return (
            len(self.archived) + len(self.skipped_empty)
            + len(self.already_archived) + len(self.failed)
        )
