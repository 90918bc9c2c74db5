"""
Services package for the Connections leaderboard bot.
"""

from .base import BaseService
from .leaderboard import LeaderboardService
from .leaderboard_store import LeaderboardStore, SqlLeaderboardStore, InMemoryLeaderboardStore
from .rotation_scheduler import RotationScheduler
from .server_config import ServerConfigService

__all__ = [
    'BaseService', 'LeaderboardService', 'LeaderboardStore', 'SqlLeaderboardStore',
    'InMemoryLeaderboardStore', 'RotationScheduler', 'ServerConfigService',
]
