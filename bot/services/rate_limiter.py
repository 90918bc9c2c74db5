"""
Rate limiting for leaderboard display commands.

Simple in-memory sliding-window limiter keyed by user and command.
"""

import time
import asyncio
from functools import wraps
from collections import deque
from typing import Callable, Deque, Dict, Tuple
import logging

from bot.config import Config

logger = logging.getLogger(__name__)

class SimpleRateLimiter:
    """In-memory rate limiter for Discord commands.

    Request history lives in memory per user:command pair. Every check
    sweeps expired requests from all keys and drops keys left empty, so
    idle users do not accumulate.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        # key -> (request times, window)
        self._requests: Dict[str, Tuple[Deque[float], float]] = {}
        self._lock = asyncio.Lock()  # Async lock for concurrent access
        self.clock = clock

    def __len__(self) -> int:
        return len(self._requests)

    def _prune(self, now: float):
        for key in list(self._requests):
            requests, window = self._requests[key]
            while requests and requests[0] <= now - window:
                requests.popleft()
            if not requests:
                del self._requests[key]

    async def is_allowed(self, user_id: int, command: str, limit: int, window: float) -> bool:
        """Check if user can execute command within rate limit."""
        if limit <= 0 or window <= 0:
            return False

        key = f"{user_id}:{command}"
        now = self.clock()

        async with self._lock:
            self._prune(now)

            requests, _ = self._requests.get(key, (deque(), window))
            if len(requests) < limit:
                requests.append(now)
                self._requests[key] = (requests, window)
                return True

            logger.debug(f"Rate limit hit for {key}")
            return False

def rate_limit(command: str, limit: int = 1, window: int = 60):
    """Decorator for rate limiting slash commands."""
    def decorator(func):
        @wraps(func)
        async def wrapper(self, interaction, *args, **kwargs):
            rate_limiter = self.bot.rate_limiter

            # Bot owner bypasses rate limits
            if Config.OWNER_DISCORD_ID and interaction.user.id == Config.OWNER_DISCORD_ID:
                return await func(self, interaction, *args, **kwargs)

            if not await rate_limiter.is_allowed(interaction.user.id, command, limit, window):
                await interaction.response.send_message(
                    f"⏰ Rate limit exceeded. Please wait before using `/{command}` again.",
                    ephemeral=True
                )
                return

            return await func(self, interaction, *args, **kwargs)
        return wrapper
    return decorator
