"""
Centralized error embeds for consistent error replies across the bot.
"""

import discord


class ErrorEmbeds:
    """Centralized error embed factory for consistent error handling."""

    @staticmethod
    def database_error() -> discord.Embed:
        """Create embed for database-related errors."""
        return discord.Embed(
            title="Database Error",
            description="A database error occurred. Please try again later or contact an administrator.",
            color=discord.Color.red()
        )
