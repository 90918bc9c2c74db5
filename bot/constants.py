"""
Bot-wide constants for the Connections Leaderboard bot.

This module collects the puzzle format, scoring and chat text constants used
throughout the codebase.
"""

class GridConstants:
    """Constants describing the Connections result grid."""

    # Marker every pasted result starts with
    SUBMISSION_MARKER = "Connections"

    # Header lines ("Connections", "Puzzle #123") preceding the grid
    HEADER_LINE_COUNT = 2

    ROW_LENGTH = 4
    MIN_ROWS = 4
    CATEGORY_COUNT = 4

    # Square emoji to category identifier
    CATEGORY_SYMBOLS = {
        '🟨': 0,
        '🟩': 1,
        '🟦': 2,
        '🟪': 3,
    }

class ScoringConstants:
    """Constants for the Connections scoring formula."""

    # A perfect game (four rows, no mistakes) scores BASE_SCORE - 4 + 4
    BASE_SCORE = 8

class MessageTemplates:
    """Literal chat text contracts."""

    LEADERBOARD_HEADER = "Connections Leaderboard (This Month):"
    LEADERBOARD_LINE = "{rank}. <@{user_id}>: {score}"
    LEADERBOARD_EMPTY = "No scores recorded this month yet!"

    SUBMISSION_ACCEPTED = "You earned {score} points today!\nTotal score: {total}"

    WINNER_ANNOUNCEMENT = (
        "🎉 Congratulations <@{user_id}> for winning this month's Connections "
        "leaderboard with {score} points! 🎉"
    )
