"""
Custom exceptions for the Connections leaderboard with user-friendly error messages.

Every exception carries two messages: the technical one used for logging and
``user_message``, which is safe to reply with in chat.
"""

class LeaderboardException(Exception):
    """Base exception for leaderboard-related errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message


class ParseError(LeaderboardException):
    """Raised when submission text is not a valid Connections grid."""
    def __init__(self, message: str):
        super().__init__(message, f"Error: {message}")


class InvalidSymbol(ParseError):
    """Raised when a grid line contains something other than a category square."""
    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Invalid emoji: {symbol}")


class TooFewRows(ParseError):
    """Raised when the grid has fewer than four guess rows."""
    def __init__(self, row_count: int):
        self.row_count = row_count
        super().__init__(f"Invalid grid format: expected at least 4 rows, got {row_count}")


class MalformedRow(ParseError):
    """Raised when a grid row does not hold exactly four squares."""
    def __init__(self, row_index: int, length: int):
        self.row_index = row_index
        self.length = length
        super().__init__(
            f"Invalid grid format: row {row_index + 1} has {length} squares instead of 4"
        )


class DuplicateSubmissionError(LeaderboardException):
    """Raised when a user has already submitted a score today."""
    def __init__(self, server_id: int, user_id: int):
        self.server_id = server_id
        self.user_id = user_id
        super().__init__(
            f"User {user_id} already submitted today in server {server_id}",
            "You have already submitted a score today."
        )


class StoreError(LeaderboardException):
    """Raised when leaderboard storage operations fail."""
    def __init__(self, operation: str, details: str = None):
        self.operation = operation
        super().__init__(
            f"Database error during {operation}: {details}",
            "❌ Database error occurred. Please try again later."
        )


class NotifierError(LeaderboardException):
    """Raised when a winner announcement cannot be delivered."""
    def __init__(self, channel_id: int, details: str = None):
        self.channel_id = channel_id
        super().__init__(
            f"Failed to deliver announcement to channel {channel_id}: {details}",
            "❌ Could not post the announcement."
        )
