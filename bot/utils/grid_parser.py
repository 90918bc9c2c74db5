"""
Connections result grid parser.

Turns the text a player pastes from the game's share button into a grid of
category identifiers:

    Connections
    Puzzle #123
    🟨🟨🟨🟨
    🟩🟦🟩🟩
    🟩🟩🟩🟩
    🟦🟦🟦🟦
    🟪🟪🟪🟪
"""

from typing import List, Tuple

from bot.constants import GridConstants
from bot.utils.leaderboard_exceptions import InvalidSymbol, MalformedRow, TooFewRows

Row = Tuple[int, ...]
Grid = Tuple[Row, ...]


def is_connections_submission(text: str) -> bool:
    """Whether a chat message looks like a pasted Connections result."""
    return bool(text) and text.strip().startswith(GridConstants.SUBMISSION_MARKER)


def _parse_line(line: str) -> Row:
    categories: List[int] = []
    for symbol in line:
        if not symbol.strip():
            continue
        category = GridConstants.CATEGORY_SYMBOLS.get(symbol)
        if category is None:
            raise InvalidSymbol(symbol)
        categories.append(category)
    return tuple(categories)


def parse_connections_grid(text: str) -> Grid:
    """
    Parse a pasted Connections result into a category grid.

    The first two lines are the puzzle header and are always discarded.
    Blank lines are skipped; every other line is one guess.

    Args:
        text: Raw message content

    Returns:
        Tuple of rows, each a tuple of four category identifiers

    Raises:
        InvalidSymbol: A line contains something other than a category square
        TooFewRows: Fewer than four guess rows
        MalformedRow: A row does not hold exactly four squares
    """
    lines = text.strip().split('\n')[GridConstants.HEADER_LINE_COUNT:]

    grid = tuple(_parse_line(line) for line in lines if line.strip())

    if len(grid) < GridConstants.MIN_ROWS:
        raise TooFewRows(len(grid))

    for index, row in enumerate(grid):
        if len(row) != GridConstants.ROW_LENGTH:
            raise MalformedRow(index, len(row))

    return grid
