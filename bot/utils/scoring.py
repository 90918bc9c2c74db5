"""
Connections scoring.

Finishing all four categories is worth BASE_SCORE minus one point per guess
row beyond the fourth. An unfinished puzzle earns one point per category
solved. The result is deliberately not clamped, so a very long game can
score zero or less.
"""

from typing import Sequence

from bot.constants import GridConstants, ScoringConstants


def is_solved_row(row: Sequence[int]) -> bool:
    """A row is solved when all of its cells are the same category."""
    return len(row) > 0 and all(cell == row[0] for cell in row)


def calculate_connections_score(grid: Sequence[Sequence[int]]) -> int:
    """
    Score a parsed Connections grid.

    Args:
        grid: Rows of category identifiers, already validated by the parser

    Returns:
        Integer score
    """
    solved_categories = {row[0] for row in grid if is_solved_row(row)}
    success = len(solved_categories)
    rows = len(grid)

    if success == GridConstants.CATEGORY_COUNT:
        return ScoringConstants.BASE_SCORE - rows + success
    return success
