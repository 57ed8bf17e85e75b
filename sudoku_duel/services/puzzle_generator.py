"""
Puzzle Generator

Adapter around the ``py-sudoku`` package plus the normalization the game
service applies to whatever a generator returns.
"""

import logging
import random
from typing import Dict, List, Optional, Tuple

from sudoku import Sudoku

from ..config.game_settings import BLANK, BOARD_SIZE, DIFFICULTIES, DIGITS
from ..utils.game_logger import game_logger

FOREIGN_BLANKS = ('-', '0', '_', ' ')


class SudokuGenerator:
    """Generates 9x9 puzzles with ``py-sudoku``."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate(self, difficulty: str) -> Dict[str, str]:
        """
        Generate a puzzle/solution pair.

        Args:
            difficulty: One of the labels in ``DIFFICULTIES``

        Returns:
            dict with 81-character 'puzzle' ('.' for blanks) and 'solution'
        """
        fraction = DIFFICULTIES[difficulty]
        full = Sudoku(3, seed=self.rng.randrange(2 ** 31)).solve()
        solution = _flatten(full.board)
        puzzle = full.difficulty(fraction)
        return {
            'puzzle': _flatten(puzzle.board),
            'solution': solution,
        }


def _flatten(board: List[List[Optional[int]]]) -> str:
    return ''.join(BLANK if not cell else str(cell) for row in board for cell in row)


def normalize_puzzle(puzzle: str, solution: str) -> Tuple[str, str]:
    """
    Convert foreign blank markers to '.' and check both grids.

    Raises:
        ValueError: If either grid has the wrong length or alphabet
    """
    if not isinstance(puzzle, str) or not isinstance(solution, str):
        raise ValueError("Puzzle and solution must be strings")

    for marker in FOREIGN_BLANKS:
        puzzle = puzzle.replace(marker, BLANK)

    if len(puzzle) != BOARD_SIZE or len(solution) != BOARD_SIZE:
        raise ValueError(
            f"Expected {BOARD_SIZE} cells, got puzzle={len(puzzle)} solution={len(solution)}"
        )

    if any(cell != BLANK and cell not in DIGITS for cell in puzzle):
        raise ValueError("Puzzle contains characters other than '.' and 1-9")

    if any(cell not in DIGITS for cell in solution):
        raise ValueError("Solution must contain only the digits 1-9")

    for cell, expected in zip(puzzle, solution):
        if cell != BLANK and cell != expected:
            raise ValueError("Puzzle clues disagree with the solution")

    return puzzle, solution


def fetch_puzzle(generator, difficulty: str, room_code: Optional[str] = None) -> Tuple[str, str, List[str]]:
    """
    Ask ``generator`` for a puzzle, falling back to an all-blank grid.

    A generator failure does not fail the game start: the room gets a blank
    puzzle and the caller receives a warning describing the degradation.

    Returns:
        Tuple of (puzzle, solution, warnings)
    """
    try:
        result = generator.generate(difficulty)
        puzzle, solution = normalize_puzzle(result['puzzle'], result['solution'])
        return puzzle, solution, []
    except Exception as e:
        warning = f"Puzzle generator failed ({type(e).__name__}: {e}); using a blank board"
        game_logger.log_game_event(
            room_code, 'puzzle_generator_failed', 'system',
            level=logging.WARNING, difficulty=difficulty, error=str(e)
        )
        blank = BLANK * BOARD_SIZE
        return blank, blank, [warning]
