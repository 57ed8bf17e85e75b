"""
Services Package

Contains all business logic and service classes.
"""

from .game_service import GameService
from .lobby_service import LobbyService
from .move_ledger import MoveLedger
from .profile_service import ProfileService
from .puzzle_generator import SudokuGenerator, fetch_puzzle, normalize_puzzle
from .stats_service import StatsService

__all__ = [
    'GameService', 'LobbyService', 'MoveLedger', 'ProfileService',
    'SudokuGenerator', 'fetch_puzzle', 'normalize_puzzle', 'StatsService'
]
