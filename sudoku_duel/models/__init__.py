"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .game import GameState, MoveResult, PlayerState, Room, RoomSettings, RoomStatus, StartResult
from .move import Move
from .user import Identity, Profile, UserStats, nickname_key

__all__ = [
    'GameState', 'MoveResult', 'PlayerState', 'Room', 'RoomSettings', 'RoomStatus', 'StartResult',
    'Move',
    'Identity', 'Profile', 'UserStats', 'nickname_key'
]
