"""
Storage Package

Storage actors implementing the read / atomic-commit contract the services
depend on.
"""

from .base import RoomCodeCollision, RoomMutation, RoomSnapshot, Storage
from .memory import MemoryStorage
from .mongo import MongoStorage

__all__ = [
    'RoomCodeCollision', 'RoomMutation', 'RoomSnapshot', 'Storage',
    'MemoryStorage', 'MongoStorage'
]
