"""
Storage Contract

The services reach the database only through this interface. Every state
change to a room is expressed as one ``RoomMutation`` committed against the
version that was read; the adapter applies it indivisibly or raises
``ConcurrencyConflictError``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from ..models import Move, Profile, Room


@dataclass(frozen=True)
class RoomSnapshot:
    """A room as read, together with the version it was read at."""
    version: int
    room: Room


@dataclass
class RoomMutation:
    """
    Everything one atomic unit writes.

    Attributes:
        room: The complete new room state
        moves: Ledger records to append, in move_number order
        stat_increments: uid -> {counter name: increment} applied to profiles
    """
    room: Room
    moves: List[Move] = field(default_factory=list)
    stat_increments: Dict[str, Dict[str, int]] = field(default_factory=dict)


class RoomCodeCollision(Exception):
    """Raised by ``insert_room`` when the code is already in use."""


class Storage(ABC):
    """Abstract storage actor shared by all services."""

    # Rooms

    @abstractmethod
    def read_room(self, code: str) -> Optional[RoomSnapshot]:
        """Return the current snapshot of a room, or None if absent."""

    @abstractmethod
    def insert_room(self, room: Room) -> None:
        """Create a new room document at version 0."""

    @abstractmethod
    def commit_atomic(self, code: str, expected_version: int, mutation: RoomMutation) -> int:
        """
        Apply ``mutation`` if the room is still at ``expected_version``.

        Returns:
            int: The new version

        Raises:
            ConcurrencyConflictError: If the room changed since it was read,
                or a ledger record's move_number is not the next in sequence
        """

    @abstractmethod
    def find_rooms_by_host(self, uid: str) -> List[Room]:
        """All stored rooms owned by ``uid``."""

    @abstractmethod
    def delete_expired_rooms(self, now: datetime) -> int:
        """Remove rooms whose ``expire_at`` has passed, with their moves, and return how many."""

    # Move ledger

    @abstractmethod
    def count_moves(self, code: str) -> int:
        """Number of ledgered moves for a room."""

    @abstractmethod
    def list_moves(self, code: str) -> List[Move]:
        """Ledgered moves for a room in move_number order."""

    # Profiles

    @abstractmethod
    def insert_profile(self, profile: Profile) -> None:
        """
        Create a profile and its nickname reservation as one record.

        Raises:
            NicknameTakenError: If the nickname collides case-insensitively
            AlreadyRegisteredError: If the uid already has a profile
        """

    @abstractmethod
    def find_profile(self, uid: str) -> Optional[Profile]:
        """Look up a profile by uid."""

    @abstractmethod
    def nickname_exists(self, nickname: str) -> bool:
        """Whether a nickname is reserved, ignoring case."""

    def close(self) -> None:
        """Release any underlying connection."""
