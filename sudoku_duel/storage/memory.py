"""
In-Memory Storage

Dictionary-backed storage actor. A single lock serializes commits so the
version check and the writes happen as one step, the same guarantee the
MongoDB adapter gets from its transactions.
"""

import copy
import threading
from datetime import datetime
from typing import Dict, List, Optional

from ..errors import AlreadyRegisteredError, ConcurrencyConflictError, NicknameTakenError
from ..models import Move, Profile, Room, nickname_key
from .base import RoomCodeCollision, RoomMutation, RoomSnapshot, Storage


class MemoryStorage(Storage):
    """Storage actor keeping rooms, moves and profiles in process memory."""

    def __init__(self):
        self._lock = threading.Lock()
        self._rooms: Dict[str, Room] = {}
        self._moves: Dict[str, List[Move]] = {}
        self._profiles: Dict[str, Profile] = {}
        self._nicknames: Dict[str, str] = {}  # nickname key -> uid

    def read_room(self, code: str) -> Optional[RoomSnapshot]:
        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                return None
            return RoomSnapshot(version=room.version, room=copy.deepcopy(room))

    def insert_room(self, room: Room) -> None:
        with self._lock:
            if room.code in self._rooms:
                raise RoomCodeCollision(room.code)
            stored = copy.deepcopy(room)
            stored.version = 0
            self._rooms[room.code] = stored
            self._moves[room.code] = []

    def commit_atomic(self, code: str, expected_version: int, mutation: RoomMutation) -> int:
        with self._lock:
            current = self._rooms.get(code)
            if current is None or current.version != expected_version:
                raise ConcurrencyConflictError(code, expected_version)

            ledger = self._moves.setdefault(code, [])
            for offset, move in enumerate(mutation.moves):
                if move.move_number != len(ledger) + offset + 1:
                    raise ConcurrencyConflictError(code, expected_version)

            stored = copy.deepcopy(mutation.room)
            stored.version = expected_version + 1
            self._rooms[code] = stored
            ledger.extend(mutation.moves)

            for uid, increments in mutation.stat_increments.items():
                profile = self._profiles.get(uid)
                if profile is None:
                    continue
                for counter, amount in increments.items():
                    setattr(profile.stats, counter, getattr(profile.stats, counter) + amount)

            return stored.version

    def find_rooms_by_host(self, uid: str) -> List[Room]:
        with self._lock:
            return [copy.deepcopy(room) for room in self._rooms.values() if room.host == uid]

    def delete_expired_rooms(self, now: datetime) -> int:
        with self._lock:
            expired = [code for code, room in self._rooms.items() if room.expire_at <= now]
            for code in expired:
                del self._rooms[code]
                self._moves.pop(code, None)
            return len(expired)

    def count_moves(self, code: str) -> int:
        with self._lock:
            return len(self._moves.get(code, []))

    def list_moves(self, code: str) -> List[Move]:
        with self._lock:
            return list(self._moves.get(code, []))

    def insert_profile(self, profile: Profile) -> None:
        key = nickname_key(profile.nickname)
        with self._lock:
            if profile.uid in self._profiles:
                raise AlreadyRegisteredError("Profile already exists", uid=profile.uid)
            if key in self._nicknames:
                raise NicknameTakenError(profile.nickname)
            self._profiles[profile.uid] = copy.deepcopy(profile)
            self._nicknames[key] = profile.uid

    def find_profile(self, uid: str) -> Optional[Profile]:
        with self._lock:
            profile = self._profiles.get(uid)
            return copy.deepcopy(profile) if profile else None

    def nickname_exists(self, nickname: str) -> bool:
        with self._lock:
            return nickname_key(nickname) in self._nicknames
