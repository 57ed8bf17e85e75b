"""
MongoDB Storage

Storage actor backed by MongoDB. Rooms live in ``rooms`` keyed by code and
carry a ``version`` counter; a commit is a conditional ``replace_one`` on
``{_id, version}`` run in a multi-document transaction together with the
ledger insert into ``moves`` and the profile stat increments.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from pymongo import ASCENDING, MongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError
from pymongo.server_api import ServerApi

from ..errors import (
    AlreadyRegisteredError,
    CollaboratorFailure,
    ConcurrencyConflictError,
    NicknameTakenError,
)
from ..models import Move, Profile, Room, nickname_key
from ..utils.game_logger import game_logger
from .base import RoomCodeCollision, RoomMutation, RoomSnapshot, Storage


@contextmanager
def _database_errors(operation: str):
    """Report driver failures as ``CollaboratorFailure``."""
    try:
        yield
    except PyMongoError as e:
        game_logger.logger.error(f"MongoDB {operation} failed: {e}")
        raise CollaboratorFailure(f"Storage unavailable during {operation}") from e


class MongoStorage(Storage):
    """
    Storage actor over a MongoDB deployment.

    Transactions require a replica set or sharded cluster (Atlas provides one).
    """

    def __init__(self, client: MongoClient, db_name: str = 'sudoku_duel'):
        """
        Initialize the storage with an already constructed client.

        Args:
            client: MongoDB client created with ``tz_aware=True``
            db_name: Database holding the rooms, moves and profiles collections
        """
        self.client = client
        self.db = client[db_name]
        self.rooms = self.db.rooms
        self.moves = self.db.moves
        self.profiles = self.db.profiles
        self._ensure_indexes()

    @classmethod
    def from_uri(cls, mongo_uri: str, db_name: str = 'sudoku_duel') -> 'MongoStorage':
        """Connect to ``mongo_uri`` and verify the connection with a ping."""
        client = MongoClient(mongo_uri, server_api=ServerApi('1'), tz_aware=True)
        with _database_errors('connect'):
            client.admin.command('ping')
        game_logger.logger.info("Successfully connected to MongoDB")
        return cls(client, db_name)

    def _ensure_indexes(self) -> None:
        with _database_errors('create_index'):
            # Unique nickname reservation travels with the profile document
            self.profiles.create_index("nickname_key", unique=True)

            self.rooms.create_index("host")
            self.rooms.create_index("expire_at", expireAfterSeconds=0)  # TTL index

            self.moves.create_index(
                [("room_code", ASCENDING), ("move_number", ASCENDING)],
                unique=True
            )

    # Rooms

    def read_room(self, code: str) -> Optional[RoomSnapshot]:
        with _database_errors('read_room'):
            doc = self.rooms.find_one({"_id": code})
        if doc is None:
            return None
        room = Room.from_document(doc)
        return RoomSnapshot(version=room.version, room=room)

    def insert_room(self, room: Room) -> None:
        doc = room.to_document()
        doc['version'] = 0
        with _database_errors('insert_room'):
            # The TTL monitor removes rooms but not their moves
            if self.moves.count_documents({"room_code": room.code}, limit=1):
                raise RoomCodeCollision(room.code)
        try:
            with _database_errors('insert_room'):
                self.rooms.insert_one(doc)
        except CollaboratorFailure as e:
            if isinstance(e.__cause__, DuplicateKeyError):
                raise RoomCodeCollision(room.code) from e.__cause__
            raise

    def commit_atomic(self, code: str, expected_version: int, mutation: RoomMutation) -> int:
        new_version = expected_version + 1
        doc = mutation.room.to_document()
        doc['version'] = new_version

        def apply(session):
            result = self.rooms.replace_one(
                {"_id": code, "version": expected_version},
                doc,
                session=session
            )
            if result.matched_count == 0:
                raise ConcurrencyConflictError(code, expected_version)

            for move in mutation.moves:
                self.moves.insert_one(move.to_document(code), session=session)

            for uid, increments in mutation.stat_increments.items():
                self.profiles.update_one(
                    {"_id": uid},
                    {"$inc": {f"stats.{counter}": amount for counter, amount in increments.items()}},
                    session=session
                )

        try:
            with _database_errors('commit_atomic'):
                with self.client.start_session() as session:
                    session.with_transaction(apply)
        except CollaboratorFailure as e:
            # A duplicate move_number means another commit took this sequence slot
            if isinstance(e.__cause__, DuplicateKeyError):
                raise ConcurrencyConflictError(code, expected_version) from e.__cause__
            raise

        return new_version

    def find_rooms_by_host(self, uid: str) -> List[Room]:
        with _database_errors('find_rooms_by_host'):
            return [Room.from_document(doc) for doc in self.rooms.find({"host": uid})]

    def delete_expired_rooms(self, now: datetime) -> int:
        with _database_errors('delete_expired_rooms'):
            codes = [doc["_id"] for doc in self.rooms.find({"expire_at": {"$lte": now}}, {"_id": 1})]
            if not codes:
                return 0
            result = self.rooms.delete_many({"_id": {"$in": codes}, "expire_at": {"$lte": now}})
            self.moves.delete_many({"room_code": {"$in": codes}})
        return result.deleted_count

    # Move ledger

    def count_moves(self, code: str) -> int:
        with _database_errors('count_moves'):
            return self.moves.count_documents({"room_code": code})

    def list_moves(self, code: str) -> List[Move]:
        with _database_errors('list_moves'):
            cursor = self.moves.find({"room_code": code}).sort("move_number", ASCENDING)
            return [Move.from_document(doc) for doc in cursor]

    # Profiles

    def insert_profile(self, profile: Profile) -> None:
        try:
            self.profiles.insert_one(profile.to_document())
        except DuplicateKeyError as e:
            key_pattern = (e.details or {}).get('keyPattern', {})
            if 'nickname_key' in key_pattern:
                raise NicknameTakenError(profile.nickname) from e
            raise AlreadyRegisteredError("Profile already exists", uid=profile.uid) from e
        except PyMongoError as e:
            game_logger.logger.error(f"MongoDB insert_profile failed: {e}")
            raise CollaboratorFailure("Storage unavailable during insert_profile") from e

    def find_profile(self, uid: str) -> Optional[Profile]:
        with _database_errors('find_profile'):
            doc = self.profiles.find_one({"_id": uid})
        return Profile.from_document(doc) if doc else None

    def nickname_exists(self, nickname: str) -> bool:
        with _database_errors('nickname_exists'):
            return self.profiles.count_documents({"nickname_key": nickname_key(nickname)}, limit=1) > 0

    def close(self) -> None:
        """Close the MongoDB connection."""
        if self.client:
            self.client.close()
