"""
Lobby Service

Room registry: creates rooms, enforces per-host quotas and expiry, manages
the roster and hands a full room to the game service to start.
"""

import random
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from ..config.game_settings import (
    DEFAULT_DIFFICULTY,
    DIFFICULTIES,
    MAX_ACTIVE_ROOMS_PER_HOST,
    MAX_PLAYERS,
    MIN_PLAYERS,
    ROOM_CODE_ALPHABET,
    ROOM_CODE_LENGTH,
    ROOM_CODE_MAX_ATTEMPTS,
    ROOM_TTL_SECONDS,
)
from ..errors import (
    AlreadyJoinedError,
    AlreadyStartedError,
    CollaboratorFailure,
    QuotaExceededError,
    RoomFullError,
    RoomNotFoundError,
    StateConflictError,
    TooFewPlayersError,
    TooManyPlayersError,
    ValidationError,
)
from ..models import Identity, PlayerState, Room, RoomSettings, RoomStatus, StartResult
from ..storage import RoomCodeCollision, RoomMutation, RoomSnapshot, Storage
from ..utils.game_logger import game_logger
from ..utils.helpers import require_text, utc_now
from .game_service import GameService


class LobbyService:
    """
    Room registry backed by the storage actor.

    Every roster change is one read followed by one version-checked commit;
    a concurrent change surfaces as ``ConcurrencyConflictError``.
    """

    def __init__(self, storage: Storage, game_service: GameService,
                 rng: Optional[random.Random] = None,
                 clock: Callable[[], datetime] = utc_now,
                 min_players: int = MIN_PLAYERS,
                 max_players: int = MAX_PLAYERS):
        self.storage = storage
        self.game_service = game_service
        self.rng = rng or random.SystemRandom()
        self.clock = clock
        self.min_players = min_players
        self.max_players = max_players

    def create_room(self, host: Identity, settings: Optional[RoomSettings] = None) -> str:
        """
        Create a waiting room with ``host`` seated as its first player.

        The quota check reads the host's rooms and then inserts, so two
        simultaneous creations can both pass it; the limit is best-effort.

        Returns:
            str: The new room code

        Raises:
            ValidationError: Missing host identity or malformed settings
            QuotaExceededError: Host already has too many open rooms
        """
        uid = require_text(host.uid, 'uid')
        nickname = require_text(host.nickname, 'nickname')
        settings = self._check_settings(settings or RoomSettings())
        now = self.clock()

        open_rooms = [
            room for room in self.storage.find_rooms_by_host(uid)
            if room.status != RoomStatus.FINISHED and not room.is_expired(now)
        ]
        if len(open_rooms) >= MAX_ACTIVE_ROOMS_PER_HOST:
            raise QuotaExceededError(
                f"You already have {len(open_rooms)} open rooms (limit {MAX_ACTIVE_ROOMS_PER_HOST})",
                open_rooms=len(open_rooms)
            )

        for _ in range(ROOM_CODE_MAX_ATTEMPTS):
            code = self._new_code()
            room = Room(
                code=code,
                host=uid,
                host_nickname=nickname,
                status=RoomStatus.WAITING,
                players={
                    uid: PlayerState(
                        uid=uid,
                        nickname=nickname,
                        lives=self.game_service.max_lives,
                        is_current_player=True,
                        joined_at=now,
                        seat=0,
                    )
                },
                settings=settings,
                created_at=now,
                expire_at=now + timedelta(seconds=ROOM_TTL_SECONDS),
            )
            try:
                self.storage.insert_room(room)
            except RoomCodeCollision:
                continue

            game_logger.log_game_event(code, 'room_created', uid, host_nickname=nickname)
            return code

        raise CollaboratorFailure("Could not allocate a unique room code")

    def get_room(self, room_code: str) -> Room:
        return self._read(room_code).room

    def list_host_rooms(self, uid: str) -> List[Room]:
        """Rooms owned by ``uid`` that have not expired."""
        now = self.clock()
        rooms = self.storage.find_rooms_by_host(require_text(uid, 'uid'))
        return [room for room in rooms if not room.is_expired(now)]

    def join_room(self, room_code: str, identity: Identity) -> Room:
        """
        Seat ``identity`` in a waiting room.

        Raises:
            RoomNotFoundError, AlreadyJoinedError, AlreadyStartedError,
            RoomFullError, ConcurrencyConflictError
        """
        uid = require_text(identity.uid, 'uid')
        nickname = require_text(identity.nickname, 'nickname')
        snapshot = self._read(room_code)
        room = snapshot.room

        if uid in room.players:
            raise AlreadyJoinedError("Already in this room")

        if room.status != RoomStatus.WAITING:
            raise AlreadyStartedError("Game has already started")

        if len(room.players) >= self.max_players:
            raise RoomFullError("Room is full", max_players=self.max_players)

        room.players[uid] = PlayerState(
            uid=uid,
            nickname=nickname,
            lives=self.game_service.max_lives,
            is_current_player=False,
            joined_at=self.clock(),
            seat=max(p.seat for p in room.players.values()) + 1,
        )
        self.storage.commit_atomic(room.code, snapshot.version, RoomMutation(room=room))

        game_logger.log_game_event(room.code, 'player_joined', uid, players=len(room.players))
        return room

    def leave_room(self, room_code: str, uid: str) -> Room:
        """Remove a non-host player from a waiting room."""
        uid = require_text(uid, 'uid')
        snapshot = self._read(room_code)
        room = snapshot.room

        if uid not in room.players:
            raise StateConflictError("Not in this room")

        if uid == room.host:
            raise StateConflictError("The host cannot leave the room")

        if room.status != RoomStatus.WAITING:
            raise AlreadyStartedError("Game has already started")

        del room.players[uid]
        self.storage.commit_atomic(room.code, snapshot.version, RoomMutation(room=room))

        game_logger.log_game_event(room.code, 'player_left', uid, players=len(room.players))
        return room

    def start_game(self, room_code: str, difficulty: Optional[str] = None,
                   requested_by: Optional[str] = None) -> StartResult:
        """
        Start the game in a waiting room.

        Args:
            room_code: Room to start
            difficulty: Difficulty label; defaults to the room's setting
            requested_by: uid of the caller; when given it must be the host

        Returns:
            StartResult with the started room and any generator warnings

        Raises:
            ValidationError, RoomNotFoundError, AlreadyStartedError,
            TooFewPlayersError, TooManyPlayersError, ConcurrencyConflictError
        """
        if difficulty is not None:
            _check_difficulty(difficulty)

        snapshot = self._read(room_code)
        room = snapshot.room

        if requested_by is not None and requested_by != room.host:
            raise StateConflictError("Only the host can start the game")

        if room.status != RoomStatus.WAITING or (room.game and room.game.started):
            raise AlreadyStartedError("Game has already started")

        if len(room.players) < self.min_players:
            raise TooFewPlayersError(
                f"At least {self.min_players} players are needed to start",
                players=len(room.players)
            )

        if len(room.players) > self.max_players:
            raise TooManyPlayersError(
                f"At most {self.max_players} players can play",
                players=len(room.players)
            )

        difficulty = difficulty or room.settings.difficulty or DEFAULT_DIFFICULTY
        warnings = self.game_service.begin_game(room, difficulty)
        self.storage.commit_atomic(room.code, snapshot.version, RoomMutation(room=room))

        game_logger.log_game_event(
            room.code, 'game_started', requested_by or room.host,
            difficulty=difficulty, players=len(room.players), degraded=bool(warnings)
        )
        return StartResult(room=room, warnings=warnings)

    def cleanup_expired_rooms(self) -> int:
        """Delete rooms past their ``expire_at`` and return how many were removed."""
        removed = self.storage.delete_expired_rooms(self.clock())
        if removed:
            game_logger.log_game_event(None, 'rooms_expired', 'system', removed=removed)
        return removed

    @staticmethod
    def _check_settings(settings: RoomSettings) -> RoomSettings:
        """Reject settings a game could not be started with."""
        if settings.difficulty is not None:
            _check_difficulty(settings.difficulty)

        time_limit = settings.time_limit
        if time_limit is not None and (isinstance(time_limit, bool) or not isinstance(time_limit, int) or time_limit <= 0):
            raise ValidationError("time_limit must be a positive integer")

        return settings

    def _read(self, room_code: str) -> RoomSnapshot:
        room_code = require_text(room_code, 'room code').upper()
        snapshot = self.storage.read_room(room_code)
        if snapshot is None or snapshot.room.is_expired(self.clock()):
            raise RoomNotFoundError(room_code)
        return snapshot

    def _new_code(self) -> str:
        return ''.join(self.rng.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


def _check_difficulty(difficulty) -> None:
    if not isinstance(difficulty, str) or difficulty not in DIFFICULTIES:
        raise ValidationError(f"Unknown difficulty '{difficulty}'", allowed=sorted(DIFFICULTIES))
