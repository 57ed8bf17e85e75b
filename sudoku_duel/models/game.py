"""
Game Data Models

Contains the room, roster and sudoku game state structures, plus their
conversion to and from stored documents.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .move import Move


class RoomStatus(Enum):
    """Room lifecycle status. Never transitions back to WAITING."""
    WAITING = "waiting"
    ACTIVE = "active"
    FINISHED = "finished"


@dataclass
class PlayerState:
    """Per-player roster entry."""
    uid: str
    nickname: str
    lives: int
    is_current_player: bool
    joined_at: datetime
    seat: int


@dataclass
class RoomSettings:
    """Settings fixed when the room is created."""
    difficulty: Optional[str] = None
    time_limit: Optional[int] = None
    private_game: bool = False


@dataclass
class GameState:
    """Server-side sudoku game state."""
    started: bool
    puzzle: str
    solution: str
    board: str
    current_number: int
    started_at: datetime
    last_move_by: Optional[str] = None
    winner: Optional[str] = None  # uid of the winner once finished
    move_count: int = 0
    finished_at: Optional[datetime] = None


@dataclass
class Room:
    """One match instance, keyed by its code."""
    code: str
    host: str
    host_nickname: str
    status: RoomStatus
    players: Dict[str, PlayerState]
    settings: RoomSettings
    created_at: datetime
    expire_at: datetime
    game: Optional[GameState] = None
    version: int = 0

    def ordered_players(self) -> List[PlayerState]:
        """Players in join order, independent of mapping order."""
        return sorted(self.players.values(), key=lambda p: (p.joined_at, p.seat))

    def current_player(self) -> Optional[PlayerState]:
        for player in self.ordered_players():
            if player.is_current_player:
                return player
        return None

    def next_player_after(self, uid: str) -> PlayerState:
        """The player following ``uid`` in join order, wrapping around."""
        order = self.ordered_players()
        index = [p.uid for p in order].index(uid)
        return order[(index + 1) % len(order)]

    def is_expired(self, now: datetime) -> bool:
        return self.expire_at <= now

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the stored document shape (``_id`` is the room code)."""
        doc = asdict(self)
        doc['_id'] = self.code
        doc['status'] = self.status.value
        return doc

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> 'Room':
        players = {
            uid: PlayerState(**player)
            for uid, player in doc.get('players', {}).items()
        }
        game = GameState(**doc['game']) if doc.get('game') else None
        return cls(
            code=doc['code'],
            host=doc['host'],
            host_nickname=doc['host_nickname'],
            status=RoomStatus(doc['status']),
            players=players,
            settings=RoomSettings(**doc.get('settings', {})),
            created_at=doc['created_at'],
            expire_at=doc['expire_at'],
            game=game,
            version=doc.get('version', 0),
        )


@dataclass
class MoveResult:
    """Outcome of one applied move, returned to the caller."""
    is_correct: bool
    move: Move
    game_over: bool = False
    winner: Optional[str] = None


@dataclass
class StartResult:
    """Outcome of starting a game."""
    room: Room
    warnings: List[str] = field(default_factory=list)
