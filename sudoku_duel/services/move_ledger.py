"""
Move Ledger

Append-only per-room history of moves. Appends only happen as part of a
room's atomic commit; reads here are for display, audit and replay.
"""

from typing import Dict, Iterable, List, Tuple

from ..models import Move, PlayerState
from ..storage import RoomMutation, Storage
from ..utils.helpers import require_text


class MoveLedger:
    """Reads and replays the move history of rooms."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def append_move(self, mutation: RoomMutation, move: Move) -> None:
        """
        Add ``move`` to a pending atomic unit.

        The number must follow the room's move count as read; the storage
        actor re-checks it at commit time.
        """
        game = mutation.room.game
        expected = game.move_count + 1 if game else 1
        if move.move_number != expected:
            raise ValueError(f"Move number {move.move_number} does not follow {expected - 1}")
        mutation.moves.append(move)

    def count_moves(self, room_code: str) -> int:
        return self.storage.count_moves(require_text(room_code, 'room code').upper())

    def list_moves(self, room_code: str) -> List[Move]:
        return self.storage.list_moves(require_text(room_code, 'room code').upper())

    @staticmethod
    def replay(puzzle: str, players: Iterable[PlayerState],
               moves: Iterable[Move], starting_lives: int) -> Tuple[str, Dict[str, int]]:
        """
        Rebuild the board and lives from the starting puzzle and the ledger.

        Args:
            puzzle: The room's initial puzzle
            players: Roster whose lives are reconstructed
            moves: Ledger records in move_number order
            starting_lives: Lives each player began the game with

        Returns:
            Tuple of (board, uid -> lives)
        """
        board = list(puzzle)
        lives = {player.uid: starting_lives for player in players}

        for move in sorted(moves, key=lambda m: m.move_number):
            if move.is_valid:
                board[move.position] = str(move.number_placed)
            else:
                lives[move.player_uid] = max(0, lives[move.player_uid] - 1)

        return ''.join(board), lives
