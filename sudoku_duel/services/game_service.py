"""
Game Service

Contains the turn-based sudoku game state machine: starting a game, applying
moves, rotating turns, tracking lives and deciding the winner.
"""

import logging
import random
from dataclasses import asdict
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from ..config.game_settings import BLANK, BOARD_SIZE, DIGITS, FINISHED_ROOM_TTL_SECONDS, MAX_LIVES
from ..errors import (
    CellAlreadyFilledError,
    ConcurrencyConflictError,
    GameNotStartedError,
    NotYourTurnError,
    RoomNotFoundError,
    StaleRequestError,
    ValidationError,
)
from ..models import GameState, Move, MoveResult, PlayerState, Room, RoomStatus
from ..storage import RoomMutation, Storage
from ..utils.game_logger import game_logger
from ..utils.helpers import require_text, utc_now
from .move_ledger import MoveLedger
from .puzzle_generator import SudokuGenerator, fetch_puzzle
from .stats_service import StatsService


class GameService:
    """
    Core game service for shared-board sudoku rooms.

    This class handles:
    - Attaching a generated puzzle to a room when its game starts
    - Move validation, application and turn rotation
    - Life tracking, elimination and win detection
    - Recording each move and, on finish, the player statistics in the same
      atomic commit as the room update
    """

    def __init__(self, storage: Storage,
                 generator=None,
                 rng: Optional[random.Random] = None,
                 clock: Callable[[], datetime] = utc_now,
                 max_lives: int = MAX_LIVES,
                 exclude_exhausted_numbers: bool = False):
        """
        Args:
            storage: Storage actor holding rooms, moves and profiles
            generator: Object with ``generate(difficulty)``; defaults to py-sudoku
            rng: Random source for the numeral drawn each turn
            clock: Returns the current UTC time
            max_lives: Lives each player starts a game with
            exclude_exhausted_numbers: Skip numerals whose cells are all filled
                when drawing the next numeral
        """
        self.storage = storage
        self.rng = rng or random.Random()
        self.generator = generator or SudokuGenerator(self.rng)
        self.clock = clock
        self.max_lives = max_lives
        self.exclude_exhausted_numbers = exclude_exhausted_numbers
        self.ledger = MoveLedger(storage)
        self.stats = StatsService(storage)

    def begin_game(self, room: Room, difficulty: str) -> List[str]:
        """
        Attach a new game to ``room`` in place. The caller commits the room.

        Args:
            room: Room read inside the caller's atomic unit
            difficulty: Difficulty label passed to the generator

        Returns:
            List[str]: Warnings for the caller (e.g. generator fallback)
        """
        puzzle, solution, warnings = fetch_puzzle(self.generator, difficulty, room.code)

        for player in room.players.values():
            player.lives = self.max_lives
            player.is_current_player = player.uid == room.host

        room.status = RoomStatus.ACTIVE
        room.settings.difficulty = difficulty
        room.game = GameState(
            started=True,
            puzzle=puzzle,
            solution=solution,
            board=puzzle,
            current_number=self._draw_number(puzzle, solution),
            started_at=self.clock(),
            last_move_by=None,
            winner=None,
            move_count=0,
        )
        return warnings

    def apply_move(self, room_code: str, uid: str, position: int,
                   expected_move_number: Optional[int] = None) -> MoveResult:
        """
        Place the current numeral at ``position`` for player ``uid``.

        Args:
            room_code: Room to play in
            uid: Acting player's uid
            position: Cell index 0-80, row major
            expected_move_number: Move number the client believes this move
                will receive; a mismatch rejects a re-submitted move

        Returns:
            MoveResult with ``is_correct`` and the ledgered move

        Raises:
            ValidationError, RoomNotFoundError, GameNotStartedError,
            StaleRequestError, NotYourTurnError, CellAlreadyFilledError,
            ConcurrencyConflictError
        """
        room_code = require_text(room_code, 'room code').upper()
        uid = require_text(uid, 'uid')
        if isinstance(position, bool) or not isinstance(position, int) or not 0 <= position < BOARD_SIZE:
            raise ValidationError(f"Position must be an integer between 0 and {BOARD_SIZE - 1}")

        snapshot = self.storage.read_room(room_code)
        now = self.clock()
        if snapshot is None or snapshot.room.is_expired(now):
            raise RoomNotFoundError(room_code)

        room = snapshot.room
        game = room.game
        if game is None or not game.started:
            raise GameNotStartedError("Game has not started")

        move_number = game.move_count + 1
        if expected_move_number is not None and expected_move_number != move_number:
            raise StaleRequestError(expected_move_number, move_number)

        if room.status != RoomStatus.ACTIVE:
            raise GameNotStartedError("Game is already finished")

        player = room.players.get(uid)
        if player is None or not player.is_current_player:
            raise NotYourTurnError("It is not your turn")

        if game.board[position] != BLANK:
            raise CellAlreadyFilledError(f"Cell {position} is already filled", position=position)

        number = game.current_number
        is_correct = game.solution[position] == str(number)

        # Wrong guesses cost a life and leave the cell blank for a later turn
        if is_correct:
            game.board = game.board[:position] + str(number) + game.board[position + 1:]
        else:
            player.lives = max(0, player.lives - 1)

        next_player = room.next_player_after(uid)
        for other in room.players.values():
            other.is_current_player = other.uid == next_player.uid

        next_number = self._draw_number(game.board, game.solution)
        game.current_number = next_number
        game.last_move_by = uid

        winner = None
        if player.lives == 0:
            winner = next_player.uid
        elif BLANK not in game.board:
            winner = self._leader(room).uid

        move = Move(
            move_number=move_number,
            player=player.nickname,
            player_uid=uid,
            position=position,
            number_placed=number,
            is_valid=is_correct,
            timestamp=now,
            chosen_next_number=next_number,
        )
        mutation = RoomMutation(room=room)
        self.ledger.append_move(mutation, move)
        game.move_count = move_number

        if winner is not None:
            self._finish(room, winner, now)
            self.stats.record_finish(mutation, winner)

        try:
            self.storage.commit_atomic(room_code, snapshot.version, mutation)
        except ConcurrencyConflictError:
            game_logger.log_game_event(
                room_code, 'move_conflict', uid, level=logging.WARNING,
                move_number=move_number, position=position
            )
            raise

        game_logger.log_game_event(
            room_code, 'move_applied', uid,
            move_number=move_number, position=position,
            number_placed=number, is_valid=is_correct, lives=player.lives
        )
        if winner is not None:
            if player.lives == 0:
                game_logger.log_game_event(room_code, 'player_eliminated', uid)
            game_logger.log_game_event(
                room_code, 'game_finished', 'system',
                winner=winner, moves=move_number
            )

        return MoveResult(is_correct=is_correct, move=move,
                          game_over=winner is not None, winner=winner)

    def check_game_over(self, room: Room) -> Optional[str]:
        """
        Read-side game-over query.

        Returns:
            The winner's nickname, or None while the game is undecided. A
            recorded winner is authoritative; otherwise any player at zero
            lives or a full board ends the game in favour of the player with
            the most lives (first in join order on ties).
        """
        game = room.game
        if game is None or not game.started:
            return None

        if game.winner is not None and game.winner in room.players:
            return room.players[game.winner].nickname

        players = room.ordered_players()
        if any(p.lives <= 0 for p in players) or BLANK not in game.board:
            return self._leader(room).nickname
        return None

    def public_state(self, room: Room) -> Dict[str, Any]:
        """Room as seen by clients; the solution stays hidden until the game ends."""
        doc = room.to_document()
        doc.pop('_id', None)
        doc['players'] = [asdict(p) for p in room.ordered_players()]

        game = doc.get('game')
        if game is not None:
            if room.status != RoomStatus.FINISHED:
                game['solution'] = None
            game['next_move_number'] = room.game.move_count + 1
        doc['winner_nickname'] = self.check_game_over(room)
        return doc

    def _finish(self, room: Room, winner_uid: str, now: datetime) -> None:
        room.status = RoomStatus.FINISHED
        room.game.winner = winner_uid
        room.game.finished_at = now
        room.expire_at = now + timedelta(seconds=FINISHED_ROOM_TTL_SECONDS)
        for player in room.players.values():
            player.is_current_player = False

    @staticmethod
    def _leader(room: Room) -> PlayerState:
        return max(room.ordered_players(), key=lambda p: p.lives)

    def _draw_number(self, board: str, solution: str) -> int:
        """Draw the numeral for the next turn, uniformly from 1-9."""
        if self.exclude_exhausted_numbers:
            remaining = sorted({
                int(answer) for cell, answer in zip(board, solution)
                if cell == BLANK and answer in DIGITS
            })
            if remaining:
                return self.rng.choice(remaining)
        return self.rng.randint(1, 9)
