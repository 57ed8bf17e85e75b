import random
import threading
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from sudoku_duel import Services, create_app
from sudoku_duel.config import TestingConfig
from sudoku_duel.models import PlayerState, Room, RoomSettings, RoomStatus
from sudoku_duel.services import GameService, LobbyService, ProfileService
from sudoku_duel.storage import MemoryStorage


PUZZLE = (
    "53..7...."
    "6..195..."
    ".98....6."
    "8...6...3"
    "4..8.3..1"
    "7...2...6"
    ".6....28."
    "...419..5"
    "....8..79"
)

SOLUTION = (
    "534678912"
    "672195348"
    "198342567"
    "859761423"
    "426853791"
    "713924856"
    "961537284"
    "287419635"
    "345286179"
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """Controllable time source."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


class ScriptedRandom(random.Random):
    """Random source whose ``randint`` replays queued numerals."""

    def __init__(self, default=5):
        super().__init__(0)
        self.queue = []
        self.default = default

    def randint(self, a, b):
        if self.queue:
            return self.queue.pop(0)
        return self.default


class StubGenerator:
    def __init__(self, puzzle=PUZZLE, solution=SOLUTION):
        self.puzzle = puzzle
        self.solution = solution
        self.calls = []

    def generate(self, difficulty):
        self.calls.append(difficulty)
        return {'puzzle': self.puzzle, 'solution': self.solution}


class BarrierStorage(MemoryStorage):
    """Holds every reader at a barrier so concurrent callers share one snapshot."""

    def __init__(self, parties=2):
        super().__init__()
        self.barrier = None
        self.parties = parties

    def arm(self):
        self.barrier = threading.Barrier(self.parties, timeout=5)

    def read_room(self, code):
        snapshot = super().read_room(code)
        if self.barrier is not None:
            self.barrier.wait()
        return snapshot


def run_concurrently(*calls):
    """Run callables in threads; return a list of (result, error) per call."""
    outcomes = [None] * len(calls)

    def runner(index, call):
        try:
            outcomes[index] = (call(), None)
        except Exception as e:
            outcomes[index] = (None, e)

    threads = [threading.Thread(target=runner, args=(i, c)) for i, c in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(10)
    return outcomes


def blank_with(room, digit):
    """First blank cell whose solution is ``digit``."""
    game = room.game
    for index, cell in enumerate(game.board):
        if cell == '.' and game.solution[index] == str(digit):
            return index
    raise AssertionError(f"No blank cell left for {digit}")


def blank_without(room, digit):
    """First blank cell whose solution is not ``digit``."""
    game = room.game
    for index, cell in enumerate(game.board):
        if cell == '.' and game.solution[index] != str(digit):
            return index
    raise AssertionError(f"No blank cell left that rejects {digit}")


def make_room(code='ABC234', host='uid-host', expire_in=3600):
    """Waiting room with only its host seated."""
    return Room(
        code=code,
        host=host,
        host_nickname='Host',
        status=RoomStatus.WAITING,
        players={
            host: PlayerState(uid=host, nickname='Host', lives=5,
                              is_current_player=True, joined_at=NOW, seat=0)
        },
        settings=RoomSettings(),
        created_at=NOW,
        expire_at=NOW + timedelta(seconds=expire_in),
    )


def build_test_services(storage, numbers, clock, generator=None, **game_options):
    games = GameService(storage, generator=generator or StubGenerator(), rng=numbers,
                        clock=clock, **game_options)
    lobby = LobbyService(storage, games, rng=random.Random(42), clock=clock)
    profiles = ProfileService(storage, rng=random.Random(7), clock=clock)
    return Services(storage=storage, profiles=profiles, lobby=lobby, games=games)


@pytest.fixture()
def clock():
    return FixedClock(NOW)


@pytest.fixture()
def numbers():
    return ScriptedRandom()


@pytest.fixture()
def storage():
    return MemoryStorage()


@pytest.fixture()
def generator():
    return StubGenerator()


@pytest.fixture()
def services(storage, numbers, clock, generator):
    return build_test_services(storage, numbers, clock, generator)


@pytest.fixture()
def alice(services):
    return services.profiles.reserve_nickname('uid-alice', 'Alice')


@pytest.fixture()
def bob(services):
    return services.profiles.reserve_nickname('uid-bob', 'Bob')


@pytest.fixture()
def carol(services):
    return services.profiles.reserve_nickname('uid-carol', 'Carol')


@pytest.fixture()
def two_player_room(services, alice, bob):
    code = services.lobby.create_room(alice)
    services.lobby.join_room(code, bob)
    return code


@pytest.fixture()
def started_room(services, two_player_room):
    services.lobby.start_game(two_player_room, 'easy')
    return two_player_room


@pytest.fixture()
def flask_app(services):
    return create_app(TestingConfig, services)


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def auth_header():
    def make(uid, email=None):
        claims = {'sub': uid}
        if email:
            claims['email'] = email
        token = jwt.encode(claims, TestingConfig.JWT_SECRET, algorithm='HS256')
        return {'Authorization': f'Bearer {token}'}
    return make
