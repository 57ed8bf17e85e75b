"""
Game Configuration Constants Module

All game parameters are centralized here: lives, roster bounds, room
lifetimes, host quotas and the word lists used for generated nicknames.
"""

from typing import Dict, Final, Tuple

# Board geometry
BOARD_SIZE: Final[int] = 81
BLANK: Final[str] = '.'
DIGITS: Final[str] = '123456789'

# Players and lives
MAX_LIVES: Final[int] = 5
"""
Lives every player starts a game with. A player reaching zero is eliminated
and the game ends.
"""

MIN_PLAYERS: Final[int] = 2
MAX_PLAYERS: Final[int] = 3

# Room lifetimes
MAX_ACTIVE_ROOMS_PER_HOST: Final[int] = 5
ROOM_TTL_SECONDS: Final[int] = 2 * 60 * 60
FINISHED_ROOM_TTL_SECONDS: Final[int] = 2 * 60 * 60
ROOM_CODE_LENGTH: Final[int] = 6
ROOM_CODE_ALPHABET: Final[str] = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
ROOM_CODE_MAX_ATTEMPTS: Final[int] = 10

# Puzzle difficulty labels accepted by the generator, mapped onto the
# fraction of cells the generator blanks out.
DIFFICULTIES: Final[Dict[str, float]] = {
    'easy': 0.4,
    'medium': 0.5,
    'hard': 0.6,
    'expert': 0.7,
}
DEFAULT_DIFFICULTY: Final[str] = 'easy'

# Nicknames
NICKNAME_MIN_LENGTH: Final[int] = 3
NICKNAME_MAX_LENGTH: Final[int] = 20
NICKNAME_MAX_ATTEMPTS: Final[int] = 10

NICKNAME_ADJECTIVES: Final[Tuple[str, ...]] = (
    'Swift', 'Clever', 'Brave', 'Quiet', 'Lucky', 'Bold', 'Calm', 'Eager',
    'Sharp', 'Witty', 'Sunny', 'Misty', 'Rapid', 'Noble', 'Jolly', 'Keen',
)

NICKNAME_NOUNS: Final[Tuple[str, ...]] = (
    'Tiger', 'Falcon', 'Otter', 'Panda', 'Fox', 'Heron', 'Lynx', 'Badger',
    'Raven', 'Koala', 'Marten', 'Puffin', 'Bison', 'Gecko', 'Wolf', 'Crane',
)


def validate_settings() -> bool:
    """
    Validates that the game constants are mutually consistent.

    Raises:
        ValueError: If any constant is out of range
    """
    if MAX_LIVES < 1:
        raise ValueError("MAX_LIVES must be at least 1")

    if not 2 <= MIN_PLAYERS <= MAX_PLAYERS:
        raise ValueError("Player bounds must satisfy 2 <= MIN_PLAYERS <= MAX_PLAYERS")

    if DEFAULT_DIFFICULTY not in DIFFICULTIES:
        raise ValueError(f"Unknown default difficulty '{DEFAULT_DIFFICULTY}'")

    if len(set(ROOM_CODE_ALPHABET)) != len(ROOM_CODE_ALPHABET):
        raise ValueError("Room code alphabet contains duplicate characters")

    return True


if __name__ == "__main__":

    try:
        validate_settings()
        print(" Game settings validation passed")
    except ValueError as config_error:
        print(f" Configuration validation failed: {config_error}")
        exit(1)
