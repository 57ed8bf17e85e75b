import re

import pytest

from sudoku_duel.errors import AlreadyRegisteredError, NicknameTakenError, ValidationError
from sudoku_duel.services import ProfileService
from sudoku_duel.storage import MemoryStorage


def test_reserve_nickname_creates_profile(services):
    identity = services.profiles.reserve_nickname('uid-1', '  Sudoku_Fan ', email='fan@example.com')
    assert identity.uid == 'uid-1'
    assert identity.nickname == 'Sudoku_Fan'

    profile = services.profiles.lookup_profile('uid-1')
    assert profile.nickname == 'Sudoku_Fan'
    assert profile.email == 'fan@example.com'
    assert profile.stats.games_played == 0
    assert profile.stats.games_won == 0


def test_nickname_collision_is_case_insensitive(services, alice):
    with pytest.raises(NicknameTakenError):
        services.profiles.reserve_nickname('uid-other', 'ALICE')
    # Neither half of the reservation was written
    assert services.profiles.lookup_profile('uid-other') is None
    assert services.storage.find_profile('uid-alice').nickname == 'Alice'


def test_uid_can_only_register_once(services, alice):
    with pytest.raises(AlreadyRegisteredError):
        services.profiles.reserve_nickname('uid-alice', 'AliceAgain')
    assert not services.storage.nickname_exists('AliceAgain')


@pytest.mark.parametrize('nickname', ['', '   ', 'ab', 'x' * 21, 'bad name', 'semi;colon', None])
def test_invalid_nicknames_are_rejected(services, nickname):
    with pytest.raises(ValidationError):
        services.profiles.reserve_nickname('uid-1', nickname)


def test_blank_uid_is_rejected(services):
    with pytest.raises(ValidationError):
        services.profiles.reserve_nickname('  ', 'ValidName')


def test_lookup_missing_profile_returns_none(services):
    assert services.profiles.lookup_profile('nobody') is None


def test_generated_nickname_shape(services):
    nickname = services.profiles.generate_unique_nickname()
    assert re.match(r'^[A-Z][a-z]+[A-Z][a-z]+\d{3}$', nickname)
    # Generated names always pass validation
    assert services.profiles.validate_nickname(nickname) == nickname


def test_generated_nickname_falls_back_to_time(clock):
    class CrowdedStorage(MemoryStorage):
        def nickname_exists(self, nickname):
            return True

    profiles = ProfileService(CrowdedStorage(), clock=clock)
    expected = f"Player{int(clock.now.timestamp() * 1000)}"
    assert profiles.generate_unique_nickname() == expected


def test_ensure_profile_creates_once(services):
    first = services.profiles.ensure_profile('uid-new')
    second = services.profiles.ensure_profile('uid-new')
    assert first == second
    assert services.storage.nickname_exists(first.nickname)
