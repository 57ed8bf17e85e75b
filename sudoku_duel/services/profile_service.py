"""
Profile Service

Identity and roster ledger: reserves unique nicknames for authenticated
uids. Credentials are handled by the external identity provider.
"""

import random
import re
from datetime import datetime
from typing import Callable, Optional

from ..config.game_settings import (
    NICKNAME_ADJECTIVES,
    NICKNAME_MAX_ATTEMPTS,
    NICKNAME_MAX_LENGTH,
    NICKNAME_MIN_LENGTH,
    NICKNAME_NOUNS,
)
from ..errors import NicknameTakenError, ValidationError
from ..models import Identity, Profile
from ..storage import Storage
from ..utils.game_logger import game_logger
from ..utils.helpers import require_text, utc_now

NICKNAME_PATTERN = re.compile(r'^[A-Za-z0-9_]+$')


class ProfileService:
    """
    Profile service for nickname reservation and lookup.
    """

    def __init__(self, storage: Storage,
                 rng: Optional[random.Random] = None,
                 clock: Callable[[], datetime] = utc_now):
        """
        Args:
            storage: Storage actor holding the profiles
            rng: Random source for generated nicknames
            clock: Returns the current UTC time
        """
        self.storage = storage
        self.rng = rng or random.Random()
        self.clock = clock

    def validate_nickname(self, nickname: str) -> str:
        """Strip and validate a nickname, returning the cleaned value."""
        nickname = require_text(nickname, 'nickname')

        if not NICKNAME_MIN_LENGTH <= len(nickname) <= NICKNAME_MAX_LENGTH:
            raise ValidationError(
                f"Nickname must be {NICKNAME_MIN_LENGTH}-{NICKNAME_MAX_LENGTH} characters long"
            )

        if not NICKNAME_PATTERN.match(nickname):
            raise ValidationError("Nickname may contain only letters, digits and underscores")

        return nickname

    def reserve_nickname(self, uid: str, nickname: str, email: Optional[str] = None) -> Identity:
        """
        Create the profile for ``uid`` holding ``nickname``.

        The profile and the reservation are one stored record, so a failure
        can never leave one without the other.

        Raises:
            ValidationError: Malformed uid or nickname
            NicknameTakenError: Nickname already reserved (ignoring case)
            AlreadyRegisteredError: ``uid`` already has a profile
        """
        uid = require_text(uid, 'uid')
        nickname = self.validate_nickname(nickname)

        profile = Profile(uid=uid, nickname=nickname, email=email, created_at=self.clock())
        self.storage.insert_profile(profile)

        game_logger.log_game_event(None, 'nickname_reserved', uid, nickname=nickname)
        return profile.identity

    def lookup_profile(self, uid: str) -> Optional[Profile]:
        return self.storage.find_profile(require_text(uid, 'uid'))

    def generate_unique_nickname(self) -> str:
        """
        Pick an unused adjective+noun+3-digit nickname.

        After ``NICKNAME_MAX_ATTEMPTS`` collisions, falls back to a nickname
        derived from the current time in milliseconds.
        """
        for _ in range(NICKNAME_MAX_ATTEMPTS):
            candidate = "{}{}{:03d}".format(
                self.rng.choice(NICKNAME_ADJECTIVES),
                self.rng.choice(NICKNAME_NOUNS),
                self.rng.randrange(1000),
            )
            if not self.storage.nickname_exists(candidate):
                return candidate

        return self._time_derived_nickname()

    def _time_derived_nickname(self) -> str:
        return f"Player{int(self.clock().timestamp() * 1000)}"

    def ensure_profile(self, uid: str, email: Optional[str] = None) -> Identity:
        """Return the identity for ``uid``, creating a generated profile on first use."""
        profile = self.lookup_profile(uid)
        if profile:
            return profile.identity

        # A generated name can still lose a race with another reservation
        for _ in range(NICKNAME_MAX_ATTEMPTS):
            try:
                return self.reserve_nickname(uid, self.generate_unique_nickname(), email)
            except NicknameTakenError:
                continue

        return self.reserve_nickname(uid, self._time_derived_nickname(), email)