"""
User Data Models

Contains identity and profile data structures.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from datetime import datetime


@dataclass
class UserStats:
    """User statistics data model."""
    games_played: int = 0
    games_won: int = 0


@dataclass(frozen=True)
class Identity:
    """An authenticated player: canonical uid plus display nickname."""
    uid: str
    nickname: str


@dataclass
class Profile:
    """Stored profile. The nickname reservation lives in the same document."""
    uid: str
    nickname: str
    stats: UserStats = field(default_factory=UserStats)
    email: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def identity(self) -> Identity:
        return Identity(uid=self.uid, nickname=self.nickname)

    def to_document(self) -> Dict[str, Any]:
        return {
            '_id': self.uid,
            'uid': self.uid,
            'nickname': self.nickname,
            'nickname_key': nickname_key(self.nickname),
            'email': self.email,
            'created_at': self.created_at,
            'stats': {
                'games_played': self.stats.games_played,
                'games_won': self.stats.games_won,
            },
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> 'Profile':
        stats = doc.get('stats') or {}
        return cls(
            uid=doc['uid'],
            nickname=doc['nickname'],
            stats=UserStats(
                games_played=stats.get('games_played', 0),
                games_won=stats.get('games_won', 0),
            ),
            email=doc.get('email'),
            created_at=doc.get('created_at'),
        )


def nickname_key(nickname: str) -> str:
    """Case-insensitive uniqueness key for a nickname."""
    return nickname.strip().casefold()
