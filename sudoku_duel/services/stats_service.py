"""
Statistics Service

Per-player games played / games won counters, updated only when a game
finishes and always inside the finishing move's atomic commit.
"""

from typing import Dict, Optional

from ..errors import ProfileNotFoundError
from ..models import Room, UserStats
from ..storage import RoomMutation, Storage


class StatsService:
    """Builds the counter increments folded into a finishing commit."""

    def __init__(self, storage: Storage):
        self.storage = storage

    @staticmethod
    def finish_increments(room: Room, winner_uid: Optional[str]) -> Dict[str, Dict[str, int]]:
        """Increments for every participant; the winner also gets a win."""
        return {
            uid: {'games_played': 1, 'games_won': 1 if uid == winner_uid else 0}
            for uid in room.players
        }

    def record_finish(self, mutation: RoomMutation, winner_uid: Optional[str]) -> None:
        """Fold the finish increments into ``mutation``."""
        mutation.stat_increments.update(self.finish_increments(mutation.room, winner_uid))

    def get_stats(self, uid: str) -> UserStats:
        profile = self.storage.find_profile(uid)
        if profile is None:
            raise ProfileNotFoundError(uid)
        return profile.stats
