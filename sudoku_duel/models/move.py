"""
Move Data Model

A move is immutable once written to the ledger.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict


@dataclass(frozen=True)
class Move:
    """One ledgered placement attempt."""
    move_number: int
    player: str  # nickname, display only
    player_uid: str
    position: int
    number_placed: int
    is_valid: bool
    timestamp: datetime
    chosen_next_number: int

    def to_document(self, room_code: str) -> Dict[str, Any]:
        doc = asdict(self)
        doc['room_code'] = room_code
        return doc

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> 'Move':
        return cls(
            move_number=doc['move_number'],
            player=doc['player'],
            player_uid=doc['player_uid'],
            position=doc['position'],
            number_placed=doc['number_placed'],
            is_valid=doc['is_valid'],
            timestamp=doc['timestamp'],
            chosen_next_number=doc['chosen_next_number'],
        )
