"""
Error Types

Every failure a service can report is one of the classes below. Controllers
translate them into JSON error responses; the ``http_status`` and
``retryable`` attributes drive that translation.
"""

from typing import Any, Dict, Optional


class ArenaError(Exception):
    """Base class for all errors raised by the game services."""

    http_status = 500
    retryable = False

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def code(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            'success': False,
            'error': self.message,
            'code': self.code,
            'retryable': self.retryable,
        }
        if self.details:
            payload['details'] = self.details
        return payload


class ValidationError(ArenaError):
    """Malformed input. Never retried; the caller must fix the request."""
    http_status = 400


class NotFoundError(ArenaError):
    http_status = 404


class RoomNotFoundError(NotFoundError):
    def __init__(self, code: str):
        super().__init__(f"Room '{code}' not found", room_code=code)


class ProfileNotFoundError(NotFoundError):
    def __init__(self, uid: str):
        super().__init__("Profile not found", uid=uid)


class StateConflictError(ArenaError):
    """The request is well formed but the current state does not allow it."""
    http_status = 409


class NicknameTakenError(StateConflictError):
    def __init__(self, nickname: str):
        super().__init__(f"Nickname '{nickname}' is already taken", nickname=nickname)


class AlreadyRegisteredError(StateConflictError):
    pass


class QuotaExceededError(StateConflictError):
    pass


class AlreadyJoinedError(StateConflictError):
    pass


class RoomFullError(StateConflictError):
    pass


class AlreadyStartedError(StateConflictError):
    pass


class TooFewPlayersError(StateConflictError):
    pass


class TooManyPlayersError(StateConflictError):
    pass


class GameNotStartedError(StateConflictError):
    pass


class NotYourTurnError(StateConflictError):
    pass


class CellAlreadyFilledError(StateConflictError):
    pass


class StaleRequestError(StateConflictError):
    """The client's expected move number no longer matches the ledger."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Expected move number {expected} but the next move is {actual}",
            expected_move_number=expected,
            next_move_number=actual,
        )


class ConcurrencyConflictError(ArenaError):
    """An atomic commit lost a race. Safe to retry from a fresh read."""
    http_status = 409
    retryable = True

    def __init__(self, code: str, expected_version: Optional[int] = None):
        super().__init__(
            f"Room '{code}' was modified concurrently",
            room_code=code,
            expected_version=expected_version,
        )


class CollaboratorFailure(ArenaError):
    """Storage or another external collaborator is unavailable."""
    http_status = 503
