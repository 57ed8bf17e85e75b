"""
Helper Functions

Contains utility functions used throughout the application.
"""

from datetime import datetime, timezone
from typing import Any

from flask import current_app, jsonify, request

from ..errors import ArenaError, ValidationError
from .game_logger import game_logger


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def require_text(value: Any, field_name: str) -> str:
    """
    Return ``value`` stripped, rejecting missing or blank input.

    Raises:
        ValidationError: If ``value`` is not a non-empty string
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid {field_name}", field=field_name)
    return value.strip()


def get_services():
    """Service container attached to the running Flask app."""
    return current_app.extensions['sudoku_duel']


def current_uid() -> str:
    """uid verified by ``require_auth`` for the current request."""
    return request.user['uid']


def error_response(action: str, error: ArenaError, room_code=None):
    """Log a service error and build its JSON response."""
    body = error.to_dict()
    game_logger.log_server_response(request, action, False, body, room_code)
    return jsonify(body), error.http_status


def unexpected_error_response(action: str, error: Exception, room_code=None):
    """Log an unexpected exception and build a 500 response."""
    game_logger.log_error(request, error, action, room_code)
    body = {'success': False, 'error': 'Internal server error'}
    game_logger.log_server_response(request, action, False, body, room_code)
    return jsonify(body), 500
