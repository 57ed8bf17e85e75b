"""
Utilities Package

Contains utility functions, decorators, and helper modules.
"""

from .decorators import require_auth
from .helpers import current_uid, error_response, get_services, require_text, unexpected_error_response, utc_now
from .game_logger import game_logger

__all__ = [
    'require_auth', 'current_uid', 'error_response', 'get_services', 'require_text',
    'unexpected_error_response', 'utc_now', 'game_logger'
]
