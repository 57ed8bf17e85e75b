"""
Game Logger Module for the Sudoku Duel Server

This module provides structured logging for user actions, server responses,
and room/game events.
"""

import logging
import json
from datetime import datetime
from typing import Dict, Any, Optional
from pathlib import Path

from ..config import Config


class GameLogger:
    """
    Centralized logging system for the game server.

    Features:
    - User action tracking with IP/uid identification
    - Server response logging
    - Room and game event logging
    - JSON structured logs for easy parsing
    """

    def __init__(self, log_dir: str = "logs", level: str = "INFO"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        # Setup main game logger
        self.logger = self._setup_logger(level)

    def _setup_logger(self, level: str) -> logging.Logger:
        """Setup the main game logger with file handler."""
        logger = logging.getLogger('sudoku_duel')
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))

        # Prevent duplicate handlers
        if logger.handlers:
            logger.handlers.clear()

        # Create log file with date
        log_file = self.log_dir / f"game_log_{datetime.now().strftime('%Y-%m-%d')}.log"

        # File handler for detailed logs
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.INFO)

        # Console handler for only important messages (WARNING and above)
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)

        file_formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_formatter = logging.Formatter(
            '%(levelname)s: %(message)s'
        )

        file_handler.setFormatter(file_formatter)
        console_handler.setFormatter(console_formatter)

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)

        return logger

    def _get_user_identity(self, request) -> Dict[str, Optional[str]]:
        """Extract user identity information from request."""
        user = getattr(request, 'user', None) or {}
        return {
            'user_ip': request.remote_addr or 'unknown',
            'uid': user.get('uid'),
        }

    def _create_log_entry(self,
                          event_type: str,
                          action: str,
                          user_info: Dict[str, Optional[str]],
                          details: Dict[str, Any]) -> str:
        """Create a structured log entry."""
        log_entry = {
            'timestamp': datetime.now().isoformat(),
            'event_type': event_type,
            'action': action,
            'user': user_info,
            'details': details
        }
        return json.dumps(log_entry, ensure_ascii=False, default=str)

    def log_user_action(self,
                        request,
                        action: str,
                        room_code: Optional[str] = None,
                        **kwargs):
        """
        Log user actions with full context.

        Args:
            request: Flask request object
            action: Type of action (e.g., 'create_room', 'apply_move')
            room_code: Room code if applicable
            **kwargs: Additional details to log
        """
        user_info = self._get_user_identity(request)

        details = {
            'room_code': room_code,
            'endpoint': request.endpoint,
            'method': request.method,
            'url': request.url,
            **kwargs
        }

        log_message = self._create_log_entry('USER_ACTION', action, user_info, details)
        self.logger.info(log_message)

    def log_server_response(self,
                            request,
                            action: str,
                            success: bool,
                            response_data: Dict[str, Any],
                            room_code: Optional[str] = None,
                            **kwargs):
        """
        Log server responses with full context.

        Args:
            request: Flask request object
            action: Action that was performed
            success: Whether the action succeeded
            response_data: Data being returned to client
            room_code: Room code if applicable
            **kwargs: Additional details to log
        """
        user_info = self._get_user_identity(request)

        details = {
            'room_code': room_code,
            'success': success,
            'response_data': self._sanitize_response_data(response_data),
            **kwargs
        }

        event_type = 'SERVER_RESPONSE_SUCCESS' if success else 'SERVER_RESPONSE_ERROR'
        log_message = self._create_log_entry(event_type, action, user_info, details)

        if success:
            self.logger.info(log_message)
        else:
            self.logger.error(log_message)

    def log_game_event(self,
                       room_code: Optional[str],
                       event: str,
                       actor: Optional[str],
                       level: int = logging.INFO,
                       **kwargs):
        """
        Log room and game events (starts, moves, eliminations, expiry).

        Args:
            room_code: Room code, or None for events not tied to a room
            event: Type of game event (e.g., 'game_started', 'player_eliminated')
            actor: uid of the acting player, or 'system'
            level: Logging level for the entry
            **kwargs: Additional game details
        """
        user_info = {'user_ip': None, 'uid': actor}

        details = {
            'room_code': room_code,
            **kwargs
        }

        log_message = self._create_log_entry('GAME_EVENT', event, user_info, details)
        self.logger.log(level, log_message)

    def log_error(self,
                  request,
                  error: Exception,
                  action: str,
                  room_code: Optional[str] = None):
        """
        Log errors with full context.

        Args:
            request: Flask request object
            error: Exception that occurred
            action: Action that was being performed
            room_code: Room code if applicable
        """
        user_info = self._get_user_identity(request)

        details = {
            'room_code': room_code,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'action': action
        }

        log_message = self._create_log_entry('ERROR', action, user_info, details)
        self.logger.error(log_message)

    def _sanitize_response_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Remove or mask sensitive data from response logs."""
        if not isinstance(data, dict):
            return {'data_type': type(data).__name__}

        sanitized = data.copy()

        # Never write a solution to the logs; keep essential state only
        if 'room' in sanitized and isinstance(sanitized['room'], dict):
            room = sanitized['room']
            game = room.get('game') or {}
            sanitized['room'] = {
                'code': room.get('code'),
                'status': room.get('status'),
                'players': len(room.get('players', {})),
                'move_count': game.get('move_count'),
                'winner': game.get('winner'),
            }

        return sanitized


# Global logger instance
game_logger = GameLogger(Config.LOG_DIR, Config.LOG_LEVEL)
