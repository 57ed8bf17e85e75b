"""
Room Controller

Handles room creation, roster changes and game start.
"""

from flask import Blueprint, request, jsonify

from ..errors import ArenaError
from ..models import RoomSettings
from ..utils.decorators import require_auth
from ..utils.game_logger import game_logger
from ..utils.helpers import current_uid, error_response, get_services, unexpected_error_response

room_bp = Blueprint('rooms', __name__)


def _current_identity(services):
    return services.profiles.ensure_profile(current_uid(), request.user.get('email'))


def _settings_from(data) -> RoomSettings:
    return RoomSettings(
        difficulty=data.get('difficulty'),
        time_limit=data.get('time_limit'),
        private_game=bool(data.get('private_game', False))
    )


@room_bp.route('/rooms', methods=['POST'])
@require_auth
def create_room():
    """Create a new room hosted by the caller."""
    try:
        services = get_services()
        data = request.get_json(silent=True) or {}

        game_logger.log_user_action(request, 'create_room', extra_data=data)

        host = _current_identity(services)
        code = services.lobby.create_room(host, _settings_from(data))

        response_data = {
            'success': True,
            'room_code': code
        }
        game_logger.log_server_response(request, 'create_room', True, response_data, code)
        return jsonify(response_data), 201

    except ArenaError as e:
        return error_response('create_room', e)
    except Exception as e:
        return unexpected_error_response('create_room', e)


@room_bp.route('/rooms', methods=['GET'])
@require_auth
def list_rooms():
    """List the caller's unexpired rooms."""
    try:
        services = get_services()
        rooms = services.lobby.list_host_rooms(current_uid())
        return jsonify({
            'success': True,
            'rooms': [
                {
                    'code': room.code,
                    'status': room.status.value,
                    'players': len(room.players),
                    'expire_at': room.expire_at
                }
                for room in rooms
            ]
        })
    except ArenaError as e:
        return error_response('list_rooms', e)
    except Exception as e:
        return unexpected_error_response('list_rooms', e)


@room_bp.route('/rooms/<room_code>', methods=['GET'])
@require_auth
def get_room_state(room_code):
    """Get the public state of a room."""
    try:
        services = get_services()
        room = services.lobby.get_room(room_code)
        return jsonify({
            'success': True,
            'room': services.games.public_state(room)
        })
    except ArenaError as e:
        return error_response('get_room_state', e, room_code)
    except Exception as e:
        return unexpected_error_response('get_room_state', e, room_code)


@room_bp.route('/rooms/<room_code>/join', methods=['POST'])
@require_auth
def join_room(room_code):
    """Join a waiting room."""
    try:
        services = get_services()
        game_logger.log_user_action(request, 'join_room', room_code)

        room = services.lobby.join_room(room_code, _current_identity(services))

        response_data = {
            'success': True,
            'room': services.games.public_state(room)
        }
        game_logger.log_server_response(request, 'join_room', True, response_data, room_code)
        return jsonify(response_data)

    except ArenaError as e:
        return error_response('join_room', e, room_code)
    except Exception as e:
        return unexpected_error_response('join_room', e, room_code)


@room_bp.route('/rooms/<room_code>/leave', methods=['POST'])
@require_auth
def leave_room(room_code):
    """Leave a waiting room."""
    try:
        services = get_services()
        game_logger.log_user_action(request, 'leave_room', room_code)

        room = services.lobby.leave_room(room_code, current_uid())

        response_data = {
            'success': True,
            'room': services.games.public_state(room)
        }
        game_logger.log_server_response(request, 'leave_room', True, response_data, room_code)
        return jsonify(response_data)

    except ArenaError as e:
        return error_response('leave_room', e, room_code)
    except Exception as e:
        return unexpected_error_response('leave_room', e, room_code)


@room_bp.route('/rooms/<room_code>/start', methods=['POST'])
@require_auth
def start_game(room_code):
    """Start the game; only the host may do this."""
    try:
        services = get_services()
        data = request.get_json(silent=True) or {}
        difficulty = data.get('difficulty')

        game_logger.log_user_action(request, 'start_game', room_code, difficulty=difficulty)

        result = services.lobby.start_game(room_code, difficulty, requested_by=current_uid())

        response_data = {
            'success': True,
            'room': services.games.public_state(result.room),
            'warnings': result.warnings
        }
        game_logger.log_server_response(request, 'start_game', True, response_data, room_code)
        return jsonify(response_data)

    except ArenaError as e:
        return error_response('start_game', e, room_code)
    except Exception as e:
        return unexpected_error_response('start_game', e, room_code)
