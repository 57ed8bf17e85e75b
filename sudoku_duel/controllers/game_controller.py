"""
Game Controller

Handles moves and game-over queries for started rooms.
"""

from dataclasses import asdict

from flask import Blueprint, request, jsonify

from ..errors import ArenaError, ValidationError
from ..utils.decorators import require_auth
from ..utils.game_logger import game_logger
from ..utils.helpers import current_uid, error_response, get_services, unexpected_error_response

game_bp = Blueprint('game', __name__)


@game_bp.route('/rooms/<room_code>/moves', methods=['POST'])
@require_auth
def apply_move(room_code):
    """Place the current numeral at a cell."""
    try:
        services = get_services()
        data = request.get_json(silent=True)
        if not data or 'position' not in data:
            raise ValidationError("Position is required")

        position = data['position']
        expected_move_number = data.get('expected_move_number')
        if expected_move_number is not None and (
                isinstance(expected_move_number, bool) or not isinstance(expected_move_number, int)):
            raise ValidationError("expected_move_number must be an integer")

        # Log user action
        game_logger.log_user_action(
            request, 'apply_move', room_code,
            position=position, expected_move_number=expected_move_number
        )

        result = services.games.apply_move(room_code, current_uid(), position, expected_move_number)
        room = services.lobby.get_room(room_code)

        response_data = {
            'success': True,
            'is_correct': result.is_correct,
            'move': asdict(result.move),
            'game_over': result.game_over,
            'winner': result.winner,
            'room': services.games.public_state(room)
        }
        game_logger.log_server_response(request, 'apply_move', True, response_data, room_code)
        return jsonify(response_data)

    except ArenaError as e:
        return error_response('apply_move', e, room_code)
    except Exception as e:
        return unexpected_error_response('apply_move', e, room_code)


@game_bp.route('/rooms/<room_code>/moves', methods=['GET'])
@require_auth
def list_moves(room_code):
    """Get the move history of a room."""
    try:
        services = get_services()
        room = services.lobby.get_room(room_code)
        moves = services.games.ledger.list_moves(room.code)
        return jsonify({
            'success': True,
            'count': len(moves),
            'moves': [asdict(move) for move in moves]
        })
    except ArenaError as e:
        return error_response('list_moves', e, room_code)
    except Exception as e:
        return unexpected_error_response('list_moves', e, room_code)


@game_bp.route('/rooms/<room_code>/game_over', methods=['GET'])
@require_auth
def check_game_over(room_code):
    """Report whether the game has ended and who won."""
    try:
        services = get_services()
        room = services.lobby.get_room(room_code)
        winner = services.games.check_game_over(room)
        return jsonify({
            'success': True,
            'game_over': winner is not None,
            'winner': winner
        })
    except ArenaError as e:
        return error_response('check_game_over', e, room_code)
    except Exception as e:
        return unexpected_error_response('check_game_over', e, room_code)
