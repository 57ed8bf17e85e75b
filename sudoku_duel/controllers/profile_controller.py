"""
Profile Controller

Handles nickname reservation and profile lookup for authenticated users.
"""

from dataclasses import asdict

from flask import Blueprint, request, jsonify

from ..errors import ArenaError, ProfileNotFoundError
from ..utils.decorators import require_auth
from ..utils.game_logger import game_logger
from ..utils.helpers import current_uid, error_response, get_services, unexpected_error_response

profile_bp = Blueprint('profile', __name__)


@profile_bp.route('/profile', methods=['POST'])
@require_auth
def create_profile():
    """Reserve a nickname for the caller, generating one when none is given."""
    try:
        services = get_services()
        data = request.get_json(silent=True) or {}
        nickname = data.get('nickname')

        game_logger.log_user_action(request, 'create_profile', nickname=nickname)

        if nickname is None:
            nickname = services.profiles.generate_unique_nickname()

        identity = services.profiles.reserve_nickname(current_uid(), nickname, request.user.get('email'))

        response_data = {
            'success': True,
            'profile': asdict(identity)
        }
        game_logger.log_server_response(request, 'create_profile', True, response_data)
        return jsonify(response_data), 201

    except ArenaError as e:
        return error_response('create_profile', e)
    except Exception as e:
        return unexpected_error_response('create_profile', e)


@profile_bp.route('/profile', methods=['GET'])
@require_auth
def get_profile():
    """Get the caller's profile and statistics."""
    try:
        profile = get_services().profiles.lookup_profile(current_uid())
        if profile is None:
            raise ProfileNotFoundError(current_uid())

        return jsonify({
            'success': True,
            'profile': {
                'uid': profile.uid,
                'nickname': profile.nickname,
                'stats': asdict(profile.stats),
                'created_at': profile.created_at
            }
        })

    except ArenaError as e:
        return error_response('get_profile', e)
    except Exception as e:
        return unexpected_error_response('get_profile', e)


@profile_bp.route('/profile/suggest', methods=['GET'])
@require_auth
def suggest_nickname():
    """Suggest an unused nickname."""
    try:
        return jsonify({
            'success': True,
            'nickname': get_services().profiles.generate_unique_nickname()
        })
    except ArenaError as e:
        return error_response('suggest_nickname', e)
    except Exception as e:
        return unexpected_error_response('suggest_nickname', e)
