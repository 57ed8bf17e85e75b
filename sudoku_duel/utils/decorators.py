"""
Authentication Decorators

Tokens are issued by the external identity provider; the server only
verifies them and trusts the uid they carry.
"""

from functools import wraps

import jwt
from flask import request, jsonify, current_app


def require_auth(f):
    """
    Decorator to require a verified bearer token on HTTP endpoints.

    Sets ``request.user`` to ``{'uid': ..., 'email': ...}``.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        # Get token from Authorization header
        auth_header = request.headers.get('Authorization')
        if not auth_header or not auth_header.startswith('Bearer '):
            return jsonify({
                'success': False,
                'error': 'Authorization token required'
            }), 401

        token = auth_header.split(' ', 1)[1]

        try:
            payload = jwt.decode(
                token,
                current_app.config['JWT_SECRET'],
                algorithms=[current_app.config.get('JWT_ALGORITHM', 'HS256')]
            )
        except jwt.ExpiredSignatureError:
            return jsonify({'success': False, 'error': 'Token has expired'}), 401
        except jwt.InvalidTokenError:
            return jsonify({'success': False, 'error': 'Invalid token'}), 401

        uid = payload.get('uid') or payload.get('sub')
        if not uid:
            return jsonify({'success': False, 'error': 'Invalid token payload'}), 401

        # Add user data to request context
        request.user = {'uid': str(uid), 'email': payload.get('email')}
        return f(*args, **kwargs)

    return decorated_function
