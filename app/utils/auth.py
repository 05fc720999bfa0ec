"""Shared authentication utilities.

This module issues and verifies the JWT bearer tokens handed out on
registration and login, and provides the decorator protected routes use.
"""

from functools import wraps
from flask import request, jsonify, current_app
from datetime import datetime, timedelta
import jwt
import re

# '3600', '45s', '15m', '12h', '30d'
DURATION_REGEX = re.compile(r'^(\d+)\s*([smhd]?)$')
DURATION_UNITS = {'': 1, 's': 1, 'm': 60, 'h': 3600, 'd': 86400}


def _get_secret_key():
    """Get JWT secret from Flask app config (single source of truth)."""
    return current_app.config['JWT_SECRET_KEY']


def parse_token_lifetime(expires_in):
    """Turn a ``JWT_EXPIRES_IN`` value into a lifetime.

    Accepts plain seconds or a number with an ``s``/``m``/``h``/``d``
    suffix. Returns None for ``'never'``, an empty value or zero.

    Raises:
        ValueError: the value is not a recognised duration
    """
    if expires_in is None or isinstance(expires_in, bool):
        return None
    if isinstance(expires_in, int):
        return timedelta(seconds=expires_in) if expires_in > 0 else None

    value = str(expires_in).strip().lower()
    if value in ('', 'never'):
        return None

    match = DURATION_REGEX.match(value)
    if not match:
        raise ValueError(f"Invalid JWT_EXPIRES_IN value: {expires_in!r}")
    seconds = int(match.group(1)) * DURATION_UNITS[match.group(2)]
    return timedelta(seconds=seconds) if seconds > 0 else None


def token_lifetime():
    """Return the configured token lifetime, or None when tokens never expire."""
    return parse_token_lifetime(current_app.config.get('JWT_EXPIRES_IN'))


def issue_token(user_id, lifetime=None):
    """Sign an access token for ``user_id``.

    The ``exp`` claim is only set when ``JWT_EXPIRES_IN`` configures a
    lifetime; with ``'never'`` the token carries no expiry. Callers that
    already resolved the lifetime may pass it in.
    """
    payload = {'user_id': user_id}
    if lifetime is None:
        lifetime = token_lifetime()
    if lifetime is not None:
        payload['exp'] = datetime.utcnow() + lifetime
    return jwt.encode(payload, _get_secret_key(), algorithm='HS256')


def decode_token(token):
    """Return the user id carried by ``token``.

    Raises:
        jwt.ExpiredSignatureError: token lifetime has passed
        jwt.InvalidTokenError: token is malformed or badly signed
    """
    payload = jwt.decode(token, _get_secret_key(), algorithms=['HS256'])
    if 'user_id' not in payload:
        raise jwt.InvalidTokenError('Token has no subject')
    return payload['user_id']


def token_required(f):
    """
    Decorator to require valid JWT token.

    Extracts user_id from JWT token and passes it as the first argument
    to the decorated function.

    Usage:
        @auth_bp.route('/me')
        @token_required
        def me(current_user_id):
            return jsonify({'user_id': current_user_id})
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        auth_header = request.headers.get('Authorization')

        if not auth_header:
            return jsonify({'error': 'Token is missing'}), 401

        # Support both "Bearer <token>" and raw token formats
        token = auth_header.split(' ')[1] if ' ' in auth_header else auth_header
        try:
            current_user_id = decode_token(token)
        except jwt.ExpiredSignatureError:
            return jsonify({'error': 'Token has expired'}), 401
        except jwt.InvalidTokenError:
            return jsonify({'error': 'Token is invalid'}), 401

        return f(current_user_id, *args, **kwargs)
    return decorated
