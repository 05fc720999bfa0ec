"""Core authentication routes: registration, login and identifier checks."""

from flask import request, jsonify, current_app
from app.routes.auth import auth_bp
from app.services.accounts import AccountStore
from app.services.identity import IdentityResolver
from app.utils import token_required, issue_token, token_lifetime, dummy_digest

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def get_resolver():
    """Build an identity resolver for the current app configuration."""
    return IdentityResolver.from_config(
        current_app.config,
        AccountStore(),
        dummy=dummy_digest(),
    )


def _text(value):
    """Accept integers for phone fields; JSON clients sometimes send them unquoted.

    Other non-string values (floats, booleans) are passed through so the
    normalizer rejects them as badly formatted.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def _auth_response(user, lifetime=None):
    return {
        'token': issue_token(user.id, lifetime),
        'user': user.to_dict(),
    }


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@auth_bp.route('/register', methods=['POST'])
def register():
    """Register a new account with an email, a phone number, or both."""
    data = request.get_json(silent=True) or {}
    # Resolve before the account is committed
    lifetime = token_lifetime()

    user = get_resolver().register(
        name=data.get('name'),
        email_raw=_text(data.get('email')),
        phone_raw=_text(data.get('phone')),
        password=data.get('password'),
    )

    current_app.logger.info(f"New account registered: {user.id}")
    response = _auth_response(user, lifetime)
    response['message'] = 'User registered successfully'
    return jsonify(response), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """Authenticate with an email or phone number and return a JWT token."""
    data = request.get_json(silent=True) or {}

    user = get_resolver().resolve_for_login(
        identifier_raw=_text(data.get('identifier')),
        email_raw=_text(data.get('email')),
        phone_raw=_text(data.get('phone')),
        password=data.get('password'),
    )

    response = _auth_response(user)
    response['message'] = 'Login successful'
    return jsonify(response), 200


@auth_bp.route('/me', methods=['GET'])
@token_required
def me(current_user_id):
    """Return the account the bearer token belongs to."""
    user = AccountStore().find_by_id(current_user_id)

    if not user:
        return jsonify({'error': 'User not found'}), 404

    return jsonify(user.to_dict()), 200


@auth_bp.route('/check', methods=['GET'])
def check_identifier():
    """Check whether an email or phone number is already registered.

    Query params:
    - identifier: email address or phone number in any accepted format
    """
    result = get_resolver().exists(request.args.get('identifier'))
    return jsonify(result), 200
