"""Auth routes package.

This package organizes authentication-related routes:
- core: registration, login, current account and identifier checks

Identity failures raised by the resolver are turned into JSON responses by
the error handler registered on the blueprint.
"""

from flask import Blueprint, jsonify, current_app
from app.services.identity import IdentityError, ErrorKind

auth_bp = Blueprint('auth', __name__)

# HTTP status per identity failure kind
STATUS_CODES = {
    ErrorKind.MISSING_REQUIRED_FIELD: 400,
    ErrorKind.MISSING_IDENTIFIER: 400,
    ErrorKind.AMBIGUOUS_IDENTIFIER: 400,
    ErrorKind.INVALID_FORMAT: 400,
    ErrorKind.WEAK_PASSWORD: 400,
    ErrorKind.MISSING_CREDENTIALS: 400,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.IDENTIFIER_TAKEN: 409,
}


@auth_bp.errorhandler(IdentityError)
def handle_identity_error(error):
    status = STATUS_CODES.get(error.kind, 400)
    current_app.logger.info(f"Auth request rejected: {error.kind.value}")
    return jsonify(error.to_dict()), status


# Import route modules (registers routes on auth_bp)
from app.routes.auth import core  # noqa: E402,F401
