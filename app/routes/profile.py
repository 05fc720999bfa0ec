"""Profile completion routes.

Avatar files are uploaded to object storage by the client beforehand; this
endpoint only records the resulting URL.
"""

from flask import Blueprint, request, jsonify, current_app
from app.services.accounts import AccountStore
from app.utils.auth import token_required

profile_bp = Blueprint('profile', __name__)

# String length limits for profile fields
LENGTH_LIMITS = {
    'name': 80,
    'bio': 500,
    'avatar_url': 500,
}


def _validate_profile_data(data):
    """Validate profile update fields. Returns error message or None."""
    unknown = set(data.keys()) - set(LENGTH_LIMITS)
    if unknown:
        return f"Unknown fields: {', '.join(sorted(unknown))}"

    for field, max_len in LENGTH_LIMITS.items():
        if field in data and data[field] is not None:
            if not isinstance(data[field], str):
                return f"{field} must be a string"
            if len(data[field]) > max_len:
                return f"{field} must be less than {max_len} characters"

    if 'name' in data and not (data['name'] or '').strip():
        return "name cannot be empty"

    return None


@profile_bp.route('', methods=['PUT'])
@token_required
def complete_profile(current_user_id):
    """Complete the current user's profile (bio, avatar, display name)."""
    data = request.get_json(silent=True) or {}

    error = _validate_profile_data(data)
    if error:
        return jsonify({'error': error}), 400

    fields = {key: value for key, value in data.items() if key in LENGTH_LIMITS}
    if 'name' in fields:
        fields['name'] = fields['name'].strip()
    fields['profile_complete'] = True

    user = AccountStore().update_by_id(current_user_id, **fields)

    if not user:
        return jsonify({'error': 'User not found'}), 404

    current_app.logger.info(f"Profile completed for user {user.id}")
    return jsonify(user.to_dict()), 200
