"""Account persistence backed by the SQLAlchemy ``User`` model.

The unique indexes on ``users.email`` and ``users.phone`` are the real
authority on identifier uniqueness. When two registrations race past the
resolver's advisory probe, the loser surfaces here as an ``IntegrityError``
and is reported as :class:`DuplicateAccountError`.
"""

import logging
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from app import db
from app.models import User

logger = logging.getLogger(__name__)

IDENTIFIER_FIELDS = ('email', 'phone')

# Profile fields callers may change after registration
UPDATABLE_FIELDS = {'name', 'bio', 'avatar_url', 'profile_complete'}


class DuplicateAccountError(Exception):
    """A unique identifier column rejected the write."""

    def __init__(self, field=None):
        super().__init__(f"{field or 'identifier'} already registered")
        self.field = field


def _conflicting_field(error):
    """Best-effort extraction of the column named in a unique violation."""
    message = str(getattr(error, 'orig', error)).lower()
    for field in IDENTIFIER_FIELDS:
        if f'users.{field}' in message or f'users_{field}' in message or f'({field})' in message:
            return field
    return None


class AccountStore:
    """Lookup and write operations on accounts."""

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def find_by_id(self, user_id):
        return self.session.get(User, user_id)

    def find_by_email(self, email):
        if not email:
            return None
        return self.session.query(User).filter_by(email=email).first()

    def find_by_phone(self, phone):
        if not phone:
            return None
        return self.session.query(User).filter_by(phone=phone).first()

    def find_by_field(self, field, value):
        if field == 'email':
            return self.find_by_email(value)
        if field == 'phone':
            return self.find_by_phone(value)
        raise ValueError(f"Unknown identifier field: {field}")

    def create(self, **fields):
        """Insert a new account and commit.

        Raises:
            DuplicateAccountError: a unique identifier already exists
        """
        user = User(**fields)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            field = _conflicting_field(e)
            if field is None:
                # Message did not name the column; ask the store directly
                for candidate in IDENTIFIER_FIELDS:
                    if fields.get(candidate) and self.find_by_field(candidate, fields[candidate]):
                        field = candidate
                        break
            if field is None:
                raise
            logger.warning(f"Unique violation on users.{field} during account creation")
            raise DuplicateAccountError(field) from e
        return user

    def update_by_id(self, user_id, **fields):
        """Apply profile changes to an account.

        Returns the updated account, or None when no account has that id.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")

        user = self.find_by_id(user_id)
        if not user:
            return None

        for key, value in fields.items():
            setattr(user, key, value)
        user.updated_at = datetime.utcnow()

        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return user
