"""User model for forum accounts and authentication."""

from datetime import datetime
from app import db
from app.utils.passwords import hash_password, verify_password


class User(db.Model):
    """Forum account.

    Email and phone are both optional but each is unique when present.
    Absent values are stored as NULL so that any number of accounts may
    lack the same field without colliding on the unique index.
    """

    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(80), nullable=False)
    email = db.Column(db.String(254), unique=True, nullable=True, index=True)
    phone = db.Column(db.String(20), unique=True, nullable=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    profile_complete = db.Column(db.Boolean, default=False, nullable=False)
    avatar_url = db.Column(db.String(500), nullable=True)
    bio = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint('email IS NOT NULL OR phone IS NOT NULL', name='ck_users_identifier'),
    )

    def set_password(self, password):
        """Hash and set the user password."""
        self.password_hash = hash_password(password)

    def check_password(self, password):
        """Check if the provided password matches the hash."""
        return verify_password(password, self.password_hash)

    def to_dict(self):
        """Convert user to dictionary. The password digest is never included."""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'profile_complete': self.profile_complete,
            'avatar_url': self.avatar_url,
            'bio': self.bio,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<User {self.id} {self.email or self.phone}>'
