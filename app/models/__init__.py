"""Database models for the forum application."""

from .user import User

__all__ = ['User']
