"""Shared utilities for the forum backend.

This package contains the credential helpers (password hashing, token
signing) that are shared across route and service modules.
"""

from app.utils.auth import (
    token_required,
    issue_token,
    decode_token,
    parse_token_lifetime,
    token_lifetime,
)
from app.utils.passwords import hash_password, verify_password, dummy_digest

__all__ = [
    'token_required',
    'issue_token',
    'decode_token',
    'parse_token_lifetime',
    'token_lifetime',
    'hash_password',
    'verify_password',
    'dummy_digest',
]
