"""Password hashing helpers.

Thin wrappers around werkzeug so the rest of the code base never calls the
hashing primitives directly.
"""

from functools import lru_cache
from werkzeug.security import generate_password_hash, check_password_hash


def hash_password(password: str) -> str:
    """Return a salted digest for ``password``."""
    return generate_password_hash(password)


def verify_password(password: str, digest: str) -> bool:
    """Check ``password`` against a digest produced by :func:`hash_password`."""
    if not password or not digest:
        return False
    return check_password_hash(digest, password)


@lru_cache(maxsize=1)
def dummy_digest() -> str:
    """Digest used when a login names no existing account.

    Verifying against it costs the same as a real check, so an unknown
    identifier and a wrong password take comparable time.
    """
    return generate_password_hash('not-a-real-password')
