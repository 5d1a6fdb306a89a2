"""
Password Hashing
================

Bcrypt hashing for user accounts and SHA-256 digests for share-link
passwords.

Version: 0.1.0
"""

import hashlib
import hmac

from passlib.context import CryptContext

_pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=12,
)


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        str: Bcrypt hash of the password
    """
    return _pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its bcrypt hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Bcrypt hash to verify against

    Returns:
        bool: True if password matches hash
    """
    return _pwd_context.verify(plain_password, hashed_password)


def digest_secret(secret: str) -> str:
    """SHA-256 hex digest used for report share-link passwords."""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def verify_digest(secret: str, digest: str) -> bool:
    """Constant-time comparison of a secret against its SHA-256 digest."""
    return hmac.compare_digest(digest_secret(secret), digest)
