"""
Cryptographic helpers: password hashing and one-time code digests.

Passwords (local auth backend only) use argon2id via argon2-cffi.
Verification codes are stored as SHA-256 digests and compared in
constant time.
"""

from __future__ import annotations

import hashlib
import hmac

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_password_hasher = PasswordHasher()


def hash_password(plain_password: str) -> str:
    """Hash *plain_password* with argon2id (salt and parameters embedded)."""
    return _password_hasher.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Return ``True`` if *plain_password* matches the argon2 *password_hash*.

    Wrong passwords and malformed hashes both yield ``False``.
    """
    try:
        return _password_hasher.verify(password_hash, plain_password)
    except (VerificationError, InvalidHashError):
        return False


def hash_token(token: str) -> str:
    """Return the hex-encoded SHA-256 digest of *token*."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def digest_matches(candidate: str, expected_digest: str) -> bool:
    """Compare ``hash_token(candidate)`` with *expected_digest* in constant time."""
    return hmac.compare_digest(hash_token(candidate), expected_digest)
