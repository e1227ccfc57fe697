"""
Password verifier hashing.

New verifiers are Argon2id hashes. Verifiers written in the older
``pbkdf2$sha256$<iterations>$<salt>$<digest>`` format are still accepted at
login and flagged by ``needs_rehash`` so they can be upgraded in place.
"""
from __future__ import annotations

import base64
import hashlib
import hmac

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from argon2.low_level import Type

_argon2 = PasswordHasher(time_cost=2, memory_cost=102400, parallelism=8, hash_len=32, type=Type.ID)

ARGON2_PREFIX = "$argon2id$"
PBKDF2_PREFIX = "pbkdf2$"


def hash_password(password: str) -> str:
    return _argon2.hash(password)


def _pbkdf2_verify(password: str, encoded: str) -> bool:
    try:
        scheme, algo, iter_str, b64_salt, b64_dk = encoded.split("$")
        if scheme != "pbkdf2" or algo != "sha256":
            return False
        iterations = int(iter_str)
        salt = base64.urlsafe_b64decode(b64_salt)
        dk_expected = base64.urlsafe_b64decode(b64_dk)
    except ValueError:
        # Malformed verifier
        return False
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(dk, dk_expected)


def verify_password(password: str, encoded: str) -> bool:
    if not password or not encoded:
        return False
    if encoded.startswith(ARGON2_PREFIX):
        try:
            return _argon2.verify(encoded, password)
        except (VerificationError, InvalidHashError):
            return False
    if encoded.startswith(PBKDF2_PREFIX):
        return _pbkdf2_verify(password, encoded)
    # Unknown scheme
    return False


def needs_rehash(encoded: str) -> bool:
    """True when ``encoded`` is not an Argon2id hash with the current parameters."""
    if not encoded.startswith(ARGON2_PREFIX):
        return True
    try:
        return _argon2.check_needs_rehash(encoded)
    except InvalidHashError:
        return True
