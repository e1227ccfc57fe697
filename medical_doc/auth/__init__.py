"""Credentials and sessions used to gate access to the record store."""

from .credentials import (
    AuthenticationError,
    CredentialService,
    DEFAULT_ADMIN_USERNAME,
    UsernameTakenError,
)
from .passwords import hash_password, needs_rehash, verify_password
from .sessions import SessionInfo, SessionManager

__all__ = [
    "AuthenticationError",
    "CredentialService",
    "DEFAULT_ADMIN_USERNAME",
    "UsernameTakenError",
    "hash_password",
    "needs_rehash",
    "verify_password",
    "SessionInfo",
    "SessionManager",
]
