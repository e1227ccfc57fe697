"""
Credential registration and login on top of the users collection.

Username uniqueness is a check-then-create pre-check. Two registrations for
the same name racing each other can both pass it; ``UserRepository`` then
resolves lookups to the oldest record.
"""
from __future__ import annotations

import logging
from typing import Optional

from medical_doc.auth.passwords import hash_password, needs_rehash, verify_password
from medical_doc.auth.sessions import SessionManager
from medical_doc.db import schemas
from medical_doc.db.repositories import UserRepository
from medical_doc.db.store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_USERNAME = "admin"


class AuthenticationError(Exception):
    """Invalid username or password."""


class UsernameTakenError(Exception):
    def __init__(self, username: str):
        super().__init__(f"Username already exists: {username}")
        self.username = username


class CredentialService:
    def __init__(self, store: RecordStore, sessions: SessionManager):
        self.users = UserRepository(store)
        self.sessions = sessions

    async def ensure_default_admin(self, password: str = "admin") -> Optional[int]:
        """Create the ``admin`` account when it does not exist yet."""
        if await self.users.get_by_username(DEFAULT_ADMIN_USERNAME) is not None:
            return None
        user_id = await self.users.add(
            schemas.UserCreate(username=DEFAULT_ADMIN_USERNAME, password=hash_password(password), role="admin")
        )
        logger.info("default_admin_created: user_id=%s", user_id)
        return user_id

    async def register(self, username: str, password: str, role: schemas.Role = "user") -> int:
        username = username.strip()
        if not username or not password:
            raise ValueError("username and password are required")
        if await self.users.get_by_username(username) is not None:
            raise UsernameTakenError(username)
        return await self.users.add(
            schemas.UserCreate(username=username, password=hash_password(password), role=role)
        )

    async def login(self, username: str, password: str) -> tuple[str, schemas.UserPublic]:
        """Return ``(token, user)`` for valid credentials."""
        user = await self.users.get_by_username(username.strip())
        if user is None or not verify_password(password, user.password):
            raise AuthenticationError("Invalid username or password")
        if needs_rehash(user.password):
            user = await self.users.patch(user.id, {"password": hash_password(password)})
            logger.info("password_rehashed: user_id=%s", user.id)
        token = self.sessions.issue(user.id, user.username, user.role)
        return token, schemas.UserPublic(id=user.id, username=user.username, role=user.role, created_at=user.created_at)

    def logout(self, token: Optional[str]) -> None:
        self.sessions.revoke(token)
