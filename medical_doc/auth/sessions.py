"""In-process session tokens.

The record layer only needs one answer from here: is there a valid session.
"""
from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True)
class SessionInfo:
    user_id: int
    username: str
    role: str
    issued_at: float = field(default_factory=time.time)


class SessionManager:
    """Issue, resolve and revoke opaque bearer tokens kept in memory."""

    def __init__(self, ttl_seconds: Optional[float] = None):
        self.ttl_seconds = ttl_seconds
        self._sessions: Dict[str, SessionInfo] = {}

    def issue(self, user_id: int, username: str, role: str) -> str:
        token = secrets.token_urlsafe(32)
        self._sessions[token] = SessionInfo(user_id=user_id, username=username, role=role)
        return token

    def resolve(self, token: Optional[str]) -> Optional[SessionInfo]:
        if not token:
            return None
        info = self._sessions.get(token)
        if info is None:
            return None
        if self.ttl_seconds is not None and time.time() - info.issued_at > self.ttl_seconds:
            self._sessions.pop(token, None)
            return None
        return info

    def is_authenticated(self, token: Optional[str]) -> bool:
        return self.resolve(token) is not None

    def revoke(self, token: Optional[str]) -> None:
        if token:
            self._sessions.pop(token, None)
