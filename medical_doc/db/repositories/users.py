"""
User (credential) repository.

Usernames are not unique at the storage level. ``get_by_username`` returns
the oldest match and warns when a duplicate slipped past the registration
pre-check.
"""
from __future__ import annotations

import logging
from typing import Optional

from medical_doc.db import schemas
from medical_doc.db.store import USERS

from .base import CollectionRepository

logger = logging.getLogger(__name__)


class UserRepository(CollectionRepository[schemas.User]):
    collection = USERS
    read_schema = schemas.User
    create_schema = schemas.UserCreate
    update_schema = schemas.UserUpdate

    async def get_by_username(self, username: str) -> Optional[schemas.User]:
        matches = await self.find_by("username", username)
        if not matches:
            return None
        if len(matches) > 1:
            logger.warning(
                "duplicate_username: username=%s ids=%s", username, [u.id for u in matches]
            )
        return matches[0]
