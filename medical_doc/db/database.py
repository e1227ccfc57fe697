"""
Record store construction from environment configuration.

The store is built explicitly and handed to whoever needs it; nothing here
keeps a module-level instance.
"""
from __future__ import annotations

from typing import Optional

from medical_doc.db.store import RecordStore
from medical_doc.utils.config import Settings, get_settings


def build_store(settings: Optional[Settings] = None) -> RecordStore:
    """Return an unopened ``RecordStore`` configured from ``settings``."""
    settings = settings or get_settings()
    return RecordStore(
        settings.database_url,
        name=settings.store_name,
        version=settings.store_version,
    )


async def open_store(settings: Optional[Settings] = None) -> RecordStore:
    """Build the store and open it (creating or upgrading the schema)."""
    return await build_store(settings).open()
