"""Environment-driven settings for the record store and the HTTP adapter."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///medical_doc.db"
MEMORY_DATABASE_URL = "sqlite+pysqlite:///:memory:"
DEFAULT_STORE_NAME = "MedicalDocDB"
DEFAULT_STORE_VERSION = 1


@dataclass(frozen=True)
class Settings:
    database_url: str
    store_name: str
    store_version: int
    default_admin_enabled: bool
    default_admin_password: str
    log_level: str


def _normalize_bool(value: str | None, default: bool = True) -> bool:
    """Return normalized boolean from environment-style value."""
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"", "0", "false", "no", "off"}:
        return False
    if normalized in {"1", "true", "yes", "on"}:
        return True
    return default


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest."""
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    return "pytest" in sys.modules


def _database_url() -> str:
    explicit = os.getenv("MEDICAL_DOC_DATABASE_URL")
    if explicit:
        return explicit
    # Unit tests rely on a fresh in-memory database unless told otherwise
    if _is_pytest_runtime():
        return MEMORY_DATABASE_URL
    return DEFAULT_DATABASE_URL


def _store_version() -> int:
    raw = os.getenv("MEDICAL_DOC_STORE_VERSION")
    if not raw:
        return DEFAULT_STORE_VERSION
    try:
        version = int(raw)
    except ValueError:
        raise ValueError(f"MEDICAL_DOC_STORE_VERSION must be an integer, got {raw!r}")
    if version < 1:
        raise ValueError("MEDICAL_DOC_STORE_VERSION must be >= 1")
    return version


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Return the cached settings sourced from the environment."""
    return Settings(
        database_url=_database_url(),
        store_name=os.getenv("MEDICAL_DOC_STORE_NAME", DEFAULT_STORE_NAME),
        store_version=_store_version(),
        default_admin_enabled=_normalize_bool(os.getenv("MEDICAL_DOC_DEFAULT_ADMIN"), default=True),
        default_admin_password=os.getenv("MEDICAL_DOC_DEFAULT_ADMIN_PASSWORD", "admin"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def reset_settings_cache() -> None:
    """Clear cached settings (useful for tests)."""
    get_settings.cache_clear()


__all__ = [
    "Settings",
    "get_settings",
    "reset_settings_cache",
    "DEFAULT_DATABASE_URL",
    "DEFAULT_STORE_NAME",
    "MEMORY_DATABASE_URL",
]
