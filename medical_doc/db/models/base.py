"""
Shared SQLAlchemy base and helpers.
"""
from datetime import datetime, UTC

from sqlalchemy.orm import declarative_base


def now_utc_iso() -> str:
    """Return the current UTC time as an ISO-8601 string for created_at defaults."""
    return datetime.now(UTC).isoformat()


Base = declarative_base()
