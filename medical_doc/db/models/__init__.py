"""
Domain-split SQLAlchemy models.

Exposes `Base`, `now_utc_iso`, and the ORM classes backing each collection.
"""

from .base import Base, now_utc_iso  # re-export

from .patients import Patient
from .case_histories import CaseHistory
from .reports import ExaminationReport
from .users import User, StoreMeta

__all__ = [
    # base
    "Base",
    "now_utc_iso",
    # records
    "Patient",
    "CaseHistory",
    "ExaminationReport",
    # credentials/meta
    "User",
    "StoreMeta",
]
