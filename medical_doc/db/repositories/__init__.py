"""
Per-collection repositories.

Each repository binds a collection name and its index names so callers never
pass raw collection strings to the record store.
"""
from .base import CollectionRepository
from .patients import PatientRepository
from .case_histories import CaseHistoryRepository
from .reports import ExaminationReportRepository
from .users import UserRepository

__all__ = [
    "CollectionRepository",
    "PatientRepository",
    "CaseHistoryRepository",
    "ExaminationReportRepository",
    "UserRepository",
]
