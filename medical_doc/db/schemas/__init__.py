"""
Domain-split Pydantic schemas.

Record shapes are validated here, at the repository boundary, before they
reach the record store.
"""

from .patients import PatientBase, PatientCreate, PatientUpdate, Patient
from .case_histories import CaseHistoryBase, CaseHistoryCreate, CaseHistoryUpdate, CaseHistory
from .reports import (
    ExaminationReportBase,
    ExaminationReportCreate,
    ExaminationReportUpdate,
    ExaminationReport,
)
from .users import Role, UserBase, UserCreate, UserUpdate, User, UserPublic
from .records import PatientRecord, CascadeResult, RepairResult

__all__ = [
    # Patients
    "PatientBase",
    "PatientCreate",
    "PatientUpdate",
    "Patient",
    # Case histories
    "CaseHistoryBase",
    "CaseHistoryCreate",
    "CaseHistoryUpdate",
    "CaseHistory",
    # Reports
    "ExaminationReportBase",
    "ExaminationReportCreate",
    "ExaminationReportUpdate",
    "ExaminationReport",
    # Users
    "Role",
    "UserBase",
    "UserCreate",
    "UserUpdate",
    "User",
    "UserPublic",
    # Aggregates
    "PatientRecord",
    "CascadeResult",
    "RepairResult",
]
