"""Services that orchestrate multi-step work above the repositories."""

from .integrity import RecordIntegrityService
from .reset import reset_all_records

__all__ = [
    "RecordIntegrityService",
    "reset_all_records",
]
