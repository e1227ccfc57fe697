from pydantic import BaseModel

from .case_histories import CaseHistory
from .patients import Patient
from .reports import ExaminationReport


class PatientRecord(BaseModel):
    """Consolidated view of one patient; child lists are most-recent first."""
    patient: Patient
    case_histories: list[CaseHistory] = []
    examination_reports: list[ExaminationReport] = []


class CascadeResult(BaseModel):
    patient_id: int
    case_histories_deleted: int = 0
    examination_reports_deleted: int = 0
    patient_deleted: bool = False


class RepairResult(BaseModel):
    case_histories_removed: list[int] = []
    examination_reports_removed: list[int] = []

    @property
    def total_removed(self) -> int:
        return len(self.case_histories_removed) + len(self.examination_reports_removed)
