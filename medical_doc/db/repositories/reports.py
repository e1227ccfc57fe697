"""Examination report repository."""
from __future__ import annotations

from typing import List

from medical_doc.db import schemas
from medical_doc.db.store import EXAMINATION_REPORTS

from .base import CollectionRepository


class ExaminationReportRepository(CollectionRepository[schemas.ExaminationReport]):
    collection = EXAMINATION_REPORTS
    read_schema = schemas.ExaminationReport
    create_schema = schemas.ExaminationReportCreate
    update_schema = schemas.ExaminationReportUpdate

    async def get_by_patient(self, patient_id: int) -> List[schemas.ExaminationReport]:
        return await self.find_by("patient_id", patient_id)

    async def get_by_date(self, date: str) -> List[schemas.ExaminationReport]:
        return await self.find_by("date", date)

    async def get_by_type(self, report_type: str) -> List[schemas.ExaminationReport]:
        return await self.find_by("type", report_type)
