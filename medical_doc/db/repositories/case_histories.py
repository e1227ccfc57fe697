"""Case history repository, looked up by patient through the patient_id index."""
from __future__ import annotations

from typing import List

from medical_doc.db import schemas
from medical_doc.db.store import CASE_HISTORIES

from .base import CollectionRepository


class CaseHistoryRepository(CollectionRepository[schemas.CaseHistory]):
    collection = CASE_HISTORIES
    read_schema = schemas.CaseHistory
    create_schema = schemas.CaseHistoryCreate
    update_schema = schemas.CaseHistoryUpdate

    async def get_by_patient(self, patient_id: int) -> List[schemas.CaseHistory]:
        return await self.find_by("patient_id", patient_id)

    async def get_by_date(self, date: str) -> List[schemas.CaseHistory]:
        return await self.find_by("date", date)
