"""
Patient repository.

Deleting a patient through this repository removes only the patient row; use
``RecordIntegrityService.delete_patient_cascade`` to remove dependents too.
"""
from __future__ import annotations

from typing import List

from medical_doc.db import schemas
from medical_doc.db.store import PATIENTS

from .base import CollectionRepository


class PatientRepository(CollectionRepository[schemas.Patient]):
    collection = PATIENTS
    read_schema = schemas.Patient
    create_schema = schemas.PatientCreate
    update_schema = schemas.PatientUpdate

    async def find_by_name(self, name: str) -> List[schemas.Patient]:
        return await self.find_by("name", name)

    async def find_by_email(self, email: str) -> List[schemas.Patient]:
        return await self.find_by("email", email)
