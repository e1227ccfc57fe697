"""
Patient API endpoints.

Deleting a patient always runs the cascade; the consolidated record view is
served from ``/patients/{id}/record``.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from medical_doc.api.deps import RecordId, get_integrity, get_patients, require_session
from medical_doc.db import schemas
from medical_doc.db.repositories import PatientRepository
from medical_doc.services import RecordIntegrityService

router = APIRouter(prefix="/patients", tags=["patients"], dependencies=[Depends(require_session)])


@router.get("", response_model=List[schemas.Patient])
async def list_patients_endpoint(patients: PatientRepository = Depends(get_patients)):
    return await patients.get_all()


@router.post("", response_model=schemas.Patient, status_code=status.HTTP_201_CREATED)
async def create_patient_endpoint(
    patient: schemas.PatientCreate,
    patients: PatientRepository = Depends(get_patients),
):
    patient_id = await patients.add(patient)
    return await patients.get(patient_id)


@router.get("/{patient_id}", response_model=schemas.Patient)
async def get_patient_endpoint(patient_id: RecordId, patients: PatientRepository = Depends(get_patients)):
    patient = await patients.get(patient_id)
    if patient is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Patient not found")
    return patient


@router.put("/{patient_id}", response_model=schemas.Patient)
async def update_patient_endpoint(
    patient_id: RecordId,
    changes: schemas.PatientUpdate,
    patients: PatientRepository = Depends(get_patients),
):
    return await patients.patch(patient_id, changes)


@router.delete("/{patient_id}", response_model=schemas.CascadeResult)
async def delete_patient_endpoint(
    patient_id: RecordId,
    integrity: RecordIntegrityService = Depends(get_integrity),
):
    return await integrity.delete_patient_cascade(patient_id)


@router.get("/{patient_id}/record", response_model=schemas.PatientRecord)
async def patient_record_endpoint(
    patient_id: RecordId,
    integrity: RecordIntegrityService = Depends(get_integrity),
):
    return await integrity.compose_patient_record(patient_id)
