"""
Case history and examination report endpoints.

Children are created under their patient's path so the integrity service can
refuse unknown patients.
"""
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, status

from medical_doc.api.deps import (
    RecordId,
    get_case_histories,
    get_examination_reports,
    get_integrity,
    require_admin,
    require_session,
)
from medical_doc.db import schemas
from medical_doc.db.errors import NotFoundError
from medical_doc.db.repositories import CaseHistoryRepository, ExaminationReportRepository
from medical_doc.db.store import CASE_HISTORIES, EXAMINATION_REPORTS
from medical_doc.services import RecordIntegrityService

router = APIRouter(tags=["records"], dependencies=[Depends(require_session)])


@router.get("/patients/{patient_id}/case-histories", response_model=List[schemas.CaseHistory])
async def list_case_histories_endpoint(
    patient_id: RecordId,
    case_histories: CaseHistoryRepository = Depends(get_case_histories),
):
    return await case_histories.get_by_patient(patient_id)


@router.post(
    "/patients/{patient_id}/case-histories",
    response_model=schemas.CaseHistory,
    status_code=status.HTTP_201_CREATED,
)
async def create_case_history_endpoint(
    patient_id: RecordId,
    body: Dict[str, Any] = Body(...),
    integrity: RecordIntegrityService = Depends(get_integrity),
):
    data = schemas.CaseHistoryCreate.model_validate({**body, "patient_id": patient_id})
    history_id = await integrity.add_case_history(data)
    return await integrity.case_histories.get(history_id)


@router.get("/case-histories/{history_id}", response_model=schemas.CaseHistory)
async def get_case_history_endpoint(
    history_id: RecordId,
    case_histories: CaseHistoryRepository = Depends(get_case_histories),
):
    history = await case_histories.get(history_id)
    if history is None:
        raise NotFoundError(CASE_HISTORIES, history_id)
    return history


@router.delete("/case-histories/{history_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_case_history_endpoint(
    history_id: RecordId,
    case_histories: CaseHistoryRepository = Depends(get_case_histories),
):
    await case_histories.delete(history_id)


@router.get("/patients/{patient_id}/reports", response_model=List[schemas.ExaminationReport])
async def list_reports_endpoint(
    patient_id: RecordId,
    reports: ExaminationReportRepository = Depends(get_examination_reports),
):
    return await reports.get_by_patient(patient_id)


@router.post(
    "/patients/{patient_id}/reports",
    response_model=schemas.ExaminationReport,
    status_code=status.HTTP_201_CREATED,
)
async def create_report_endpoint(
    patient_id: RecordId,
    body: Dict[str, Any] = Body(...),
    integrity: RecordIntegrityService = Depends(get_integrity),
):
    data = schemas.ExaminationReportCreate.model_validate({**body, "patient_id": patient_id})
    report_id = await integrity.add_examination_report(data)
    return await integrity.examination_reports.get(report_id)


# Single report, attachment included, for downloading the stored file
@router.get("/reports/{report_id}", response_model=schemas.ExaminationReport)
async def get_report_endpoint(
    report_id: RecordId,
    reports: ExaminationReportRepository = Depends(get_examination_reports),
):
    report = await reports.get(report_id)
    if report is None:
        raise NotFoundError(EXAMINATION_REPORTS, report_id)
    return report


@router.delete("/reports/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_report_endpoint(
    report_id: RecordId,
    reports: ExaminationReportRepository = Depends(get_examination_reports),
):
    await reports.delete(report_id)


@router.post(
    "/maintenance/repair-orphans",
    response_model=schemas.RepairResult,
    dependencies=[Depends(require_admin)],
)
async def repair_orphans_endpoint(integrity: RecordIntegrityService = Depends(get_integrity)):
    return await integrity.repair_orphans()
