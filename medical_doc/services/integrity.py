"""
Referential integrity across patients, case histories and examination reports.

The store has no foreign keys; this service is what keeps children from
outliving their patient:

- ``delete_patient_cascade`` removes children before the parent inside one
  transaction and reports the failing phase as a ``CascadeError``.
- ``add_case_history`` / ``add_examination_report`` refuse unknown patients.
- ``compose_patient_record`` builds the consolidated, date-sorted view.
- ``repair_orphans`` removes children whose patient is gone and can be re-run.
"""
from __future__ import annotations

import logging
from typing import Any, List, Mapping

from pydantic import BaseModel

from medical_doc.db import schemas
from medical_doc.db.errors import CascadeError, NotFoundError, RecordStoreError, WriteError
from medical_doc.db.repositories import (
    CaseHistoryRepository,
    CollectionRepository,
    ExaminationReportRepository,
    PatientRepository,
)
from medical_doc.db.store import (
    CASE_HISTORIES,
    EXAMINATION_REPORTS,
    PATIENTS,
    RecordStore,
    StoreTransaction,
)

logger = logging.getLogger(__name__)

# Children are removed in this order, then the patient
CASCADE_PHASES = (CASE_HISTORIES, EXAMINATION_REPORTS)


def _most_recent_first(items: List[Any]) -> List[Any]:
    # ISO dates sort lexically; ties fall back to the newer id
    return sorted(items, key=lambda item: (item.date, item.id), reverse=True)


class RecordIntegrityService:
    """Multi-step operations over the three record collections."""

    def __init__(self, store: RecordStore):
        self.store = store
        self.patients = PatientRepository(store)
        self.case_histories = CaseHistoryRepository(store)
        self.examination_reports = ExaminationReportRepository(store)

    async def delete_patient_cascade(self, patient_id: int) -> schemas.CascadeResult:
        """Delete a patient together with all of its case histories and reports.

        All phases share one transaction: a failure rolls everything back and
        raises ``CascadeError`` naming the phase. Deleting an unknown patient
        with no children succeeds.
        """

        def _cascade(txn: StoreTransaction) -> schemas.CascadeResult:
            deleted = {}
            for collection in CASCADE_PHASES:
                try:
                    children = txn.read_by_index(collection, "patient_id", patient_id)
                    for child in children:
                        txn.delete(collection, child["id"])
                except RecordStoreError as exc:
                    raise CascadeError(patient_id, collection, exc) from exc
                deleted[collection] = len(children)
            try:
                existed = txn.read_one(PATIENTS, patient_id) is not None
                txn.delete(PATIENTS, patient_id)
            except RecordStoreError as exc:
                raise CascadeError(patient_id, "patient", exc) from exc
            return schemas.CascadeResult(
                patient_id=patient_id,
                case_histories_deleted=deleted[CASE_HISTORIES],
                examination_reports_deleted=deleted[EXAMINATION_REPORTS],
                patient_deleted=existed,
            )

        try:
            result = await self.store.atomic(_cascade)
        except CascadeError as exc:
            logger.error("cascade_failed: patient_id=%s step=%s error=%s", patient_id, exc.step, exc.cause)
            raise
        except WriteError as exc:
            logger.error("cascade_failed: patient_id=%s step=commit error=%s", patient_id, exc)
            raise CascadeError(patient_id, "commit", exc) from exc
        logger.info(
            "cascade_deleted: patient_id=%s case_histories=%d examination_reports=%d",
            patient_id,
            result.case_histories_deleted,
            result.examination_reports_deleted,
        )
        return result

    async def compose_patient_record(self, patient_id: int) -> schemas.PatientRecord:
        patient = await self.patients.get(patient_id)
        if patient is None:
            raise NotFoundError(PATIENTS, patient_id)
        histories = await self.case_histories.get_by_patient(patient_id)
        reports = await self.examination_reports.get_by_patient(patient_id)
        return schemas.PatientRecord(
            patient=patient,
            case_histories=_most_recent_first(histories),
            examination_reports=_most_recent_first(reports),
        )

    async def _add_child(self, repo: CollectionRepository, data: BaseModel | Mapping[str, Any]) -> int:
        record = repo.prepare(data)
        patient_id = record["patient_id"]

        def _guarded(txn: StoreTransaction) -> int:
            if txn.read_one(PATIENTS, patient_id) is None:
                raise NotFoundError(PATIENTS, patient_id)
            return txn.create(repo.collection, record)

        return await self.store.atomic(_guarded)

    async def add_case_history(self, data: schemas.CaseHistoryCreate | Mapping[str, Any]) -> int:
        """Create a case history, refusing patients that do not exist."""
        return await self._add_child(self.case_histories, data)

    async def add_examination_report(self, data: schemas.ExaminationReportCreate | Mapping[str, Any]) -> int:
        """Create an examination report, refusing patients that do not exist."""
        return await self._add_child(self.examination_reports, data)

    async def repair_orphans(self) -> schemas.RepairResult:
        """Delete child records whose patient no longer exists."""

        def _repair(txn: StoreTransaction) -> schemas.RepairResult:
            known = {p["id"] for p in txn.read_all(PATIENTS)}
            removed = {}
            for collection in CASCADE_PHASES:
                orphans = [r["id"] for r in txn.read_all(collection) if r["patient_id"] not in known]
                for record_id in orphans:
                    txn.delete(collection, record_id)
                removed[collection] = orphans
            return schemas.RepairResult(
                case_histories_removed=removed[CASE_HISTORIES],
                examination_reports_removed=removed[EXAMINATION_REPORTS],
            )

        result = await self.store.atomic(_repair)
        if result.total_removed:
            logger.warning(
                "orphans_removed: case_histories=%s examination_reports=%s",
                result.case_histories_removed,
                result.examination_reports_removed,
            )
        return result
