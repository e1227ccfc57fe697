import logging

import pytest

from medical_doc.db.errors import CascadeError, NotFoundError, WriteError
from medical_doc.db.repositories import CaseHistoryRepository, ExaminationReportRepository
from medical_doc.db.store import CASE_HISTORIES, EXAMINATION_REPORTS, PATIENTS, StoreTransaction
from medical_doc.services import RecordIntegrityService
from tests.factories import history_data, patient_data, report_data


@pytest.fixture
def service(store):
    return RecordIntegrityService(store)


@pytest.mark.asyncio
async def test_cascade_scenario_john_doe(service, store):
    patient_id = await service.patients.add(patient_data(name="John Doe", age=35))
    assert patient_id == 1
    history_id = await service.add_case_history(history_data(1, date="2024-01-15", complaint="headache"))
    assert history_id == 1

    result = await service.delete_patient_cascade(1)

    assert result.case_histories_deleted == 1
    assert result.patient_deleted is True
    assert await store.read_by_index(CASE_HISTORIES, "patient_id", 1) == []


@pytest.mark.asyncio
async def test_cascade_removes_every_dependent(service, store):
    keep = await service.patients.add(patient_data(name="Keep"))
    doomed = await service.patients.add(patient_data(name="Doomed"))
    for date in ("2024-01-01", "2024-02-01", "2024-03-01"):
        await service.add_case_history(history_data(doomed, date=date))
        await service.add_examination_report(report_data(doomed, date=date))
    await service.add_case_history(history_data(keep))
    await service.add_examination_report(report_data(keep))

    result = await service.delete_patient_cascade(doomed)

    assert (result.case_histories_deleted, result.examination_reports_deleted) == (3, 3)
    assert await store.read_by_index(CASE_HISTORIES, "patient_id", doomed) == []
    assert await store.read_by_index(EXAMINATION_REPORTS, "patient_id", doomed) == []
    assert await store.read_one(PATIENTS, doomed) is None
    # The other patient's records are untouched
    assert len(await store.read_by_index(CASE_HISTORIES, "patient_id", keep)) == 1
    assert len(await store.read_by_index(EXAMINATION_REPORTS, "patient_id", keep)) == 1


@pytest.mark.asyncio
async def test_cascade_on_missing_patient_succeeds(service):
    result = await service.delete_patient_cascade(404)
    assert result.patient_deleted is False
    assert result.case_histories_deleted == 0
    # Running it again is harmless
    await service.delete_patient_cascade(404)


@pytest.mark.asyncio
async def test_cascade_failure_reports_step_and_rolls_back(service, store, monkeypatch, caplog):
    patient_id = await service.patients.add(patient_data())
    await service.add_case_history(history_data(patient_id))
    await service.add_examination_report(report_data(patient_id))

    original_delete = StoreTransaction.delete

    def failing_delete(self, collection, record_id):
        if collection == EXAMINATION_REPORTS:
            raise WriteError("Failed to delete data from examination_reports: disk I/O error")
        return original_delete(self, collection, record_id)

    monkeypatch.setattr(StoreTransaction, "delete", failing_delete)

    with caplog.at_level(logging.ERROR, logger="medical_doc.services.integrity"):
        with pytest.raises(CascadeError) as excinfo:
            await service.delete_patient_cascade(patient_id)

    err = excinfo.value
    assert err.step == EXAMINATION_REPORTS
    assert err.patient_id == patient_id
    assert err.rolled_back is True
    assert isinstance(err.cause, WriteError)
    assert "cascade_failed" in caplog.text

    monkeypatch.undo()
    # Case histories deleted before the failure were restored by the rollback
    assert len(await store.read_by_index(CASE_HISTORIES, "patient_id", patient_id)) == 1
    assert len(await store.read_by_index(EXAMINATION_REPORTS, "patient_id", patient_id)) == 1
    assert await store.read_one(PATIENTS, patient_id) is not None

    # Retrying once the fault is gone completes the cascade
    await service.delete_patient_cascade(patient_id)
    assert await store.read_one(PATIENTS, patient_id) is None


@pytest.mark.asyncio
async def test_cascade_failure_on_parent_step(service, store, monkeypatch):
    patient_id = await service.patients.add(patient_data())
    await service.add_case_history(history_data(patient_id))

    original_delete = StoreTransaction.delete

    def failing_delete(self, collection, record_id):
        if collection == PATIENTS:
            raise WriteError("rejected")
        return original_delete(self, collection, record_id)

    monkeypatch.setattr(StoreTransaction, "delete", failing_delete)
    with pytest.raises(CascadeError) as excinfo:
        await service.delete_patient_cascade(patient_id)
    assert excinfo.value.step == "patient"
    monkeypatch.undo()
    assert len(await store.read_by_index(CASE_HISTORIES, "patient_id", patient_id)) == 1


@pytest.mark.asyncio
async def test_compose_sorts_children_most_recent_first(service):
    patient_id = await service.patients.add(patient_data())
    await service.add_case_history(history_data(patient_id, date="2024-01-10", complaint="first"))
    await service.add_case_history(history_data(patient_id, date="2024-01-20", complaint="second"))
    await service.add_examination_report(report_data(patient_id, date="2023-12-01", title="Old"))
    await service.add_examination_report(report_data(patient_id, date="2024-02-01", title="New"))
    await service.add_examination_report(report_data(patient_id, date="2024-01-05", title="Mid"))

    record = await service.compose_patient_record(patient_id)

    assert record.patient.id == patient_id
    assert [h.date for h in record.case_histories] == ["2024-01-20", "2024-01-10"]
    assert [r.title for r in record.examination_reports] == ["New", "Mid", "Old"]


@pytest.mark.asyncio
async def test_compose_same_date_newest_entry_first(service):
    patient_id = await service.patients.add(patient_data())
    older = await service.add_case_history(history_data(patient_id, date="2024-01-10"))
    newer = await service.add_case_history(history_data(patient_id, date="2024-01-10"))

    record = await service.compose_patient_record(patient_id)
    assert [h.id for h in record.case_histories] == [newer, older]


@pytest.mark.asyncio
async def test_compose_with_no_children_is_valid(service):
    patient_id = await service.patients.add(patient_data())
    record = await service.compose_patient_record(patient_id)
    assert record.case_histories == []
    assert record.examination_reports == []


@pytest.mark.asyncio
async def test_compose_unknown_patient_is_not_found(service):
    with pytest.raises(NotFoundError) as excinfo:
        await service.compose_patient_record(77)
    assert excinfo.value.record_id == 77


@pytest.mark.asyncio
async def test_guarded_create_rejects_unknown_patient(service, store):
    with pytest.raises(NotFoundError):
        await service.add_case_history(history_data(5))
    with pytest.raises(NotFoundError):
        await service.add_examination_report(report_data(5))
    assert await store.read_all(CASE_HISTORIES) == []
    assert await store.read_all(EXAMINATION_REPORTS) == []


@pytest.mark.asyncio
async def test_repair_orphans_is_rerunnable(service, store):
    patient_id = await service.patients.add(patient_data())
    await service.add_case_history(history_data(patient_id))
    # Unguarded writes straight through the repositories can orphan records
    orphan_history = await CaseHistoryRepository(store).add(history_data(42))
    orphan_report = await ExaminationReportRepository(store).add(report_data(42))

    result = await service.repair_orphans()
    assert result.case_histories_removed == [orphan_history]
    assert result.examination_reports_removed == [orphan_report]
    assert result.total_removed == 2

    again = await service.repair_orphans()
    assert again.total_removed == 0
    assert len(await store.read_by_index(CASE_HISTORIES, "patient_id", patient_id)) == 1
