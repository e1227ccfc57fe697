import pytest

from medical_doc.db.errors import (
    ReadError,
    StoreOpenError,
    UnknownCollectionError,
    UnknownIndexError,
    WriteError,
)
from medical_doc.db.store import (
    CASE_HISTORIES,
    EXAMINATION_REPORTS,
    PATIENTS,
    USERS,
    RecordStore,
)
from tests.factories import history_data, patient_data, report_data


@pytest.mark.asyncio
async def test_create_then_read_one_returns_input_plus_id(store):
    data = patient_data(created_at="2024-01-01T00:00:00+00:00")
    patient_id = await store.create(PATIENTS, data)
    assert patient_id == 1

    record = await store.read_one(PATIENTS, patient_id)
    assert record["id"] == 1
    for key, value in data.items():
        assert record[key] == value
    # Optional fields not supplied come back empty
    assert record["email"] is None


@pytest.mark.asyncio
async def test_read_one_absent_is_none(store):
    assert await store.read_one(PATIENTS, 12345) is None


@pytest.mark.asyncio
async def test_read_all_empty_collection_is_empty_list(store):
    assert await store.read_all(PATIENTS) == []
    assert await store.read_all(CASE_HISTORIES) == []


@pytest.mark.asyncio
async def test_identifiers_increase_and_are_not_reused(store):
    first = await store.create(PATIENTS, patient_data(name="A"))
    await store.delete(PATIENTS, first)
    second = await store.create(PATIENTS, patient_data(name="B"))
    assert (first, second) == (1, 2)


@pytest.mark.asyncio
async def test_counters_are_independent_per_collection(store):
    patient_id = await store.create(PATIENTS, patient_data())
    history_id = await store.create(CASE_HISTORIES, history_data(patient_id))
    report_id = await store.create(EXAMINATION_REPORTS, report_data(patient_id))
    assert (patient_id, history_id, report_id) == (1, 1, 1)


@pytest.mark.asyncio
async def test_read_by_index_returns_exactly_matching_records(store):
    p1 = await store.create(PATIENTS, patient_data(name="One"))
    p2 = await store.create(PATIENTS, patient_data(name="Two"))
    expected = []
    # Interleave creation across patients
    for i, date in enumerate(["2024-03-01", "2024-01-01", "2024-02-01"]):
        expected.append(await store.create(CASE_HISTORIES, history_data(p1, date=date)))
        await store.create(CASE_HISTORIES, history_data(p2, date=date, complaint=f"other {i}"))

    found = await store.read_by_index(CASE_HISTORIES, "patient_id", p1)
    assert sorted(r["id"] for r in found) == sorted(expected)
    assert all(r["patient_id"] == p1 for r in found)


@pytest.mark.asyncio
async def test_read_by_index_without_matches_is_empty(store):
    assert await store.read_by_index(CASE_HISTORIES, "patient_id", 999) == []
    assert await store.read_by_index(EXAMINATION_REPORTS, "type", "x-ray") == []


@pytest.mark.asyncio
async def test_read_by_secondary_indexes(store):
    patient_id = await store.create(PATIENTS, patient_data(email="jd@example.com"))
    await store.create(EXAMINATION_REPORTS, report_data(patient_id, type="x-ray", title="Chest"))
    await store.create(EXAMINATION_REPORTS, report_data(patient_id, date="2024-02-02"))

    assert [r["title"] for r in await store.read_by_index(EXAMINATION_REPORTS, "type", "x-ray")] == ["Chest"]
    assert len(await store.read_by_index(EXAMINATION_REPORTS, "date", "2024-02-02")) == 1
    assert [r["id"] for r in await store.read_by_index(PATIENTS, "email", "jd@example.com")] == [patient_id]


@pytest.mark.asyncio
async def test_unknown_index_raises(store):
    with pytest.raises(UnknownIndexError):
        await store.read_by_index(CASE_HISTORIES, "complaint", "headache")


@pytest.mark.asyncio
async def test_unknown_collection_is_rejected_on_reads_and_writes(store):
    with pytest.raises(UnknownCollectionError) as excinfo:
        await store.create("prescriptions", {"name": "x"})
    assert not isinstance(excinfo.value, WriteError)
    with pytest.raises(UnknownCollectionError) as excinfo:
        await store.read_all("prescriptions")
    assert not isinstance(excinfo.value, (WriteError, ReadError))
    with pytest.raises(UnknownCollectionError):
        await store.read_one("prescriptions", 1)
    with pytest.raises(UnknownCollectionError):
        await store.read_by_index("prescriptions", "name", "x")


@pytest.mark.asyncio
async def test_ids_beyond_integer_range_are_absent(store):
    await store.create(PATIENTS, patient_data())
    huge = 2**64

    assert await store.read_one(PATIENTS, huge) is None
    assert await store.read_one(PATIENTS, -(2**64)) is None
    assert await store.read_by_index(CASE_HISTORIES, "patient_id", huge) == []
    await store.delete(PATIENTS, huge)
    assert len(await store.read_all(PATIENTS)) == 1

    with pytest.raises(WriteError):
        await store.update(PATIENTS, {**patient_data(), "id": huge})
    with pytest.raises(WriteError):
        await store.create(CASE_HISTORIES, history_data(huge))
    assert await store.read_all(CASE_HISTORIES) == []


@pytest.mark.asyncio
async def test_create_rejects_caller_supplied_id(store):
    with pytest.raises(WriteError):
        await store.create(PATIENTS, {**patient_data(), "id": 7})


@pytest.mark.asyncio
async def test_create_rejects_unknown_fields(store):
    with pytest.raises(WriteError):
        await store.create(PATIENTS, {**patient_data(), "shoe_size": 44})


@pytest.mark.asyncio
async def test_engine_rejection_is_write_error(store):
    # name is NOT NULL
    with pytest.raises(WriteError):
        await store.create(PATIENTS, {"age": 3})
    assert await store.read_all(PATIENTS) == []


@pytest.mark.asyncio
async def test_update_replaces_record_wholesale(store):
    patient_id = await store.create(PATIENTS, patient_data(email="old@example.com"))
    record = await store.read_one(PATIENTS, patient_id)

    replacement = {k: v for k, v in record.items() if k != "email"}
    replacement["age"] = 36
    assert await store.update(PATIENTS, replacement) == patient_id

    updated = await store.read_one(PATIENTS, patient_id)
    assert updated["age"] == 36
    assert updated["email"] is None


@pytest.mark.asyncio
async def test_update_requires_existing_id(store):
    with pytest.raises(WriteError):
        await store.update(PATIENTS, patient_data())
    with pytest.raises(WriteError):
        await store.update(PATIENTS, {**patient_data(), "id": 42, "created_at": "2024-01-01"})


@pytest.mark.asyncio
async def test_delete_is_idempotent(store):
    patient_id = await store.create(PATIENTS, patient_data())
    await store.delete(PATIENTS, patient_id)
    await store.delete(PATIENTS, patient_id)
    await store.delete(PATIENTS, 999)
    assert await store.read_one(PATIENTS, patient_id) is None


@pytest.mark.asyncio
async def test_clear_all_truncates_record_collections_only(store):
    patient_id = await store.create(PATIENTS, patient_data())
    await store.create(CASE_HISTORIES, history_data(patient_id))
    await store.create(EXAMINATION_REPORTS, report_data(patient_id))
    await store.create(USERS, {"username": "nurse", "password": "x", "role": "user"})

    await store.clear_all()

    for collection in (PATIENTS, CASE_HISTORIES, EXAMINATION_REPORTS):
        assert await store.read_all(collection) == []
    assert len(await store.read_all(USERS)) == 1
    # Counters continue after a reset
    assert await store.create(PATIENTS, patient_data()) == 2


@pytest.mark.asyncio
async def test_atomic_rolls_back_on_error(store):
    def _work(txn):
        txn.create(PATIENTS, patient_data())
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await store.atomic(_work)
    assert await store.read_all(PATIENTS) == []


@pytest.mark.asyncio
async def test_open_is_idempotent(store):
    assert await store.open() is store
    assert store.is_open


@pytest.mark.asyncio
async def test_operations_before_open_fail():
    unopened = RecordStore("sqlite+pysqlite:///:memory:")
    with pytest.raises(StoreOpenError):
        await unopened.read_all(PATIENTS)


@pytest.mark.asyncio
async def test_open_failure_is_store_open_error(tmp_path):
    bad = RecordStore(f"sqlite+pysqlite:///{tmp_path}/missing/dir/records.db")
    with pytest.raises(StoreOpenError):
        await bad.open()
    assert not bad.is_open


@pytest.mark.asyncio
async def test_version_upgrade_keeps_data_and_downgrade_is_refused(tmp_path):
    url = f"sqlite+pysqlite:///{tmp_path}/records.db"

    v1 = await RecordStore(url, name="MedicalDocDB", version=1).open()
    patient_id = await v1.create(PATIENTS, patient_data())
    await v1.close()

    v2 = await RecordStore(url, name="MedicalDocDB", version=2).open()
    assert (await v2.read_one(PATIENTS, patient_id))["name"] == "John Doe"
    await v2.close()

    with pytest.raises(StoreOpenError):
        await RecordStore(url, name="MedicalDocDB", version=1).open()


def test_version_must_be_positive():
    with pytest.raises(ValueError):
        RecordStore("sqlite+pysqlite:///:memory:", version=0)
