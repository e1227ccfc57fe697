"""
Error taxonomy for the record store and the integrity service.

Every failure surfaces as an exception raised from the awaited coroutine.
Engine exceptions are chained (``raise ... from exc``) so the original cause
stays available to callers and logs.
"""
from __future__ import annotations

from typing import Optional


class RecordStoreError(Exception):
    """Base class for all persistence-layer failures."""


class StoreOpenError(RecordStoreError):
    """The storage engine could not be opened, upgraded, or is corrupt."""


class WriteError(RecordStoreError):
    """A create/update/delete was rejected."""


class UnknownCollectionError(RecordStoreError):
    """The named collection is not part of the schema.

    Raised by reads and writes alike, before any engine work starts.
    """

    def __init__(self, collection: str):
        super().__init__(f"Unknown collection: {collection!r}")
        self.collection = collection


class ReadError(RecordStoreError):
    """A read against the engine failed."""


class UnknownIndexError(ReadError):
    """The named secondary index does not exist on the collection."""

    def __init__(self, collection: str, index: str):
        super().__init__(f"Collection {collection!r} has no index {index!r}")
        self.collection = collection
        self.index = index


class NotFoundError(RecordStoreError):
    """A read or compose targeted an identifier that does not exist."""

    def __init__(self, collection: str, record_id):
        super().__init__(f"{collection} record {record_id} not found")
        self.collection = collection
        self.record_id = record_id


class CascadeError(RecordStoreError):
    """A step of the patient delete cascade failed.

    ``step`` names the phase that failed: ``case_histories``,
    ``examination_reports`` or ``patient``. ``rolled_back`` tells the caller
    whether the earlier phases were undone.
    """

    def __init__(
        self,
        patient_id: int,
        step: str,
        cause: Optional[BaseException] = None,
        *,
        rolled_back: bool = True,
    ):
        super().__init__(f"Cascade delete of patient {patient_id} failed at step '{step}': {cause}")
        self.patient_id = patient_id
        self.step = step
        self.cause = cause
        self.rolled_back = rolled_back
