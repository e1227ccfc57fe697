"""
Record store: engine handle, schema lifecycle and generic collection CRUD.

A ``RecordStore`` owns one SQLAlchemy engine. Collections map to tables and
secondary indexes map to indexed columns. Every public coroutine runs as one
transaction on a worker thread; calls against the same store are serialized
so the single engine handle never sees parallel work.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, TypeVar

from sqlalchemy import create_engine, delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from medical_doc.db import models
from medical_doc.db.errors import (
    ReadError,
    RecordStoreError,
    StoreOpenError,
    UnknownCollectionError,
    UnknownIndexError,
    WriteError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

PATIENTS = "patients"
CASE_HISTORIES = "case_histories"
EXAMINATION_REPORTS = "examination_reports"
USERS = "users"


@dataclass(frozen=True)
class CollectionSpec:
    model: type
    indexes: Tuple[str, ...]


COLLECTIONS: Dict[str, CollectionSpec] = {
    PATIENTS: CollectionSpec(models.Patient, ("name", "email")),
    CASE_HISTORIES: CollectionSpec(models.CaseHistory, ("patient_id", "date")),
    EXAMINATION_REPORTS: CollectionSpec(models.ExaminationReport, ("patient_id", "date", "type")),
    USERS: CollectionSpec(models.User, ("username",)),
}

# Collections truncated by clear_all; credentials survive a reset
PRIMARY_COLLECTIONS: Tuple[str, ...] = (PATIENTS, CASE_HISTORIES, EXAMINATION_REPORTS)

MIN_RECORD_ID = -(2**63)
MAX_RECORD_ID = 2**63 - 1


def _spec(collection: str) -> CollectionSpec:
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise UnknownCollectionError(collection) from None


def _beyond_id_range(record_id: Any) -> bool:
    """True for integers no 64-bit INTEGER column can hold."""
    return isinstance(record_id, int) and not MIN_RECORD_ID <= record_id <= MAX_RECORD_ID


def _to_record(obj) -> Dict[str, Any]:
    return {column.key: getattr(obj, column.key) for column in obj.__table__.columns}


class StoreTransaction:
    """Synchronous operations bound to one open session/transaction.

    Obtained through :meth:`RecordStore.atomic`; every call made on the same
    instance commits or rolls back together.
    """

    def __init__(self, session: Session):
        self.session = session

    def create(self, collection: str, record: Mapping[str, Any]) -> int:
        spec = _spec(collection)
        if not isinstance(record, Mapping):
            raise WriteError(f"Record for {collection} must be a mapping, got {type(record).__name__}")
        if record.get("id") is not None:
            raise WriteError(f"Identifiers are assigned by the store; refusing caller-supplied id for {collection}")
        columns = set(spec.model.__table__.columns.keys())
        unknown = sorted(k for k in record if k not in columns)
        if unknown:
            raise WriteError(f"Unknown fields for {collection}: {', '.join(unknown)}")
        obj = spec.model(**{k: v for k, v in record.items() if k != "id"})
        try:
            self.session.add(obj)
            self.session.flush()
        except (SQLAlchemyError, OverflowError) as exc:
            raise WriteError(f"Failed to add data to {collection}: {exc}") from exc
        return obj.id

    def read_one(self, collection: str, record_id: int) -> Optional[Dict[str, Any]]:
        spec = _spec(collection)
        if _beyond_id_range(record_id):
            return None
        try:
            obj = self.session.get(spec.model, record_id)
        except SQLAlchemyError as exc:
            raise ReadError(f"Failed to get data from {collection}: {exc}") from exc
        return _to_record(obj) if obj is not None else None

    def read_all(self, collection: str) -> List[Dict[str, Any]]:
        spec = _spec(collection)
        try:
            rows = self.session.scalars(select(spec.model).order_by(spec.model.id)).all()
        except SQLAlchemyError as exc:
            raise ReadError(f"Failed to get data from {collection}: {exc}") from exc
        return [_to_record(r) for r in rows]

    def read_by_index(self, collection: str, index: str, value: Any) -> List[Dict[str, Any]]:
        spec = _spec(collection)
        if index not in spec.indexes:
            raise UnknownIndexError(collection, index)
        column = getattr(spec.model, index)
        try:
            rows = self.session.scalars(
                select(spec.model).where(column == value).order_by(spec.model.id)
            ).all()
        except OverflowError:
            return []
        except SQLAlchemyError as exc:
            raise ReadError(f"Failed to get data from {collection} by index {index}: {exc}") from exc
        return [_to_record(r) for r in rows]

    def update(self, collection: str, record: Mapping[str, Any]) -> int:
        spec = _spec(collection)
        record_id = record.get("id") if isinstance(record, Mapping) else None
        if record_id is None:
            raise WriteError(f"Update on {collection} requires a previously assigned id")
        columns = spec.model.__table__.columns
        unknown = sorted(k for k in record if k not in columns.keys())
        if unknown:
            raise WriteError(f"Unknown fields for {collection}: {', '.join(unknown)}")
        try:
            obj = self.session.get(spec.model, record_id)
            if obj is None:
                raise WriteError(f"Failed to update data in {collection}: id {record_id} does not exist")
            # Wholesale replace: fields missing from the record are cleared
            for column in columns:
                if column.key != "id":
                    setattr(obj, column.key, record.get(column.key))
            self.session.flush()
        except (SQLAlchemyError, OverflowError) as exc:
            raise WriteError(f"Failed to update data in {collection}: {exc}") from exc
        return record_id

    def delete(self, collection: str, record_id: int) -> None:
        spec = _spec(collection)
        if _beyond_id_range(record_id):
            return
        try:
            self.session.execute(delete(spec.model).where(spec.model.id == record_id))
        except SQLAlchemyError as exc:
            raise WriteError(f"Failed to delete data from {collection}: {exc}") from exc

    def clear(self, collection: str) -> None:
        spec = _spec(collection)
        try:
            self.session.execute(delete(spec.model))
        except SQLAlchemyError as exc:
            raise WriteError(f"Failed to clear {collection}: {exc}") from exc


class RecordStore:
    """Async facade over one storage engine.

    Construct it explicitly, ``await store.open()`` once, then hand the same
    instance to repositories and services.
    """

    def __init__(self, url: str, name: str = "MedicalDocDB", version: int = 1, *, engine_kwargs: Optional[dict] = None):
        if version < 1:
            raise ValueError("Store version must be >= 1")
        self.url = url
        self.name = name
        self.version = version
        self._engine_kwargs = engine_kwargs
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self._lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def _build_engine(self) -> Engine:
        kwargs = dict(self._engine_kwargs or {})
        if self.url.startswith("sqlite"):
            # Work runs on worker threads, one call at a time
            kwargs.setdefault("connect_args", {"check_same_thread": False})
            if ":memory:" in self.url or self.url.rstrip("/").endswith("sqlite:"):
                # Keep a single connection so the in-memory schema persists
                kwargs.setdefault("poolclass", StaticPool)
        return create_engine(self.url, **kwargs)

    def _open_sync(self) -> Engine:
        engine = self._build_engine()
        try:
            with engine.begin() as conn:
                models.StoreMeta.__table__.create(conn, checkfirst=True)
                current = conn.execute(
                    select(models.StoreMeta.version).where(models.StoreMeta.name == self.name)
                ).scalar_one_or_none()
                if current is not None and current > self.version:
                    raise StoreOpenError(
                        f"Store {self.name!r} is at version {current}; cannot open with older version {self.version}"
                    )
                if current is None or current < self.version:
                    logger.info(
                        "store_upgrade: name=%s from=%s to=%s", self.name, current or 0, self.version
                    )
                    models.Base.metadata.create_all(bind=conn)
                    meta = models.StoreMeta.__table__
                    if current is None:
                        conn.execute(meta.insert().values(name=self.name, version=self.version, upgraded_at=models.now_utc_iso()))
                    else:
                        conn.execute(
                            meta.update()
                            .where(meta.c.name == self.name)
                            .values(version=self.version, upgraded_at=models.now_utc_iso())
                        )
        except Exception:
            engine.dispose()
            raise
        return engine

    async def open(self) -> "RecordStore":
        """Open the engine and create/upgrade the schema. Safe to call repeatedly."""
        if self._engine is not None:
            return self
        async with self._lock:
            if self._engine is not None:
                return self
            try:
                engine = await asyncio.to_thread(self._open_sync)
            except StoreOpenError:
                raise
            except (SQLAlchemyError, OSError) as exc:
                logger.error("store_open_failed: name=%s url=%s error=%s", self.name, self.url, exc)
                raise StoreOpenError(f"Failed to open database {self.name!r}: {exc}") from exc
            self._engine = engine
            self._session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
            logger.info("store_opened: name=%s version=%s", self.name, self.version)
        return self

    async def close(self) -> None:
        async with self._lock:
            if self._engine is not None:
                self._engine.dispose()
            self._engine = None
            self._session_factory = None

    def _in_transaction(self, work: Callable[[StoreTransaction], T]) -> T:
        with self._session_factory() as session:
            with session.begin():
                return work(StoreTransaction(session))

    async def _run(self, work: Callable[[StoreTransaction], T], error_cls: type, what: str) -> T:
        if self._engine is None:
            raise StoreOpenError(f"Store {self.name!r} has not been opened")
        async with self._lock:
            try:
                return await asyncio.to_thread(self._in_transaction, work)
            except RecordStoreError:
                raise
            except SQLAlchemyError as exc:
                # Commit-time failures land here
                raise error_cls(f"{what}: {exc}") from exc

    async def create(self, collection: str, record: Mapping[str, Any]) -> int:
        """Insert ``record`` and return the identifier assigned by the store."""
        return await self._run(lambda txn: txn.create(collection, record), WriteError, f"Failed to add data to {collection}")

    async def read_all(self, collection: str) -> List[Dict[str, Any]]:
        return await self._run(lambda txn: txn.read_all(collection), ReadError, f"Failed to get data from {collection}")

    async def read_one(self, collection: str, record_id: int) -> Optional[Dict[str, Any]]:
        """Return the record or ``None`` when the identifier is absent."""
        return await self._run(lambda txn: txn.read_one(collection, record_id), ReadError, f"Failed to get data from {collection}")

    async def read_by_index(self, collection: str, index: str, value: Any) -> List[Dict[str, Any]]:
        return await self._run(
            lambda txn: txn.read_by_index(collection, index, value),
            ReadError,
            f"Failed to get data from {collection} by index {index}",
        )

    async def update(self, collection: str, record: Mapping[str, Any]) -> int:
        """Replace the stored record carrying ``record['id']`` wholesale."""
        return await self._run(lambda txn: txn.update(collection, record), WriteError, f"Failed to update data in {collection}")

    async def delete(self, collection: str, record_id: int) -> None:
        """Delete by identifier; deleting an absent identifier succeeds."""
        await self._run(lambda txn: txn.delete(collection, record_id), WriteError, f"Failed to delete data from {collection}")

    async def clear_all(self) -> None:
        def _clear(txn: StoreTransaction) -> None:
            for collection in PRIMARY_COLLECTIONS:
                txn.clear(collection)

        await self._run(_clear, WriteError, "Failed to clear collections")
        logger.info("store_cleared: name=%s collections=%s", self.name, ",".join(PRIMARY_COLLECTIONS))

    async def atomic(self, work: Callable[[StoreTransaction], T]) -> T:
        """Run ``work`` inside one transaction spanning every collection.

        Any exception raised by ``work`` rolls the whole unit back and is
        re-raised unchanged.
        """
        return await self._run(work, WriteError, "Transaction failed")


__all__ = [
    "RecordStore",
    "StoreTransaction",
    "CollectionSpec",
    "COLLECTIONS",
    "PRIMARY_COLLECTIONS",
    "PATIENTS",
    "CASE_HISTORIES",
    "EXAMINATION_REPORTS",
    "USERS",
]
