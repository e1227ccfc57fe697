"""
Typed collection repository shared by the per-entity repositories.

Binds one collection name and its index names to the generic record store
operations and validates records through pydantic schemas on the way in and
out.
"""
from __future__ import annotations

from typing import Any, Generic, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel

from medical_doc.db.errors import NotFoundError
from medical_doc.db.models import now_utc_iso
from medical_doc.db.store import RecordStore, StoreTransaction

ReadT = TypeVar("ReadT", bound=BaseModel)


class CollectionRepository(Generic[ReadT]):
    collection: str
    read_schema: Type[ReadT]
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]

    def __init__(self, store: RecordStore):
        self.store = store

    def prepare(self, data: BaseModel | Mapping[str, Any]) -> dict:
        if not isinstance(data, self.create_schema):
            data = self.create_schema.model_validate(data)
        record = data.model_dump()
        if not record.get("created_at"):
            record["created_at"] = now_utc_iso()
        return record

    def _read(self, record: Optional[dict]) -> Optional[ReadT]:
        return self.read_schema.model_validate(record) if record is not None else None

    def _read_many(self, records: List[dict]) -> List[ReadT]:
        return [self.read_schema.model_validate(r) for r in records]

    async def add(self, data: BaseModel | Mapping[str, Any]) -> int:
        """Validate and insert a new record; returns the store-assigned id."""
        return await self.store.create(self.collection, self.prepare(data))

    async def get(self, record_id: int) -> Optional[ReadT]:
        return self._read(await self.store.read_one(self.collection, record_id))

    async def get_all(self) -> List[ReadT]:
        return self._read_many(await self.store.read_all(self.collection))

    async def find_by(self, index: str, value: Any) -> List[ReadT]:
        return self._read_many(await self.store.read_by_index(self.collection, index, value))

    async def update(self, record: ReadT | Mapping[str, Any]) -> ReadT:
        """Replace the stored record wholesale; ``record`` must carry its id."""
        if not isinstance(record, self.read_schema):
            record = self.read_schema.model_validate(record)
        await self.store.update(self.collection, record.model_dump())
        return record

    async def patch(self, record_id: int, changes: BaseModel | Mapping[str, Any]) -> ReadT:
        """Apply the explicitly set fields of ``changes`` in a single transaction."""
        if not isinstance(changes, self.update_schema):
            changes = self.update_schema.model_validate(changes)
        update_data = changes.model_dump(exclude_unset=True)

        def _apply(txn: StoreTransaction) -> ReadT:
            current = txn.read_one(self.collection, record_id)
            if current is None:
                raise NotFoundError(self.collection, record_id)
            merged = self.read_schema.model_validate({**current, **update_data})
            txn.update(self.collection, merged.model_dump())
            return merged

        return await self.store.atomic(_apply)

    async def delete(self, record_id: int) -> None:
        """Delete by id; absent ids are not an error."""
        await self.store.delete(self.collection, record_id)
