"""Full reset of the record collections, for test and maintenance tooling."""
from __future__ import annotations

import logging

from medical_doc.db.store import RecordStore

logger = logging.getLogger(__name__)


async def reset_all_records(store: RecordStore) -> None:
    """Truncate patients, case histories and examination reports.

    Credentials are kept, and identifier counters keep increasing after a
    reset. Interactive deletes go through the integrity service instead.
    """
    logger.warning("reset_all_records: store=%s", store.name)
    await store.clear_all()
