import pytest
import pytest_asyncio

from medical_doc.db.store import RecordStore
from medical_doc.utils.config import MEMORY_DATABASE_URL, Settings, reset_settings_cache


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are cached per process; tests that patch env need a clean cache."""
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url=MEMORY_DATABASE_URL,
        store_name="MedicalDocTestDB",
        store_version=1,
        default_admin_enabled=True,
        default_admin_password="admin",
        log_level="WARNING",
    )


# Each test gets its own in-memory database
@pytest_asyncio.fixture
async def store():
    s = RecordStore(MEMORY_DATABASE_URL, name="MedicalDocTestDB", version=1)
    await s.open()
    try:
        yield s
    finally:
        await s.close()
