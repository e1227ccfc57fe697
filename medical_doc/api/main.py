"""
FastAPI app assembly: store lifecycle, error mapping and router wiring.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, status
from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from medical_doc import __version__
from medical_doc.api.auth import router as auth_router
from medical_doc.api.patients import router as patients_router
from medical_doc.api.records import router as records_router
from medical_doc.auth import CredentialService, SessionManager
from medical_doc.db.database import build_store
from medical_doc.db.errors import CascadeError, NotFoundError, RecordStoreError, WriteError
from medical_doc.db.store import RecordStore
from medical_doc.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


def configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level)
    logger.setLevel(level)


def create_app(settings: Optional[Settings] = None, store: Optional[RecordStore] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_store = store or build_store(settings)
        await app_store.open()
        sessions = SessionManager()
        credentials = CredentialService(app_store, sessions)
        if settings.default_admin_enabled:
            await credentials.ensure_default_admin(settings.default_admin_password)
        app.state.store = app_store
        app.state.sessions = sessions
        app.state.credentials = credentials
        logger.info("app_startup: store=%s version=%s log_level=%s", app_store.name, app_store.version, settings.log_level)
        try:
            yield
        finally:
            await app_store.close()

    app = FastAPI(
        title="Medical Doc Records Service",
        description="Patients, case histories and examination reports kept in a local store.",
        version=__version__,
        lifespan=lifespan,
    )

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_404_NOT_FOUND)

    @app.exception_handler(CascadeError)
    async def _cascade_failed(request: Request, exc: CascadeError):
        return JSONResponse(
            {"detail": str(exc), "step": exc.step, "rolled_back": exc.rolled_back},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.exception_handler(WriteError)
    async def _write_failed(request: Request, exc: WriteError):
        return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(RecordStoreError)
    async def _store_failed(request: Request, exc: RecordStoreError):
        logger.error("store_error: path=%s error=%s", request.url.path, exc)
        return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.exception_handler(ValidationError)
    async def _invalid_record(request: Request, exc: ValidationError):
        return JSONResponse(
            {"detail": exc.errors(include_url=False, include_context=False)},
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.include_router(auth_router)
    app.include_router(patients_router)
    app.include_router(records_router)
    return app
