"""
API dependency helpers.

Resolves the store-backed services kept on ``app.state`` and enforces that a
valid session exists before any record operation runs.
"""
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Path, Request, status

from medical_doc.auth import CredentialService, SessionInfo, SessionManager
from medical_doc.db.repositories import (
    CaseHistoryRepository,
    ExaminationReportRepository,
    PatientRepository,
)
from medical_doc.db.store import MAX_RECORD_ID, RecordStore
from medical_doc.services import RecordIntegrityService

# Path identifiers outside the store's INTEGER range are rejected with 422
RecordId = Annotated[int, Path(ge=1, le=MAX_RECORD_ID)]


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_sessions(request: Request) -> SessionManager:
    return request.app.state.sessions


def get_credentials(request: Request) -> CredentialService:
    return request.app.state.credentials


def get_integrity(store: RecordStore = Depends(get_store)) -> RecordIntegrityService:
    return RecordIntegrityService(store)


def get_patients(store: RecordStore = Depends(get_store)) -> PatientRepository:
    return PatientRepository(store)


def get_case_histories(store: RecordStore = Depends(get_store)) -> CaseHistoryRepository:
    return CaseHistoryRepository(store)


def get_examination_reports(store: RecordStore = Depends(get_store)) -> ExaminationReportRepository:
    return ExaminationReportRepository(store)


def bearer_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()


def current_session(
    token: Optional[str] = Depends(bearer_token),
    sessions: SessionManager = Depends(get_sessions),
) -> Optional[SessionInfo]:
    return sessions.resolve(token)


# Contract: returns the active SessionInfo or raises 401 before any store call.
def require_session(info: Optional[SessionInfo] = Depends(current_session)) -> SessionInfo:
    if info is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return info


def require_admin(session: SessionInfo = Depends(require_session)) -> SessionInfo:
    if session.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return session
