"""
Auth API endpoints: register, login, logout.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from medical_doc.api.deps import bearer_token, current_session, get_credentials
from medical_doc.auth import AuthenticationError, CredentialService, SessionInfo, UsernameTakenError
from medical_doc.db import schemas

router = APIRouter(prefix="/auth", tags=["auth"])


class Credentials(BaseModel):
    username: str
    password: str


class RegisterRequest(Credentials):
    role: schemas.Role = "user"


class LoginResponse(BaseModel):
    token: str
    user: schemas.UserPublic


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_endpoint(
    body: RegisterRequest,
    session: Optional[SessionInfo] = Depends(current_session),
    credentials: CredentialService = Depends(get_credentials),
):
    # Anyone may sign up as a plain user; other roles are granted by an admin
    if body.role != "user" and (session is None or session.role != "admin"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required to assign role")
    try:
        user_id = await credentials.register(body.username, body.password, body.role)
    except UsernameTakenError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return {"success": True, "user_id": user_id}


@router.post("/login", response_model=LoginResponse)
async def login_endpoint(
    body: Credentials,
    credentials: CredentialService = Depends(get_credentials),
):
    try:
        token, user = await credentials.login(body.username, body.password)
    except AuthenticationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    return LoginResponse(token=token, user=user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout_endpoint(
    token: Optional[str] = Depends(bearer_token),
    credentials: CredentialService = Depends(get_credentials),
):
    credentials.logout(token)
