from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal['admin', 'user']


class UserBase(BaseModel):
    username: str = Field(..., min_length=1, max_length=150)
    role: Role = 'user'


class UserCreate(UserBase):
    # Password verifier, never the plain password
    password: str
    created_at: str | None = None


class UserUpdate(BaseModel):
    username: str | None = Field(None, min_length=1, max_length=150)
    role: Role | None = None
    password: str | None = None


class User(UserBase):
    id: int
    password: str
    created_at: str
    model_config = ConfigDict(from_attributes=True)


class UserPublic(UserBase):
    id: int
    created_at: str
