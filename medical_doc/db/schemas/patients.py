from pydantic import BaseModel, ConfigDict, Field

from ._validators import OptionalIsoDate, RequiredText


class PatientBase(BaseModel):
    name: RequiredText = Field(..., max_length=255)
    age: int = Field(..., ge=0, le=150)
    gender: RequiredText
    dob: OptionalIsoDate = None
    blood_group: str | None = None
    contact: str | None = None
    email: str | None = None
    address: str | None = None


class PatientCreate(PatientBase):
    created_at: str | None = None


class PatientUpdate(BaseModel):
    name: RequiredText | None = None
    age: int | None = Field(default=None, ge=0, le=150)
    gender: RequiredText | None = None
    dob: OptionalIsoDate = None
    blood_group: str | None = None
    contact: str | None = None
    email: str | None = None
    address: str | None = None


class Patient(PatientBase):
    id: int
    created_at: str
    model_config = ConfigDict(from_attributes=True)
