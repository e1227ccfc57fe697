from pydantic import BaseModel, ConfigDict, Field

from ._validators import IsoDate, OptionalIsoDate, RequiredText


class CaseHistoryBase(BaseModel):
    patient_id: int = Field(..., ge=1)
    date: IsoDate
    complaint: RequiredText
    symptoms: str | None = None
    diagnosis: str | None = None
    treatment: str | None = None
    notes: str | None = None


class CaseHistoryCreate(CaseHistoryBase):
    created_at: str | None = None


class CaseHistoryUpdate(BaseModel):
    date: OptionalIsoDate = None
    complaint: RequiredText | None = None
    symptoms: str | None = None
    diagnosis: str | None = None
    treatment: str | None = None
    notes: str | None = None


class CaseHistory(CaseHistoryBase):
    id: int
    created_at: str
    model_config = ConfigDict(from_attributes=True)
