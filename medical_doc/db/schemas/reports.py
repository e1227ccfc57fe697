from pydantic import BaseModel, ConfigDict, Field, model_validator

from ._validators import IsoDate, OptionalIsoDate, RequiredText


class ExaminationReportBase(BaseModel):
    patient_id: int = Field(..., ge=1)
    date: IsoDate
    # Categorical tag, e.g. 'blood-test', 'x-ray'
    type: RequiredText
    title: RequiredText
    findings: str | None = None
    # Attachment: declared name and MIME type plus an opaque, pre-encoded payload
    file_name: str | None = None
    file_type: str | None = None
    file_data: str | None = None

    @model_validator(mode='after')
    def check_attachment_name(self):
        if self.file_data is not None and not self.file_name:
            raise ValueError("file_name is required when file_data is present")
        return self

    @property
    def has_attachment(self) -> bool:
        return self.file_data is not None


class ExaminationReportCreate(ExaminationReportBase):
    created_at: str | None = None


class ExaminationReportUpdate(BaseModel):
    date: OptionalIsoDate = None
    type: RequiredText | None = None
    title: RequiredText | None = None
    findings: str | None = None
    file_name: str | None = None
    file_type: str | None = None
    file_data: str | None = None


class ExaminationReport(ExaminationReportBase):
    id: int
    created_at: str
    model_config = ConfigDict(from_attributes=True)
