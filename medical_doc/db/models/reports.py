from sqlalchemy import Column, Integer, String, Text, Index
from .base import Base, now_utc_iso


class ExaminationReport(Base):
    __tablename__ = 'examination_reports'
    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(Integer, nullable=False)
    date = Column(String(10), nullable=False)
    type = Column(String(64), nullable=False)
    title = Column(String(255), nullable=False)
    findings = Column(Text, nullable=True)
    # Attachment fields are passed through unexamined
    file_name = Column(String(255), nullable=True)
    file_type = Column(String(255), nullable=True)
    file_data = Column(Text, nullable=True)
    created_at = Column(String(40), nullable=False, default=now_utc_iso)

    __table_args__ = (
        Index('idx_examination_reports_patient_id', 'patient_id'),
        Index('idx_examination_reports_date', 'date'),
        Index('idx_examination_reports_type', 'type'),
        {'sqlite_autoincrement': True},
    )
