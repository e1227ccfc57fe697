from sqlalchemy import Column, Integer, String, Text, Index
from .base import Base, now_utc_iso


class CaseHistory(Base):
    __tablename__ = 'case_histories'
    id = Column(Integer, primary_key=True, autoincrement=True)
    # No ForeignKey: parent/child consistency is maintained by the integrity service
    patient_id = Column(Integer, nullable=False)
    date = Column(String(10), nullable=False)
    complaint = Column(Text, nullable=False)
    symptoms = Column(Text, nullable=True)
    diagnosis = Column(Text, nullable=True)
    treatment = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(String(40), nullable=False, default=now_utc_iso)

    __table_args__ = (
        Index('idx_case_histories_patient_id', 'patient_id'),
        Index('idx_case_histories_date', 'date'),
        {'sqlite_autoincrement': True},
    )
