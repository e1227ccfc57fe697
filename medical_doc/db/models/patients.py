from sqlalchemy import Column, Integer, String, Text, Index
from .base import Base, now_utc_iso


class Patient(Base):
    __tablename__ = 'patients'
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    age = Column(Integer, nullable=True)
    gender = Column(String(32), nullable=True)
    dob = Column(String(10), nullable=True)
    blood_group = Column(String(8), nullable=True)
    contact = Column(String(64), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    created_at = Column(String(40), nullable=False, default=now_utc_iso)

    # sqlite_autoincrement keeps identifiers from being reused after deletes
    __table_args__ = (
        Index('idx_patients_name', 'name'),
        Index('idx_patients_email', 'email'),
        {'sqlite_autoincrement': True},
    )
