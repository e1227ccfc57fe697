from sqlalchemy import Column, Integer, String, Index
from .base import Base, now_utc_iso


class User(Base):
    __tablename__ = 'users'
    id = Column(Integer, primary_key=True, autoincrement=True)
    # Not unique at the storage level; registration performs a pre-check
    username = Column(String(150), nullable=False)
    password = Column(String(255), nullable=False)
    # 'admin' | 'user'
    role = Column(String(20), nullable=False, default='user')
    created_at = Column(String(40), nullable=False, default=now_utc_iso)

    __table_args__ = (
        Index('idx_users_username', 'username'),
        {'sqlite_autoincrement': True},
    )


class StoreMeta(Base):
    """Recorded schema version per named store."""
    __tablename__ = 'store_meta'
    name = Column(String(100), primary_key=True)
    version = Column(Integer, nullable=False)
    upgraded_at = Column(String(40), nullable=False, default=now_utc_iso)
