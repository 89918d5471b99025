from sqlalchemy import Column, Integer, String, Boolean, DateTime
from db.base import Base
from datetime import datetime


class Settings(Base):
    """Instance-wide key/value settings (SMTP and friends)."""

    __tablename__ = "settings"
    id = Column(Integer, primary_key=True)
    key = Column(String, unique=True, nullable=False, index=True)
    value = Column(String, nullable=True)
    is_secret = Column(Boolean, default=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
