"""Singleton settings record, administered outside this service."""
from sqlalchemy import Column, Integer, JSON, DateTime
from sqlalchemy.sql import func
from eventapp.database import Base


class SystemSettings(Base):
    __tablename__ = "settings"

    settings_id = Column(Integer, primary_key=True, autoincrement=True)
    event_settings = Column(JSON, nullable=True)  # {"maxAttendeesPerEvent": int}
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
