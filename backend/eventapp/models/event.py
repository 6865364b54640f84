"""Event ORM model."""
import uuid
import enum
from sqlalchemy import Column, String, Text, Boolean, DateTime, Integer, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from eventapp.database import Base
from eventapp.utils import as_utc


class EventStatus(str, enum.Enum):
    draft = "draft"
    upcoming = "upcoming"
    ongoing = "ongoing"
    ended = "ended"
    cancelled = "cancelled"
    deleted = "deleted"


class Event(Base):
    __tablename__ = "events"

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    organizer_id = Column(String(36), ForeignKey("users.user_id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(500), nullable=True)
    category = Column(String(100), nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    max_attendees = Column(Integer, nullable=False)
    publicity = Column(Boolean, nullable=False, default=True)
    status = Column(SAEnum(EventStatus), nullable=False, default=EventStatus.upcoming)
    image = Column(String(500), nullable=True)  # storage key
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    organizer = relationship("User", lazy="joined")
    participations = relationship("Participation", back_populates="event")

    # Every UPDATE is guarded by the version it read; a stale write raises StaleDataError.
    __mapper_args__ = {"version_id_col": version}

    def validation_errors(self) -> list[str]:
        """Record-level checks run before the row is flushed."""
        errors = []
        if not self.title or not self.title.strip():
            errors.append("title must not be empty")
        if self.max_attendees is None or self.max_attendees < 1:
            errors.append("max_attendees must be at least 1")
        if self.start_date and self.end_date and as_utc(self.end_date) < as_utc(self.start_date):
            errors.append("end_date must not be before start_date")
        return errors
