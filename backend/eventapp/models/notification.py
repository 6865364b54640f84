"""Notification ORM model."""
import uuid
import enum
from sqlalchemy import Column, String, Boolean, DateTime, JSON, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from eventapp.database import Base


class NotificationType(str, enum.Enum):
    event_update = "eventUpdate"
    event_deleted = "eventDeleted"
    participation_request = "participationRequest"
    participation_update = "participationUpdate"


class Notification(Base):
    __tablename__ = "notifications"

    notification_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False, index=True)
    type = Column(SAEnum(NotificationType), nullable=False)
    message = Column(String(500), nullable=False)
    related_id = Column(String(36), nullable=True)
    notification_sender = Column(String(36), ForeignKey("users.user_id"), nullable=True)
    data = Column(JSON, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
