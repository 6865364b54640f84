"""ActivityLog ORM model: append-only audit trail of user actions."""
import uuid
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func
from eventapp.database import Base


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    log_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    actor_user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    action = Column(String(50), nullable=False)  # created, updated, deleted
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(36), nullable=False)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
