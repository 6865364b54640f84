"""Activity log: pure entry construction plus a fire-and-forget writer."""
import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventapp.models.activity_log import ActivityLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivityEntry:
    actor_user_id: str
    action: str
    entity_type: str
    entity_id: str
    details: dict[str, Any] = field(default_factory=dict)


def event_activity(actor_user_id: str, action: str, event, **details: Any) -> ActivityEntry:
    return ActivityEntry(
        actor_user_id=actor_user_id,
        action=action,
        entity_type="event",
        entity_id=event.event_id,
        details={"eventTitle": event.title, **details},
    )


def user_activity(actor_user_id: str, action: str, user, **details: Any) -> ActivityEntry:
    return ActivityEntry(
        actor_user_id=actor_user_id,
        action=action,
        entity_type="user",
        entity_id=user.user_id,
        details={"userEmail": user.email, **details},
    )


def record_activity(db: Session, entry: ActivityEntry) -> bool:
    """Write ``entry`` in its own transaction. Failures are logged, never raised.

    Call only after the action being logged has committed.
    """
    try:
        db.add(ActivityLog(
            actor_user_id=entry.actor_user_id,
            action=entry.action,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            details=entry.details,
        ))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning(
            "Could not record activity %s %s %s", entry.action, entry.entity_type, entry.entity_id,
            exc_info=True,
        )
        return False
    return True
