"""Notification fan-out: deciding who hears about what, then writing it.

The ``build_*`` functions are pure and return drafts; ``insert_notifications``
is the only writer and runs inside the caller's transaction.
"""
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventapp.errors import NotificationInsertError
from eventapp.models.event import Event
from eventapp.models.notification import Notification, NotificationType
from eventapp.models.participation import Participation, ParticipationStatus
from eventapp.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationDraft:
    user_id: str
    type: NotificationType
    message: str
    related_id: Optional[str] = None
    notification_sender: Optional[str] = None
    data: dict[str, Any] = field(default_factory=dict)
    is_read: bool = False


def _regards(organizer: User) -> str:
    name = f"{organizer.first_name} {organizer.last_name}".strip() or organizer.username
    return f"Regards,\n\n{name},\n{organizer.email}"


def _approved(participations: Iterable[Participation]) -> list[Participation]:
    return [p for p in participations if p.status == ParticipationStatus.approved]


def build_update_notifications(
    event: Event,
    participations: Iterable[Participation],
    organizer: User,
) -> list[NotificationDraft]:
    """One ``eventUpdate`` draft per approved participation, in the given order."""
    body = (
        f'The event "{event.title}" has been updated. Please kindly check the new details.\n'
        "We look forward to your participation.\n\n"
        f"{_regards(organizer)}"
    )
    return [
        NotificationDraft(
            user_id=p.user_id,
            type=NotificationType.event_update,
            message=f'Event "{event.title}" has been updated',
            related_id=p.participation_id,
            notification_sender=organizer.user_id,
            data={"message": body, "eventId": event.event_id},
        )
        for p in _approved(participations)
    ]


def build_deletion_notifications(
    event: Event,
    participations: Iterable[Participation],
    organizer: User,
) -> list[NotificationDraft]:
    body = (
        f'Unfortunately the event "{event.title}" has been cancelled and removed.\n\n'
        f"{_regards(organizer)}"
    )
    return [
        NotificationDraft(
            user_id=p.user_id,
            type=NotificationType.event_deleted,
            message=f'Event "{event.title}" has been deleted',
            related_id=p.participation_id,
            notification_sender=organizer.user_id,
            data={"message": body, "eventId": event.event_id},
        )
        for p in _approved(participations)
    ]


def build_participation_request(participation: Participation, event: Event, requester: User) -> NotificationDraft:
    return NotificationDraft(
        user_id=event.organizer_id,
        type=NotificationType.participation_request,
        message=f'{requester.username} asked to join "{event.title}"',
        related_id=participation.participation_id,
        notification_sender=requester.user_id,
        data={"eventId": event.event_id},
    )


def build_participation_decision(participation: Participation, event: Event) -> NotificationDraft:
    return NotificationDraft(
        user_id=participation.user_id,
        type=NotificationType.participation_update,
        message=f'Your request to join "{event.title}" was {participation.status.value}',
        related_id=participation.participation_id,
        notification_sender=event.organizer_id,
        data={"eventId": event.event_id, "status": participation.status.value},
    )


def insert_notifications(db: Session, drafts: list[NotificationDraft]) -> list[Notification]:
    """Add the whole batch and flush it; any failure fails the batch.

    Nothing is committed here. The caller's transaction decides whether
    these rows survive, together with the change that produced them.
    """
    if not drafts:
        return []
    rows = [Notification(**asdict(draft)) for draft in drafts]
    try:
        db.add_all(rows)
        db.flush()
    except SQLAlchemyError as exc:
        logger.exception("Notification batch insert of %d rows failed", len(rows))
        raise NotificationInsertError() from exc
    logger.info("Queued %d %s notifications", len(rows), drafts[0].type.value)
    return rows
