"""Core event service: create, update and soft-delete as single transactions.

Ordering rules shared by every write path:
- New media is uploaded before the row lock is taken; an upload failure aborts cheaply.
- Old media is deleted only after the new state has committed.
- Participant notifications are written in the same transaction as the
  event change, so either both persist or neither does.
- The activity log is written after commit and never fails the request.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from eventapp.errors import ConflictError, NotFound, PersistError
from eventapp.models.event import Event, EventStatus
from eventapp.models.participation import Participation, ParticipationStatus
from eventapp.models.user import User
from eventapp.schemas.event import EventCreate, EventOut, EventPatch
from eventapp.services import activity_service, notification_service
from eventapp.services.capacity import resolve_capacity, validate_capacity
from eventapp.services.change_detector import changed_fields, event_snapshot
from eventapp.services.settings_service import EventSettingsReader
from eventapp.storage import StorageBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MediaUpload:
    content: bytes
    content_type: str


def to_event_out(event: Event, storage: StorageBackend, ttl_seconds: int = 3600) -> EventOut:
    """Serialize an event and attach a temporary URL for its image."""
    out = EventOut.model_validate(event)
    out.image_url = storage.sign(event.image, ttl_seconds)
    return out


def _find_event(db: Session, event_id: str) -> Event:
    """Unlocked read; soft-deleted events count as missing."""
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event or event.status == EventStatus.deleted:
        raise NotFound("Event")
    return event


def _load_event(db: Session, event_id: str) -> Event:
    """Re-read the event under a row lock, overwriting any cached state."""
    event = (
        db.query(Event)
        .filter(Event.event_id == event_id)
        .with_for_update(of=Event)
        .populate_existing()
        .first()
    )
    if not event or event.status == EventStatus.deleted:
        raise NotFound("Event")
    return event


def _approved_participations(db: Session, event_id: str) -> list[Participation]:
    return (
        db.query(Participation)
        .filter(
            Participation.event_id == event_id,
            Participation.status == ParticipationStatus.approved,
        )
        .order_by(Participation.created_at, Participation.participation_id)
        .all()
    )


def _flush(db: Session, event: Event) -> None:
    """Validate the event as it now stands and push it to the database."""
    errors = event.validation_errors()
    if errors:
        raise PersistError("Event validation failed", errors)
    try:
        db.flush()
    except StaleDataError as exc:
        raise ConflictError() from exc
    except SQLAlchemyError as exc:
        raise PersistError(f"Failed to save event: {exc}") from exc


def _commit(db: Session) -> None:
    try:
        db.commit()
    except StaleDataError as exc:
        raise ConflictError() from exc
    except SQLAlchemyError as exc:
        raise PersistError(f"Failed to save event: {exc}") from exc


def _discard_upload(storage: StorageBackend, key: str, cleanup: bool) -> None:
    """Handle a new upload whose owning transaction rolled back."""
    if cleanup:
        if not storage.delete(key):
            logger.warning("Could not remove orphaned upload %s", key)
    else:
        logger.warning("Upload %s left orphaned by aborted transaction", key)


def _delete_old_media(storage: StorageBackend, key: Optional[str]) -> None:
    if key and not storage.delete(key):
        logger.warning("Old media %s could not be deleted", key)


def create_event(
    db: Session,
    actor_user_id: str,
    data: EventCreate,
    storage: StorageBackend,
    settings_reader: EventSettingsReader,
    media: Optional[MediaUpload] = None,
    cleanup_on_abort: bool = False,
) -> Event:
    """Create an event organized by the actor, with optional image."""
    new_key = None
    try:
        organizer = db.query(User).filter(User.user_id == actor_user_id).first()
        if not organizer:
            raise NotFound("User")

        if media is not None:
            new_key = storage.upload(media.content, media.content_type)

        ceiling = settings_reader.max_attendees_per_event(db)
        fields = data.changes()
        fields["max_attendees"] = resolve_capacity(fields.get("max_attendees"), ceiling)

        event = Event(organizer_id=organizer.user_id, image=new_key, **fields)
        db.add(event)
        _flush(db, event)
        _commit(db)
    except Exception:
        db.rollback()
        if new_key:
            _discard_upload(storage, new_key, cleanup_on_abort)
        raise

    activity_service.record_activity(db, activity_service.event_activity(actor_user_id, "created", event))
    db.refresh(event)
    logger.info("Created event '%s' (%s) by organizer %s", event.title, event.event_id, actor_user_id)
    return event


def update_event(
    db: Session,
    event_id: str,
    actor_user_id: str,
    patch: EventPatch,
    storage: StorageBackend,
    settings_reader: EventSettingsReader,
    media: Optional[MediaUpload] = None,
    cleanup_on_abort: bool = False,
) -> Event:
    """Apply ``patch`` (and optionally a new image) to an event in one transaction.

    Approved participants are notified only when a participant-facing field
    actually changed. The replaced image is deleted after commit.
    """
    new_key = None
    old_key = None
    try:
        # Media goes up before the row lock so a slow backend never holds it.
        _find_event(db, event_id)
        if media is not None:
            new_key = storage.upload(media.content, media.content_type)

        event = _load_event(db, event_id)
        if new_key:
            old_key = event.image

        ceiling = settings_reader.max_attendees_per_event(db)
        proposed = patch.changes()
        validate_capacity(proposed.get("max_attendees"), ceiling)

        if new_key:
            proposed["image"] = new_key
        changed = changed_fields(event_snapshot(event), proposed)

        for field, value in proposed.items():
            setattr(event, field, value)
        _flush(db, event)

        notified = 0
        if changed:
            participations = _approved_participations(db, event.event_id)
            if participations:
                drafts = notification_service.build_update_notifications(event, participations, event.organizer)
                notified = len(notification_service.insert_notifications(db, drafts))

        _commit(db)
    except Exception:
        db.rollback()
        if new_key:
            _discard_upload(storage, new_key, cleanup_on_abort)
        raise

    if new_key:
        _delete_old_media(storage, old_key)

    activity_service.record_activity(
        db, activity_service.event_activity(actor_user_id, "updated", event, changedFields=changed),
    )
    db.refresh(event)
    logger.info(
        "Updated event %s to version %d (changed: %s, notified %d)",
        event_id, event.version, ",".join(changed) or "none", notified,
    )
    return event


def delete_event(
    db: Session,
    event_id: str,
    actor_user_id: str,
    storage: StorageBackend,
) -> Event:
    """Soft-delete an event, its participations, and then its image."""
    try:
        event = _load_event(db, event_id)

        participations = (
            db.query(Participation)
            .filter(
                Participation.event_id == event.event_id,
                Participation.status != ParticipationStatus.deleted,
            )
            .all()
        )
        drafts = notification_service.build_deletion_notifications(event, participations, event.organizer)

        event.status = EventStatus.deleted
        for participation in participations:
            participation.status = ParticipationStatus.deleted
        _flush(db, event)
        notification_service.insert_notifications(db, drafts)
        _commit(db)
    except Exception:
        db.rollback()
        raise

    _delete_old_media(storage, event.image)
    activity_service.record_activity(db, activity_service.event_activity(actor_user_id, "deleted", event))
    logger.info("Soft deleted event %s and %d participations", event_id, len(participations))
    return event
