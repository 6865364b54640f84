"""Event API routes: delegates writes to event_service."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from pydantic import ValidationError
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from eventapp.config import settings
from eventapp.database import get_db
from eventapp.errors import InvalidPayload, NotFound
from eventapp.models.event import Event, EventStatus
from eventapp.models.participation import Participation, ParticipationStatus
from eventapp.schemas.event import EventCreate, EventDeleted, EventOut, EventPatch
from eventapp.services import event_service
from eventapp.services.event_service import MediaUpload
from eventapp.services.settings_service import EventSettingsReader, get_settings_reader
from eventapp.storage import StorageBackend, get_storage

logger = logging.getLogger(__name__)
router = APIRouter()

HIDDEN_FROM_PUBLIC = (EventStatus.ended, EventStatus.cancelled, EventStatus.ongoing, EventStatus.deleted)


def event_form(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    start_date: Optional[str] = Form(None),
    end_date: Optional[str] = Form(None),
    max_attendees: Optional[str] = Form(None),
    publicity: Optional[str] = Form(None),
    event_status: Optional[str] = Form(None, alias="status"),
) -> dict:
    """Multipart event fields that were actually sent."""
    raw = {
        "title": title,
        "description": description,
        "location": location,
        "category": category,
        "start_date": start_date,
        "end_date": end_date,
        "max_attendees": max_attendees,
        "publicity": publicity,
        "status": event_status,
    }
    return {k: v for k, v in raw.items() if v is not None}


def _validate(schema, raw: dict):
    try:
        return schema.model_validate(raw)
    except ValidationError as exc:
        raise InvalidPayload([{"loc": e["loc"], "msg": e["msg"]} for e in exc.errors()])


def _read_media(image: Optional[UploadFile]) -> Optional[MediaUpload]:
    if image is None or not image.filename:
        return None
    content = image.file.read()
    if not content:
        raise InvalidPayload("Uploaded image is empty")
    return MediaUpload(content=content, content_type=image.content_type or "application/octet-stream")


def _close(image: Optional[UploadFile]) -> None:
    # Releases the multipart spool file whatever happened to the request.
    if image is not None:
        image.file.close()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    actor_user_id: str = Query(..., description="ID of the organizing user"),
    fields: dict = Depends(event_form),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    settings_reader: EventSettingsReader = Depends(get_settings_reader),
):
    """Create an event; capacity defaults to the system ceiling."""
    try:
        data = _validate(EventCreate, fields)
        event = event_service.create_event(
            db=db,
            actor_user_id=actor_user_id,
            data=data,
            storage=storage,
            settings_reader=settings_reader,
            media=_read_media(image),
            cleanup_on_abort=settings.STORAGE_CLEANUP_ON_ABORT,
        )
    finally:
        _close(image)
    return event_service.to_event_out(event, storage, settings.SIGNED_URL_TTL_SECONDS)


@router.get("/", response_model=list[EventOut])
def list_events(
    public: bool = Query(False),
    organizer_id: Optional[str] = Query(None),
    participant_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
):
    """List events, newest first. Deleted events are never listed.

    ``organizer_id`` and ``participant_id`` together return the union of
    organized and joined events, each event once.
    """
    query = db.query(Event).filter(Event.status != EventStatus.deleted)
    if public:
        query = query.filter(Event.publicity.is_(True), Event.status.notin_(HIDDEN_FROM_PUBLIC))

    scopes = []
    if organizer_id:
        scopes.append(Event.organizer_id == organizer_id)
    if participant_id:
        joined_ids = select(Participation.event_id).where(
            Participation.user_id == participant_id,
            Participation.status == ParticipationStatus.approved,
        )
        scopes.append(Event.event_id.in_(joined_ids))
    if scopes:
        query = query.filter(or_(*scopes))

    events = query.order_by(Event.created_at.desc()).all()
    return [event_service.to_event_out(e, storage, settings.SIGNED_URL_TTL_SECONDS) for e in events]


@router.get("/{event_id}", response_model=EventOut)
def get_event(
    event_id: str,
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
):
    """Fetch a single event by ID."""
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise NotFound("Event")
    return event_service.to_event_out(event, storage, settings.SIGNED_URL_TTL_SECONDS)


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    actor_user_id: str = Query(..., description="ID of the user performing the update"),
    fields: dict = Depends(event_form),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    settings_reader: EventSettingsReader = Depends(get_settings_reader),
):
    """Update an event and notify approved participants of material changes."""
    try:
        patch = _validate(EventPatch, fields)
        event = event_service.update_event(
            db=db,
            event_id=event_id,
            actor_user_id=actor_user_id,
            patch=patch,
            storage=storage,
            settings_reader=settings_reader,
            media=_read_media(image),
            cleanup_on_abort=settings.STORAGE_CLEANUP_ON_ABORT,
        )
    finally:
        _close(image)
    return event_service.to_event_out(event, storage, settings.SIGNED_URL_TTL_SECONDS)


@router.delete("/{event_id}", response_model=EventDeleted)
def delete_event(
    event_id: str,
    actor_user_id: str = Query(..., description="ID of the user deleting the event"),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
):
    """Soft delete an event together with its participations."""
    event_service.delete_event(db=db, event_id=event_id, actor_user_id=actor_user_id, storage=storage)
    return {"message": "Event and related participations soft deleted successfully"}
