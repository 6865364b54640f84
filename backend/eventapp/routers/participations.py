"""Participation API routes: join requests and organizer decisions."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from eventapp.database import get_db
from eventapp.errors import NotFound
from eventapp.models.event import Event, EventStatus
from eventapp.models.participation import Participation, ParticipationStatus
from eventapp.models.user import User
from eventapp.schemas.participation import ParticipationCreate, ParticipationDecision, ParticipationOut
from eventapp.services import notification_service

logger = logging.getLogger(__name__)
router = APIRouter()

DECISIONS = (ParticipationStatus.approved, ParticipationStatus.rejected)


@router.post("/", response_model=ParticipationOut, status_code=status.HTTP_201_CREATED)
def request_participation(payload: ParticipationCreate, db: Session = Depends(get_db)):
    """Ask to join an event; the organizer is notified of the pending request."""
    event = db.query(Event).filter(Event.event_id == payload.event_id).first()
    if not event or event.status == EventStatus.deleted:
        raise NotFound("Event")
    user = db.query(User).filter(User.user_id == payload.user_id).first()
    if not user:
        raise NotFound("User")

    existing = (
        db.query(Participation)
        .filter(Participation.event_id == event.event_id, Participation.user_id == user.user_id)
        .first()
    )
    if existing and existing.status != ParticipationStatus.deleted:
        raise HTTPException(status_code=400, detail="Participation already requested")

    participation = existing or Participation(event_id=event.event_id, user_id=user.user_id)
    participation.status = ParticipationStatus.pending
    db.add(participation)
    db.flush()
    notification_service.insert_notifications(
        db, [notification_service.build_participation_request(participation, event, user)],
    )
    db.commit()
    db.refresh(participation)
    logger.info("User %s requested to join event %s", user.user_id, event.event_id)
    return participation


@router.get("/", response_model=list[ParticipationOut])
def list_participations(
    event_id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    status_filter: Optional[ParticipationStatus] = Query(None),
    db: Session = Depends(get_db),
):
    """List participations, optionally filtered by event, user or status."""
    query = db.query(Participation)
    if event_id:
        query = query.filter(Participation.event_id == event_id)
    if user_id:
        query = query.filter(Participation.user_id == user_id)
    if status_filter:
        query = query.filter(Participation.status == status_filter)
    return query.order_by(Participation.created_at).all()


@router.patch("/{participation_id}", response_model=ParticipationOut)
def decide_participation(
    participation_id: str,
    payload: ParticipationDecision,
    actor_user_id: str = Query(..., description="ID of the event organizer"),
    db: Session = Depends(get_db),
):
    """Approve or reject a join request (organizer only)."""
    participation = (
        db.query(Participation).filter(Participation.participation_id == participation_id).first()
    )
    if not participation:
        raise NotFound("Participation")
    if payload.status not in DECISIONS:
        raise HTTPException(status_code=400, detail=f"Invalid decision: {payload.status.value}")

    event = participation.event
    if event.organizer_id != actor_user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the organizer may decide on requests")
    if event.status == EventStatus.deleted or participation.status == ParticipationStatus.deleted:
        raise NotFound("Participation")

    participation.status = payload.status
    notification_service.insert_notifications(
        db, [notification_service.build_participation_decision(participation, event)],
    )
    db.commit()
    db.refresh(participation)
    logger.info("Participation %s %s by %s", participation_id, payload.status.value, actor_user_id)
    return participation
