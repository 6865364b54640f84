"""User API routes."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from eventapp.database import get_db
from eventapp.errors import NotFound
from eventapp.models.user import User
from eventapp.schemas.user import UserCreate, UserUpdate, UserOut
from eventapp.services import activity_service

logger = logging.getLogger(__name__)
router = APIRouter()


def _ensure_unique(db: Session, field: str, value: str) -> None:
    if db.query(User).filter(getattr(User, field) == value).first():
        raise HTTPException(status_code=400, detail=f"{field.capitalize()} already taken")


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Create a new user account."""
    _ensure_unique(db, "username", payload.username)
    _ensure_unique(db, "email", payload.email)
    user = User(**payload.model_dump())
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (%s)", user.user_id, user.username)
    return user


@router.get("/", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)):
    """List all users."""
    return db.query(User).all()


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)):
    """Fetch a single user by ID."""
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFound("User")
    return user


@router.patch("/{user_id}", response_model=UserOut)
def update_user(user_id: str, payload: UserUpdate, db: Session = Depends(get_db)):
    """Update profile fields (partial update)."""
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFound("User")
    updates = payload.model_dump(exclude_unset=True)
    for field in ("username", "email"):
        if updates.get(field) and updates[field] != getattr(user, field):
            _ensure_unique(db, field, updates[field])
    for field, value in updates.items():
        setattr(user, field, value)
    db.commit()
    activity_service.record_activity(db, activity_service.user_activity(user.user_id, "updated", user))
    db.refresh(user)
    logger.info("Updated user %s", user_id)
    return user
