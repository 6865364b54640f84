"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from eventapp.config import settings
from eventapp.database import Base, engine

# Import routers
from eventapp.routers import users, events, participations

# Import all models so Base.metadata knows about them
from eventapp.models.user import User                     # noqa: F401
from eventapp.models.event import Event                   # noqa: F401
from eventapp.models.participation import Participation   # noqa: F401
from eventapp.models.notification import Notification     # noqa: F401
from eventapp.models.system_settings import SystemSettings  # noqa: F401
from eventapp.models.activity_log import ActivityLog      # noqa: F401

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Event Management API",
    description="Events, participations and update notifications",
    version="1.0.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(participations.router, prefix="/api/participations", tags=["Participations"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    logger.info("Event Management API started (storage backend: %s)", settings.STORAGE_TYPE)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
