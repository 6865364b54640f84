"""Pytest fixtures: SQLite database and in-memory media storage for fast, isolated tests."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from eventapp.database import Base, get_db  # noqa: E402
from eventapp.errors import UploadError  # noqa: E402
from eventapp.main import app  # noqa: E402
from eventapp.storage import get_storage  # noqa: E402
from eventapp.storage.base import StorageBackend, random_key  # noqa: E402

# Import all models so they register with Base.metadata
from eventapp.models.user import User                         # noqa: F401,E402
from eventapp.models.event import Event                       # noqa: F401,E402
from eventapp.models.participation import Participation, ParticipationStatus  # noqa: F401,E402
from eventapp.models.notification import Notification         # noqa: F401,E402
from eventapp.models.system_settings import SystemSettings    # noqa: F401,E402
from eventapp.models.activity_log import ActivityLog          # noqa: F401,E402

SQLITE_URL = "sqlite:///./test.db"
MEDIA_HOST = "https://media.test/"


class FakeStorage(StorageBackend):
    """In-memory backend honouring the storage contract."""

    name = "fake"

    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.deleted: list[str] = []
        self.fail_upload = False
        self.fail_delete = False

    def upload(self, content: bytes, content_type: str) -> str:
        if self.fail_upload:
            raise UploadError("Failed to upload media: simulated outage")
        key = random_key()
        self.objects[key] = (content, content_type)
        return key

    def sign(self, key: Optional[str], ttl_seconds: int = 3600) -> Optional[str]:
        if not key or key not in self.objects:
            return None
        return f"{MEDIA_HOST}{key}?expires={ttl_seconds}"

    def fetch(self, url: str) -> bytes:
        key = url[len(MEDIA_HOST):].split("?", 1)[0]
        return self.objects[key][0]

    def delete(self, key: Optional[str]) -> bool:
        if self.fail_delete or not key or key not in self.objects:
            return False
        del self.objects[key]
        self.deleted.append(key)
        return True


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Yield a database session, closed after the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def storage():
    return FakeStorage()


@pytest.fixture(scope="function")
def ceiling(db):
    """Seed the settings record with a 100-attendee ceiling."""
    db.add(SystemSettings(event_settings={"maxAttendeesPerEvent": 100}))
    db.commit()
    return 100


@pytest.fixture(scope="function")
def client(session_factory, storage):
    """FastAPI TestClient with database and storage dependencies overridden."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def create_test_user(client: TestClient, name: str = "tester", first: str = "Test", last: str = "User") -> dict:
    """Helper: POST /api/users and return response JSON."""
    resp = client.post("/api/users/", json={
        "username": name,
        "first_name": first,
        "last_name": last,
        "email": f"{name}@example.com",
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_event(client: TestClient, organizer_id: str, files=None, **fields) -> dict:
    """Helper: POST /api/events as ``organizer_id`` and return response JSON."""
    data = {"title": "Board Games Night", "location": "Library", "max_attendees": "50"}
    data.update({k: str(v) for k, v in fields.items()})
    resp = client.post(f"/api/events/?actor_user_id={organizer_id}", data=data, files=files)
    assert resp.status_code == 201, resp.text
    return resp.json()


def add_participation(db, event_id: str, user_id: str, status: ParticipationStatus = ParticipationStatus.approved) -> Participation:
    """Helper: insert a participation directly."""
    participation = Participation(event_id=event_id, user_id=user_id, status=status)
    db.add(participation)
    db.commit()
    db.refresh(participation)
    return participation


def notifications_for(db, event_id: str) -> list[Notification]:
    """All notifications whose payload points at ``event_id``."""
    db.expire_all()
    return [n for n in db.query(Notification).all() if (n.data or {}).get("eventId") == event_id]
