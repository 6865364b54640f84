"""Service-level tests for event_service transaction handling.

These call the service directly with a session, so failures can be
injected between the steps of a single update.
"""
import pytest

from eventapp.errors import ConflictError, NotFound, NotificationInsertError, UploadError
from eventapp.models.event import Event
from eventapp.models.notification import Notification, NotificationType
from eventapp.models.participation import Participation, ParticipationStatus
from eventapp.models.user import User
from eventapp.schemas.event import EventCreate, EventPatch
from eventapp.services import event_service, notification_service
from eventapp.services.event_service import MediaUpload
from eventapp.services.notification_service import NotificationDraft
from eventapp.services.settings_service import EventSettingsReader


@pytest.fixture
def organizer(db):
    user = User(username="host", first_name="Hana", last_name="Host", email="host@example.com")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def event(db, ceiling, organizer, storage):
    return event_service.create_event(
        db=db,
        actor_user_id=organizer.user_id,
        data=EventCreate(title="Quiz Night", max_attendees=50),
        storage=storage,
        settings_reader=EventSettingsReader(),
    )


@pytest.fixture
def guests(db, event):
    users = [User(username=f"guest{i}", email=f"guest{i}@example.com") for i in range(2)]
    db.add_all(users)
    db.flush()
    db.add_all([
        Participation(event_id=event.event_id, user_id=u.user_id, status=ParticipationStatus.approved)
        for u in users
    ])
    db.commit()
    return users


def _update(db, event, storage, media=None, cleanup=False, **fields):
    return event_service.update_event(
        db=db,
        event_id=event.event_id,
        actor_user_id=event.organizer_id,
        patch=EventPatch(**fields),
        storage=storage,
        settings_reader=EventSettingsReader(),
        media=media,
        cleanup_on_abort=cleanup,
    )


def test_update_commits_event_and_notifications(db, event, guests, storage):
    updated = _update(db, event, storage, title="Trivia Night")
    assert updated.title == "Trivia Night"
    rows = db.query(Notification).filter(Notification.type == NotificationType.event_update).all()
    assert sorted(n.user_id for n in rows) == sorted(g.user_id for g in guests)


def test_update_missing_event(db, ceiling, storage):
    with pytest.raises(NotFound):
        event_service.update_event(
            db=db, event_id="missing", actor_user_id="someone", patch=EventPatch(title="x"),
            storage=storage, settings_reader=EventSettingsReader(),
        )


def test_notification_failure_rolls_back_update(db, event, guests, storage, monkeypatch):
    """A draft the database rejects must undo the event change as well."""

    def broken_drafts(ev, participations, organizer):
        return [NotificationDraft(user_id=None, type=NotificationType.event_update, message="x")]

    monkeypatch.setattr(notification_service, "build_update_notifications", broken_drafts)

    with pytest.raises(NotificationInsertError):
        _update(db, event, storage, title="Never Committed")

    db.expire_all()
    assert db.query(Event).one().title == "Quiz Night"
    assert db.query(Notification).count() == 0


def test_notification_failure_with_cleanup_removes_new_upload(db, event, guests, storage, monkeypatch):
    def broken_drafts(ev, participations, organizer):
        return [NotificationDraft(user_id=None, type=NotificationType.event_update, message="x")]

    monkeypatch.setattr(notification_service, "build_update_notifications", broken_drafts)

    with pytest.raises(NotificationInsertError):
        _update(db, event, storage, media=MediaUpload(b"img", "image/png"), cleanup=True, title="Nope")

    assert storage.objects == {}
    assert len(storage.deleted) == 1


def test_concurrent_writer_conflict(db, event, storage, session_factory, monkeypatch):
    """Another session commits between our read and our write."""
    original_load = event_service._load_event

    def racing_load(session, event_id):
        loaded = original_load(session, event_id)
        other = session_factory()
        try:
            rival = other.query(Event).filter(Event.event_id == event_id).one()
            rival.title = "Rival Title"
            other.commit()
        finally:
            other.close()
        return loaded

    monkeypatch.setattr(event_service, "_load_event", racing_load)

    with pytest.raises(ConflictError):
        _update(db, event, storage, title="Loser Title")

    db.expire_all()
    assert db.query(Event).one().title == "Rival Title"


def test_upload_failure_touches_nothing(db, event, guests, storage):
    storage.fail_upload = True
    with pytest.raises(UploadError):
        _update(db, event, storage, media=MediaUpload(b"img", "image/png"), title="Changed")
    db.expire_all()
    assert db.query(Event).one().title == "Quiz Night"


def test_old_image_kept_until_commit(db, event, storage, monkeypatch):
    """The old key is still present in storage when the transaction commits."""
    first = _update(db, event, storage, media=MediaUpload(b"one", "image/png"))
    old_key = first.image
    seen_at_commit = []

    original_commit = event_service._commit

    def spying_commit(session):
        seen_at_commit.append(old_key in storage.objects)
        original_commit(session)

    monkeypatch.setattr(event_service, "_commit", spying_commit)
    second = _update(db, event, storage, media=MediaUpload(b"two", "image/png"))

    assert seen_at_commit == [True]
    assert old_key not in storage.objects
    assert second.image in storage.objects


def _record_calls(monkeypatch, storage):
    calls = []
    original_load = event_service._load_event
    original_upload = storage.upload

    def locking_load(session, event_id):
        calls.append("lock")
        return original_load(session, event_id)

    def recording_upload(content, content_type):
        calls.append("upload")
        return original_upload(content, content_type)

    monkeypatch.setattr(event_service, "_load_event", locking_load)
    monkeypatch.setattr(storage, "upload", recording_upload)
    return calls


def test_upload_happens_before_row_lock(db, event, storage, monkeypatch):
    calls = _record_calls(monkeypatch, storage)
    _update(db, event, storage, media=MediaUpload(b"img", "image/png"), title="Poster Night")
    assert calls == ["upload", "lock"]


def test_failed_upload_never_takes_row_lock(db, event, storage, monkeypatch):
    calls = _record_calls(monkeypatch, storage)
    storage.fail_upload = True
    with pytest.raises(UploadError):
        _update(db, event, storage, media=MediaUpload(b"img", "image/png"))
    assert calls == ["upload"]


def test_update_deleted_event_not_found(db, event, storage):
    event_service.delete_event(db, event.event_id, event.organizer_id, storage)
    with pytest.raises(NotFound):
        _update(db, event, storage, media=MediaUpload(b"img", "image/png"), status="upcoming")
    assert storage.objects == {}


def test_delete_event_service(db, event, guests, storage):
    event_service.delete_event(db, event.event_id, event.organizer_id, storage)
    db.expire_all()
    statuses = {p.status for p in db.query(Participation).all()}
    assert statuses == {ParticipationStatus.deleted}
    deleted_notes = db.query(Notification).filter(Notification.type == NotificationType.event_deleted).count()
    assert deleted_notes == 2
