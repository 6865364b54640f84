"""Tests for join requests and organizer decisions."""
from eventapp.models.notification import NotificationType
from tests.conftest import create_test_event, create_test_user, notifications_for


def _setup(client):
    organizer = create_test_user(client, name="organizer")
    guest = create_test_user(client, name="guest")
    event = create_test_event(client, organizer["user_id"], title="Book Club")
    return organizer, guest, event


def _join(client, event, user):
    return client.post("/api/participations/", json={"event_id": event["event_id"], "user_id": user["user_id"]})


class TestParticipationRequest:

    def test_request_is_pending_and_notifies_organizer(self, client, ceiling, db):
        organizer, guest, event = _setup(client)
        resp = _join(client, event, guest)
        assert resp.status_code == 201
        assert resp.json()["status"] == "pending"

        (note,) = notifications_for(db, event["event_id"])
        assert note.type == NotificationType.participation_request
        assert note.user_id == organizer["user_id"]
        assert note.related_id == resp.json()["participation_id"]

    def test_duplicate_request(self, client, ceiling):
        _, guest, event = _setup(client)
        _join(client, event, guest)
        assert _join(client, event, guest).status_code == 400

    def test_unknown_event(self, client, ceiling):
        _, guest, _ = _setup(client)
        resp = client.post("/api/participations/", json={"event_id": "missing", "user_id": guest["user_id"]})
        assert resp.status_code == 404

    def test_deleted_event(self, client, ceiling):
        organizer, guest, event = _setup(client)
        client.delete(f"/api/events/{event['event_id']}?actor_user_id={organizer['user_id']}")
        assert _join(client, event, guest).status_code == 404


class TestParticipationDecision:

    def test_organizer_approves(self, client, ceiling, db):
        organizer, guest, event = _setup(client)
        participation = _join(client, event, guest).json()

        resp = client.patch(
            f"/api/participations/{participation['participation_id']}?actor_user_id={organizer['user_id']}",
            json={"status": "approved"},
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "approved"

        decisions = [
            n for n in notifications_for(db, event["event_id"])
            if n.type == NotificationType.participation_update
        ]
        assert [n.user_id for n in decisions] == [guest["user_id"]]

    def test_non_organizer_forbidden(self, client, ceiling):
        _, guest, event = _setup(client)
        participation = _join(client, event, guest).json()
        resp = client.patch(
            f"/api/participations/{participation['participation_id']}?actor_user_id={guest['user_id']}",
            json={"status": "approved"},
        )
        assert resp.status_code == 403

    def test_invalid_decision(self, client, ceiling):
        organizer, guest, event = _setup(client)
        participation = _join(client, event, guest).json()
        resp = client.patch(
            f"/api/participations/{participation['participation_id']}?actor_user_id={organizer['user_id']}",
            json={"status": "deleted"},
        )
        assert resp.status_code == 400

    def test_approved_participant_hears_about_updates(self, client, ceiling, db):
        organizer, guest, event = _setup(client)
        participation = _join(client, event, guest).json()
        client.patch(
            f"/api/participations/{participation['participation_id']}?actor_user_id={organizer['user_id']}",
            json={"status": "approved"},
        )
        client.put(
            f"/api/events/{event['event_id']}?actor_user_id={organizer['user_id']}",
            data={"title": "Poetry Club"},
        )
        updates = [n for n in notifications_for(db, event["event_id"]) if n.type == NotificationType.event_update]
        assert [n.user_id for n in updates] == [guest["user_id"]]

    def test_list_filters(self, client, ceiling):
        _, guest, event = _setup(client)
        _join(client, event, guest)
        resp = client.get(f"/api/participations/?event_id={event['event_id']}&status_filter=pending")
        assert len(resp.json()) == 1
        resp = client.get(f"/api/participations/?event_id={event['event_id']}&status_filter=approved")
        assert resp.json() == []
