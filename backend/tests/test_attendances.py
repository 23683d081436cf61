"""Tests for check-in flows, attendance views and export.

Covers:
- Self-check-in by name (unknown event / inactive event / unregistered name)
- Duplicate same-day check-in → 409, no second record
- Manual bulk check-in counts, including inactive events
- Listing by day, cancellation, absentees
- xlsx export download
"""
import io
from datetime import datetime, timedelta, timezone

from openpyxl import load_workbook

from attendance.models.attendance import Attendance
from attendance.services.attendance_service import local_today, record_check_in
from tests.conftest import auth_headers, create_test_admin, create_test_user


def _check_in(client, event_id: str, name: str):
    return client.post("/api/checkin/", json={"event_id": event_id, "name": name})


class TestSelfCheckIn:
    """Attendee check-in from the QR screen."""

    def test_check_in_success(self, client):
        session = create_test_admin(client)
        alice = create_test_user(client, session, "Alice")
        resp = _check_in(client, session["event_id"], "  Alice ")
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["user_id"] == alice["user_id"]
        assert data["user_name"] == "Alice"
        assert data["check_in_date"] == local_today().isoformat()

    def test_second_check_in_same_day_conflict(self, client, db):
        session = create_test_admin(client)
        create_test_user(client, session, "Alice")
        assert _check_in(client, session["event_id"], "Alice").status_code == 201

        resp = _check_in(client, session["event_id"], "Alice")
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Already checked in today"
        assert db.query(Attendance).count() == 1

    def test_check_in_on_another_day_allowed(self, client, db):
        session = create_test_admin(client)
        alice = create_test_user(client, session, "Alice")
        yesterday = datetime.now(timezone.utc) - timedelta(days=1)
        record_check_in(db, session["event_id"], alice["user_id"], now=yesterday)

        assert _check_in(client, session["event_id"], "Alice").status_code == 201
        assert db.query(Attendance).count() == 2

    def test_unknown_event(self, client):
        assert _check_in(client, "missing-event", "Alice").status_code == 404

    def test_unregistered_name(self, client):
        session = create_test_admin(client)
        create_test_user(client, session, "Alice")
        resp = _check_in(client, session["event_id"], "Mallory")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "User is not registered"

    def test_name_from_other_event_not_accepted(self, client):
        first = create_test_admin(client, username="first")
        second = create_test_admin(client, username="second", group_name="Second")
        create_test_user(client, second, "Alice")
        assert _check_in(client, first["event_id"], "Alice").status_code == 404

    def test_inactive_event_rejected(self, client, db):
        session = create_test_admin(client)
        create_test_user(client, session, "Alice")
        client.patch(
            f"/api/events/{session['event_id']}/active",
            json={"is_active": False},
            headers=auth_headers(session),
        )
        resp = _check_in(client, session["event_id"], "Alice")
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Invalid or inactive event"
        assert db.query(Attendance).count() == 0

    def test_blank_name_rejected(self, client):
        session = create_test_admin(client)
        assert _check_in(client, session["event_id"], "  ").status_code == 422


class TestManualCheckIn:
    """Admin bulk check-in."""

    def test_bulk_counts_success_and_already_checked_in(self, client):
        session = create_test_admin(client)
        event_id = session["event_id"]
        users = [create_test_user(client, session, name) for name in ("Alice", "Bob", "Carol")]
        _check_in(client, event_id, "Bob")

        resp = client.post(
            f"/api/events/{event_id}/attendances/manual",
            json={"user_ids": [u["user_id"] for u in users]},
            headers=auth_headers(session),
        )
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["success_count"] == 2
        assert data["already_checked_in_count"] == 1
        by_user = {r["user_id"]: r for r in data["results"]}
        assert by_user[users[1]["user_id"]]["success"] is False
        assert by_user[users[1]["user_id"]]["error"] == "Already checked in today"
        assert by_user[users[0]["user_id"]]["attendance"]["user_name"] == "Alice"

    def test_repeated_ids_processed_once(self, client, db):
        session = create_test_admin(client)
        alice = create_test_user(client, session, "Alice")
        resp = client.post(
            f"/api/events/{session['event_id']}/attendances/manual",
            json={"user_ids": [alice["user_id"], alice["user_id"]]},
            headers=auth_headers(session),
        )
        data = resp.json()
        assert data["success_count"] == 1
        assert data["already_checked_in_count"] == 0
        assert len(data["results"]) == 1
        assert db.query(Attendance).count() == 1

    def test_unknown_user_reported(self, client):
        session = create_test_admin(client)
        resp = client.post(
            f"/api/events/{session['event_id']}/attendances/manual",
            json={"user_ids": ["ghost"]},
            headers=auth_headers(session),
        )
        data = resp.json()
        assert data["success_count"] == 0
        assert data["results"][0]["error"] == "User not found"

    def test_empty_selection_rejected(self, client):
        session = create_test_admin(client)
        resp = client.post(
            f"/api/events/{session['event_id']}/attendances/manual",
            json={"user_ids": []},
            headers=auth_headers(session),
        )
        assert resp.status_code == 422

    def test_allowed_on_inactive_event(self, client):
        session = create_test_admin(client)
        alice = create_test_user(client, session, "Alice")
        client.patch(
            f"/api/events/{session['event_id']}/active",
            json={"is_active": False},
            headers=auth_headers(session),
        )
        resp = client.post(
            f"/api/events/{session['event_id']}/attendances/manual",
            json={"user_ids": [alice["user_id"]]},
            headers=auth_headers(session),
        )
        assert resp.json()["success_count"] == 1

    def test_requires_ownership(self, client):
        owner = create_test_admin(client, username="owner")
        other = create_test_admin(client, username="other", group_name="Other")
        alice = create_test_user(client, owner, "Alice")
        resp = client.post(
            f"/api/events/{owner['event_id']}/attendances/manual",
            json={"user_ids": [alice["user_id"]]},
            headers=auth_headers(other),
        )
        assert resp.status_code == 403


class TestAttendanceViews:
    """Listing, cancellation and absentees."""

    def test_list_filtered_by_date(self, client, db):
        session = create_test_admin(client)
        event_id = session["event_id"]
        alice = create_test_user(client, session, "Alice")
        bob = create_test_user(client, session, "Bob")
        record_check_in(db, event_id, alice["user_id"], now=datetime(2025, 1, 5, 2, tzinfo=timezone.utc))
        record_check_in(db, event_id, bob["user_id"], now=datetime(2025, 1, 5, 4, tzinfo=timezone.utc))
        record_check_in(db, event_id, alice["user_id"], now=datetime(2025, 1, 6, 2, tzinfo=timezone.utc))

        resp = client.get(f"/api/events/{event_id}/attendances/", headers=auth_headers(session))
        assert len(resp.json()) == 3

        resp = client.get(
            f"/api/events/{event_id}/attendances/",
            params={"date": "2025-01-05"},
            headers=auth_headers(session),
        )
        data = resp.json()
        assert [r["user_name"] for r in data] == ["Bob", "Alice"]

    def test_delete_attendance_allows_new_check_in(self, client):
        session = create_test_admin(client)
        event_id = session["event_id"]
        create_test_user(client, session, "Alice")
        attendance = _check_in(client, event_id, "Alice").json()

        resp = client.delete(
            f"/api/events/{event_id}/attendances/{attendance['attendance_id']}",
            headers=auth_headers(session),
        )
        assert resp.status_code == 204
        assert _check_in(client, event_id, "Alice").status_code == 201

    def test_delete_missing_attendance(self, client):
        session = create_test_admin(client)
        resp = client.delete(
            f"/api/events/{session['event_id']}/attendances/nope",
            headers=auth_headers(session),
        )
        assert resp.status_code == 404

    def test_absentees_today(self, client):
        session = create_test_admin(client)
        event_id = session["event_id"]
        for name in ("Carol", "Alice", "Bob"):
            create_test_user(client, session, name)
        _check_in(client, event_id, "Bob")

        resp = client.get(f"/api/events/{event_id}/attendances/absentees", headers=auth_headers(session))
        assert resp.status_code == 200
        assert [u["name"] for u in resp.json()] == ["Alice", "Carol"]

    def test_absentees_for_past_date(self, client, db):
        session = create_test_admin(client)
        event_id = session["event_id"]
        alice = create_test_user(client, session, "Alice")
        create_test_user(client, session, "Bob")
        record_check_in(db, event_id, alice["user_id"], now=datetime(2025, 1, 5, 2, tzinfo=timezone.utc))

        resp = client.get(
            f"/api/events/{event_id}/attendances/absentees",
            params={"date": "2025-01-05"},
            headers=auth_headers(session),
        )
        assert [u["name"] for u in resp.json()] == ["Bob"]

    def test_absentees_empty_roster(self, client):
        session = create_test_admin(client)
        resp = client.get(
            f"/api/events/{session['event_id']}/attendances/absentees",
            headers=auth_headers(session),
        )
        assert resp.json() == []


class TestExport:
    """xlsx download."""

    def test_export_workbook(self, client, db):
        session = create_test_admin(client, group_name="Choir")
        event_id = session["event_id"]
        alice = create_test_user(client, session, "Alice")
        bob = create_test_user(client, session, "Bob")
        create_test_user(client, session, "Carol")
        record_check_in(db, event_id, alice["user_id"], now=datetime(2025, 1, 5, 2, tzinfo=timezone.utc))
        record_check_in(db, event_id, bob["user_id"], now=datetime(2025, 1, 6, 2, tzinfo=timezone.utc))
        record_check_in(db, event_id, bob["user_id"], now=datetime(2026, 2, 1, 2, tzinfo=timezone.utc))

        resp = client.get(f"/api/events/{event_id}/attendances/export", headers=auth_headers(session))
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert "Choir_attendance.xlsx" in resp.headers["content-disposition"]

        wb = load_workbook(io.BytesIO(resp.content))
        assert wb.sheetnames == ["2025", "2026"]
        rows = list(wb["2025"].iter_rows(values_only=True))
        assert rows[0] == ("Name", "Jan", "Jan")
        assert rows[1] == (None, 5, 6)
        assert rows[2:] == [("Alice", "O", "-"), ("Bob", "-", "O"), ("Carol", "-", "-")]

    def test_export_requires_ownership(self, client):
        owner = create_test_admin(client, username="owner")
        other = create_test_admin(client, username="other", group_name="Other")
        resp = client.get(f"/api/events/{owner['event_id']}/attendances/export", headers=auth_headers(other))
        assert resp.status_code == 403
