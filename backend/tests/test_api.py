"""
HTTP tests: public and admin routes over a file-backed SQLite store, scheduler off.
"""
from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient

from tablebook.core.errors import StorageUnavailable
from tablebook.db.session import build_session_factory
from tablebook.main import create_app
from tablebook.models.reservation import Reservation
from tablebook.services.store import ReservationStore
from tests.helpers import SUNDAY, TUESDAY, add_reservation


@pytest.fixture
def client(settings, store, notifier):
    app = create_app(settings, store=store, notifier=notifier, run_scheduler=False)
    with TestClient(app) as c:
        yield c


def booking(**overrides) -> dict:
    body = {
        "date": TUESDAY,
        "time": "18:00",
        "first_name": "Ana",
        "name": "Silva",
        "email": "ana@example.com",
        "phone": "+66 1",
        "guests": 2,
        "notes": "",
    }
    body.update(overrides)
    return body


class TestPublic:
    def test_health_and_config(self, client):
        assert client.get("/health").json() == {"status": "ok"}
        config = client.get("/api/config").json()
        assert config["brand"] == "Testhaus"
        assert config["max_online_guests"] == 10

    def test_slots(self, client):
        slots = client.get("/api/slots", params={"date": TUESDAY, "guests": 2}).json()
        assert slots[0] == {"time": "10:00", "bookable": True, "reason": None, "seats_left": 40}
        assert client.get("/api/slots", params={"date": SUNDAY}).json() == []
        assert client.get("/api/slots", params={"date": "soon"}).status_code == 400
        assert client.get("/api/slots", params={"date": TUESDAY, "guests": 0}).status_code == 422

    def test_book_then_confirmation_mail(self, client, notifier):
        r = client.post("/api/reservations", json=booking())
        assert r.status_code == 200
        data = r.json()
        assert data["ok"] is True
        assert data["reservation"]["status"] == "confirmed"
        assert "cancel_token" not in data["reservation"]
        assert data["loyalty"] == {
            "visit_index": 1,
            "discount": 0,
            "now_unlocked_tier": None,
            "next_milestone": None,
            "show_loyalty_popup": False,
        }
        assert len(notifier.to("ana@example.com")) == 1
        assert len(notifier.to("admin@tablebook.test")) == 1

    def test_fifth_booking_unlocks_tier(self, client, store):
        for _ in range(4):
            add_reservation(store, "2026-10-13", "18:00", email="ana@example.com")
        loyalty = client.post("/api/reservations", json=booking(email="ANA@example.com")).json()["loyalty"]
        assert loyalty["visit_index"] == 5
        assert loyalty["discount"] == 5
        assert loyalty["now_unlocked_tier"] == 5
        assert loyalty["show_loyalty_popup"] is True

    @pytest.mark.parametrize(
        "overrides,status,error",
        [
            ({"date": SUNDAY}, 409, "closed_day"),
            ({"time": "21:00"}, 409, "outside_hours"),
            ({"guests": 11}, 409, "too_many_guests"),
            ({"time": "7pm"}, 400, "invalid_input"),
            ({"email": "nope"}, 400, "invalid_input"),
        ],
    )
    def test_rejections(self, client, notifier, overrides, status, error):
        r = client.post("/api/reservations", json=booking(**overrides))
        assert r.status_code == status
        assert r.json()["detail"]["error"] == error
        assert notifier.sent == []

    def test_fully_booked(self, client, store):
        add_reservation(store, hhmm="18:00", guests=40)
        r = client.post("/api/reservations", json=booking())
        assert r.status_code == 409
        assert r.json()["detail"]["error"] == "fully_booked"

    def test_cancel_link_is_idempotent(self, client, store, notifier):
        client.post("/api/reservations", json=booking())
        with store.session() as db:
            token = db.query(Reservation).one().cancel_token
        notifier.sent.clear()

        first = client.get(f"/cancel/{token}").json()
        second = client.post(f"/api/cancel/{token}").json()
        assert first["status"] == "canceled" and first["already_canceled"] is False
        assert second["status"] == "canceled" and second["already_canceled"] is True
        assert len(notifier.to("ana@example.com")) == 1
        assert client.get("/cancel/unknown").status_code == 404

    def test_loyalty_lookup(self, client, store):
        add_reservation(store, email="ben@example.com")
        assert client.get("/api/loyalty", params={"email": "Ben@Example.com"}).json() == {
            "tier": 0,
            "visit_index": 1,
            "next_milestone": None,
        }

    def test_mail_failure_does_not_fail_booking(self, client, notifier):
        notifier.fail_for.add("ana@example.com")
        assert client.post("/api/reservations", json=booking()).status_code == 200


class TestAdmin:
    def test_walk_in_and_listing(self, client):
        r = client.post("/api/admin/walkin", json={"date": TUESDAY, "time": "18:00", "guests": 4})
        assert r.status_code == 200
        assert r.json()["is_walk_in"] is True
        client.post("/api/reservations", json=booking(time="19:00"))
        rows = client.get("/api/admin/reservations", params={"date": TUESDAY}).json()
        assert [(row["time"], row["loyalty"]) for row in rows] == [
            ("18:00", None),
            ("19:00", {"tier": 0, "visit_index": 1, "next_milestone": None}),
        ]
        assert client.get("/api/admin/reservations", params={"view": "month"}).status_code == 422

    def test_walk_in_total_cap(self, client, store):
        add_reservation(store, hhmm="18:00", guests=46, is_walk_in=True)
        r = client.post("/api/admin/walkin", json={"date": TUESDAY, "time": "18:00", "guests": 3})
        assert r.status_code == 409
        assert r.json()["detail"]["error"] == "fully_booked"

    def test_no_show_and_delete(self, client, store):
        row = add_reservation(store)
        assert client.post(f"/api/admin/reservations/{row.id}/noshow").json()["status"] == "noshow"
        assert client.delete(f"/api/admin/reservations/{row.id}").json() == {"ok": True}
        assert client.delete(f"/api/admin/reservations/{row.id}").status_code == 404
        assert client.post("/api/admin/reservations/missing/noshow").status_code == 404

    def test_closures_block_booking(self, client):
        r = client.post(
            "/api/admin/closure",
            json={"start_ts": f"{TUESDAY} 17:00", "end_ts": f"{TUESDAY}T19:00", "reason": "Private event"},
        )
        assert r.status_code == 200
        closure_id = r.json()["id"]
        blocked = client.post("/api/reservations", json=booking())
        assert blocked.json()["detail"]["error"] == "blocked"
        assert [c["id"] for c in client.get("/api/admin/closure").json()] == [closure_id]

        assert client.delete(f"/api/admin/closure/{closure_id}").json() == {"ok": True}
        assert client.delete(f"/api/admin/closure/{closure_id}").status_code == 404
        assert client.post("/api/reservations", json=booking()).status_code == 200

    def test_closure_validation(self, client):
        r = client.post("/api/admin/closure", json={"start_ts": f"{TUESDAY} 19:00", "end_ts": f"{TUESDAY} 18:00"})
        assert r.status_code == 400
        r = client.post("/api/admin/closure", json={"start_ts": "later", "end_ts": f"{TUESDAY} 18:00"})
        assert r.status_code == 400

    @pytest.mark.parametrize("start", [f"{TUESDAY}T17:00+02:00", f"{TUESDAY}T17:00:00-05:00"])
    def test_closure_with_utc_offset_rejected(self, client, start):
        r = client.post("/api/admin/closure", json={"start_ts": start, "end_ts": f"{TUESDAY} 19:00"})
        assert r.status_code == 400
        assert "UTC offset" in r.json()["detail"]
        assert client.get("/api/admin/closure").json() == []

    def test_day_closure(self, client):
        r = client.post("/api/admin/closure/day", json={"date": TUESDAY, "reason": "Holiday"})
        assert r.status_code == 200
        slots = client.get("/api/slots", params={"date": TUESDAY}).json()
        assert all(s["reason"] in ("blocked", "outside_hours") for s in slots)

    def test_special_dates(self, client):
        r = client.post("/api/admin/special-date", json={"date": "24.12.2026", "title": "Christmas Eve", "message": "Set menu"})
        assert r.json() == {"ok": True, "notice": {"date": "2026-12-24", "title": "Christmas Eve", "message": "Set menu"}}
        assert client.get("/api/special-dates", params={"date": "2026-12-24"}).json()[0]["message"] == "Set menu"
        assert len(client.get("/api/admin/special-dates").json()) == 1
        assert client.post("/api/admin/special-date", json={"date": "2026-12-24", "message": " "}).status_code == 400
        assert client.delete("/api/admin/special-date/2026-12-24").json() == {"ok": True, "deleted": True}
        assert client.get("/api/special-dates").json() == []


class StoreFailingAfterAdmission(ReservationStore):
    """Every session opened after the first committed admission fails."""

    admitted = False

    @contextmanager
    def admission(self, date_str: str):
        with super().admission(date_str) as db:
            yield db
        self.admitted = True

    def session(self):
        if self.admitted:
            raise StorageUnavailable("database went away")
        return super().session()


class TestBookingCommitIsReported:
    def test_storage_loss_after_commit_still_confirms(self, settings, db_engine, store, notifier):
        flaky = StoreFailingAfterAdmission(build_session_factory(db_engine), timeout_seconds=30)
        app = create_app(settings, store=flaky, notifier=notifier, run_scheduler=False)
        with TestClient(app) as c:
            r = c.post("/api/reservations", json=booking())
        assert r.status_code == 200
        data = r.json()
        assert data["loyalty"]["visit_index"] == 1
        with store.session() as db:
            assert [row.id for row in db.query(Reservation).all()] == [data["reservation"]["id"]]
        assert len(notifier.to("ana@example.com")) == 1
