"""HTTP surface: envelopes, status codes and auth gating."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.exc import DataError, OperationalError

HOST = {"X-User-Id": "host-1"}


@pytest.fixture
def create_drawing(client, clock):
    def _create(**overrides):
        body = {
            "title": "Spring giveaway",
            "end_at": (clock() + timedelta(days=7)).isoformat() + "Z",
            "play_with_numbers": True,
            "quantity_of_numbers": 25,
        }
        body.update(overrides)
        resp = client.post("/api/drawings", json=body, headers=HOST)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]

    return _create


def _reserve(client, drawing_id: str, number: int, **extra):
    return client.post(f"/api/drawings/{drawing_id}/reserve", json={"number": number, **extra})


def _participate(client, drawing_id: str, selections, name: str = "Ana"):
    return client.post(
        f"/api/drawings/{drawing_id}/participate",
        json={"name": name, "phone": "555-0100", "email": "ana@example.com", "selections": selections},
    )


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "data": {"status": "ok"}, "error": None}


def test_unknown_route_is_enveloped(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json()["error"]["code"] == "not_found"


class TestDrawings:
    def test_create_requires_user(self, client):
        resp = client.post("/api/drawings", json={"title": "x"})
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "unauthorized"

    def test_create_validates_payload(self, client):
        resp = client.post("/api/drawings", json={"title": "", "play_with_numbers": True}, headers=HOST)
        body = resp.get_json()
        assert resp.status_code == 400
        assert body["error"]["code"] == "validation_error"
        assert "end_at" in body["error"]["details"]

    def test_create_and_fetch(self, client, create_drawing):
        created = create_drawing(winners_amount=2)

        assert created["owner_id"] == "host-1"
        assert created["quantity_of_numbers"] == 25
        assert created["end_at"].endswith("Z")

        fetched = client.get(f"/api/drawings/{created['id']}").get_json()["data"]
        assert fetched == created

        listed = client.get("/api/drawings", headers=HOST).get_json()["data"]
        assert [d["id"] for d in listed] == [created["id"]]
        assert client.get("/api/drawings", headers={"X-User-Id": "other"}).get_json()["data"] == []

    def test_missing_drawing(self, client):
        assert client.get("/api/drawings/missing").status_code == 404

    def test_end_at_in_the_past_is_rejected(self, client, clock):
        body = {
            "title": "Already over",
            "end_at": (clock() - timedelta(hours=1)).isoformat() + "Z",
            "play_with_numbers": True,
            "quantity_of_numbers": 10,
        }

        resp = client.post("/api/drawings", json=body, headers=HOST)

        assert resp.status_code == 400
        assert resp.get_json()["error"]["details"] == {"end_at": ["Must be in the future"]}
        assert client.get("/api/drawings", headers=HOST).get_json()["data"] == []


class TestSlots:
    def test_reserve_then_conflict(self, client, create_drawing):
        drawing = create_drawing()

        first = _reserve(client, drawing["id"], 5)
        second = _reserve(client, drawing["id"], 5)

        assert first.status_code == 200
        assert first.headers["Cache-Control"] == "no-store"
        data = first.get_json()["data"]
        assert data["number"] == 5
        assert data["reservation_token"]
        assert data["expires_at"].endswith("Z")

        assert second.status_code == 409
        assert second.get_json()["error"]["message"] == "Number no longer available, please choose another"

    def test_reserve_out_of_range(self, client, create_drawing):
        drawing = create_drawing()
        assert _reserve(client, drawing["id"], 26).status_code == 409
        assert _reserve(client, drawing["id"], 0).status_code == 400
        assert _reserve(client, drawing["id"], "7").status_code == 400

    def test_slots_query_marks_own_hold(self, client, create_drawing):
        drawing = create_drawing()
        token = _reserve(client, drawing["id"], 3).get_json()["data"]["reservation_token"]

        resp = client.get(
            f"/api/drawings/{drawing['id']}/slots?numbers=3,4",
            headers={"X-Reservation-Token": token},
        )
        assert resp.headers["Cache-Control"] == "no-store"
        by_number = {s["number"]: s for s in resp.get_json()["data"]["slots"]}
        assert by_number[3]["status"] == "reserved"
        assert by_number[3]["is_mine"] is True
        assert by_number[3]["expires_at"] is not None
        assert by_number[4]["status"] == "available"
        assert by_number[4]["is_mine"] is False

        anonymous = client.get(f"/api/drawings/{drawing['id']}/slots?numbers=3").get_json()["data"]["slots"][0]
        assert anonymous["is_mine"] is False

    @pytest.mark.parametrize("query", ["", "?numbers=", "?numbers=a,b"])
    def test_slots_query_requires_numbers(self, client, create_drawing, query):
        drawing = create_drawing()
        assert client.get(f"/api/drawings/{drawing['id']}/slots{query}").status_code == 400

    def test_stats(self, client, create_drawing):
        drawing = create_drawing(quantity_of_numbers=4)
        token = _reserve(client, drawing["id"], 1).get_json()["data"]["reservation_token"]
        _reserve(client, drawing["id"], 2)
        assert _participate(client, drawing["id"], [{"number": 1, "reservation_token": token}]).status_code == 201

        resp = client.get(f"/api/drawings/{drawing['id']}/stats")

        assert resp.headers["Cache-Control"] == "no-store"
        assert resp.get_json()["data"] == {
            "total": 4,
            "available": 2,
            "reserved": 1,
            "taken": 1,
            "percentage_taken": 25,
        }

    def test_huge_numbers_are_rejected_as_input(self, client, create_drawing):
        drawing = create_drawing()
        huge = 2**70

        query = client.get(f"/api/drawings/{drawing['id']}/slots?numbers={huge}")
        reserve = _reserve(client, drawing["id"], huge)
        above_pool_limit = _reserve(client, drawing["id"], 100_001)

        for resp in (query, reserve, above_pool_limit):
            assert resp.status_code == 400, resp.get_json()
            assert resp.get_json()["error"]["code"] == "validation_error"

    def test_reserve_after_end(self, client, clock, create_drawing):
        drawing = create_drawing()
        clock.advance(days=30)

        resp = _reserve(client, drawing["id"], 3)

        assert resp.status_code == 400
        assert resp.get_json()["error"]["message"] == "Drawing has already ended"


class TestParticipants:
    def test_participate_and_review(self, client, create_drawing):
        drawing = create_drawing()
        token = _reserve(client, drawing["id"], 9).get_json()["data"]["reservation_token"]

        resp = _participate(client, drawing["id"], [{"number": 9, "reservation_token": token}])
        assert resp.status_code == 201
        participant = resp.get_json()["data"]
        assert participant["numbers"] == [9]
        assert participant["status"] == "approved"

        public = client.get(f"/api/drawings/{drawing['id']}/participants/{participant['id']}")
        assert public.get_json()["data"]["numbers"] == [9]

        assert client.get(f"/api/drawings/{drawing['id']}/participants").status_code == 401
        other = client.get(f"/api/drawings/{drawing['id']}/participants", headers={"X-User-Id": "other"})
        assert other.status_code == 403
        listed = client.get(f"/api/drawings/{drawing['id']}/participants", headers=HOST).get_json()["data"]
        assert [p["id"] for p in listed] == [participant["id"]]

    def test_participate_with_wrong_token_saves_nothing(self, client, create_drawing):
        drawing = create_drawing()
        _reserve(client, drawing["id"], 9)

        resp = _participate(client, drawing["id"], [{"number": 9, "reservation_token": "not-mine"}])

        assert resp.status_code == 409
        listed = client.get(f"/api/drawings/{drawing['id']}/participants", headers=HOST).get_json()["data"]
        assert listed == []

    def test_participate_after_expiry(self, client, clock, create_drawing):
        drawing = create_drawing()
        token = _reserve(client, drawing["id"], 9, expiration_minutes=1).get_json()["data"]["reservation_token"]
        clock.advance(minutes=2)

        resp = _participate(client, drawing["id"], [{"number": 9, "reservation_token": token}])

        assert resp.status_code == 409

    def test_reject_frees_numbers(self, client, create_drawing):
        drawing = create_drawing()
        token = _reserve(client, drawing["id"], 9).get_json()["data"]["reservation_token"]
        pid = _participate(client, drawing["id"], [{"number": 9, "reservation_token": token}]).get_json()["data"]["id"]

        assert client.patch(f"/api/participants/{pid}", json={"status": "rejected"}).status_code == 401
        assert client.patch(f"/api/participants/{pid}", json={"status": "bogus"}, headers=HOST).status_code == 400

        resp = client.patch(f"/api/participants/{pid}", json={"status": "rejected"}, headers=HOST)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["status"] == "rejected"
        assert resp.get_json()["data"]["numbers"] == []

        again = client.patch(f"/api/participants/{pid}", json={"status": "approved"}, headers=HOST)
        assert again.status_code == 409
        assert _reserve(client, drawing["id"], 9).status_code == 200


class TestWinners:
    def test_manual_selection_flow(self, client, clock, create_drawing):
        drawing = create_drawing(winner_selection="manually", winners_amount=1)
        token = _reserve(client, drawing["id"], 12).get_json()["data"]["reservation_token"]
        _participate(client, drawing["id"], [{"number": 12, "reservation_token": token}])
        url = f"/api/drawings/{drawing['id']}/select-winners"

        early = client.post(url, json={"winner_numbers": [12]}, headers=HOST)
        assert early.status_code == 400

        clock.advance(days=8)
        assert client.post(url, json={"winner_numbers": [12]}, headers={"X-User-Id": "other"}).status_code == 403

        resp = client.post(url, json={"winner_numbers": [12]}, headers=HOST)
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["winner_numbers"] == [12]
        assert data["selection_method"] == "number"
        assert data["winners"][0]["participant_name"] == "Ana"

        public = client.get(url).get_json()["data"]
        assert public["winner_numbers"] == [12]

    def test_plain_drawing_random_selection(self, client, clock, create_drawing):
        drawing = create_drawing(play_with_numbers=False, quantity_of_numbers=0)
        assert _participate(client, drawing["id"], []).status_code == 201
        clock.advance(days=8)

        resp = client.post(f"/api/drawings/{drawing['id']}/select-winners", json={}, headers=HOST)

        data = resp.get_json()["data"]
        assert resp.status_code == 200
        assert data["winner_numbers"] is None
        assert [w["participant_name"] for w in data["winners"]] == ["Ana"]


class TestComments:
    def test_host_comments_on_participant(self, client, create_drawing):
        drawing = create_drawing(play_with_numbers=False, quantity_of_numbers=0)
        pid = _participate(client, drawing["id"], []).get_json()["data"]["id"]
        url = f"/api/participants/{pid}/comments"

        assert client.post(url, json={"comment": "paid in cash"}).status_code == 401
        assert client.post(url, json={"comment": "hi"}, headers={"X-User-Id": "other"}).status_code == 403
        assert client.post(url, json={"comment": ""}, headers=HOST).status_code == 400

        created = client.post(url, json={"comment": "paid in cash"}, headers=HOST)
        assert created.status_code == 201
        assert created.get_json()["data"]["participant_id"] == pid

        listed = client.get(url, headers=HOST).get_json()["data"]
        assert [c["comment"] for c in listed] == ["paid in cash"]


def test_huge_numbers_in_request_bodies(client, clock, create_drawing):
    drawing = create_drawing(winner_selection="manually")
    huge = 2**70

    participate = _participate(client, drawing["id"], [{"number": huge, "reservation_token": "t"}])
    clock.advance(days=8)
    select = client.post(
        f"/api/drawings/{drawing['id']}/select-winners", json={"winner_numbers": [huge]}, headers=HOST
    )

    for resp in (participate, select):
        assert resp.status_code == 400, resp.get_json()
        assert resp.get_json()["error"]["code"] == "validation_error"


class _FailingSlots:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    def get_stats(self, session, drawing_id):
        raise self.exc


@pytest.mark.parametrize(
    ("exc", "status", "code"),
    [
        (OperationalError("SELECT 1", {}, Exception("database is locked")), 503, "store_unavailable"),
        (DataError("SELECT 1", {}, Exception("integer out of range")), 500, "internal_error"),
    ],
)
def test_only_operational_store_errors_are_retryable(client, monkeypatch, exc, status, code):
    monkeypatch.setattr("giveaway.routes.slots.slot_service", lambda: _FailingSlots(exc))

    resp = client.get("/api/drawings/any/stats")

    assert resp.status_code == status
    assert resp.get_json()["error"]["code"] == code
