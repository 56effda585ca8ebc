"""Tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from booking_engine.api.app import REQUEST_ID_HEADER, create_app
from tests.conftest import MONDAY, make_config

PREFIX = "/api/v1"


@pytest.fixture
def client(coordinator, config):
    with TestClient(create_app(coordinator, config)) as test_client:
        yield test_client


@pytest.fixture
def monday(client, monday_rule):
    return MONDAY.isoformat()


def _book(client, customer_id, day, start, **extra):
    body = {"customer_id": customer_id, "date": day, "start_time": start, **extra}
    return client.post(f"{PREFIX}/bookings", json=body)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "booking-engine-test"}

    def test_request_id_generated(self, client):
        assert client.get("/health").headers[REQUEST_ID_HEADER]

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={REQUEST_ID_HEADER: "req-42"})
        assert response.headers[REQUEST_ID_HEADER] == "req-42"


class TestAvailabilityEndpoints:
    def test_slots_for_date(self, client, monday):
        response = client.get(f"{PREFIX}/availability", params={"date": monday})
        assert response.status_code == 200
        assert [s["start_time"] for s in response.json()] == ["09:00", "10:15", "11:30"]
        assert response.json()[0]["end_time"] == "10:00"

    def test_range(self, client, monday):
        response = client.get(
            f"{PREFIX}/availability/range",
            params={"start_date": monday, "end_date": "2026-10-27"},
        )
        assert response.status_code == 200
        assert len(response.json()[monday]) == 3
        assert response.json()["2026-10-27"] == []

    def test_inverted_range_rejected(self, client, monday):
        response = client.get(
            f"{PREFIX}/availability/range",
            params={"start_date": monday, "end_date": "2026-10-20"},
        )
        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_next_slot(self, client, monday):
        response = client.get(f"{PREFIX}/availability/next", params={"from_date": monday})
        assert response.json()["date"] == monday
        assert response.json()["start_time"] == "09:00"

    def test_alternative_dates(self, client, monday):
        response = client.get(f"{PREFIX}/availability/alternative-dates", params={"date": monday})
        # Only Mondays have a rule; the next one is the seventh day searched.
        assert response.json() == {"original_date": monday, "alternatives": ["2026-11-02"]}

    def test_bad_date_is_framework_422(self, client):
        response = client.get(f"{PREFIX}/availability", params={"date": "next monday"})
        assert response.status_code == 422


class TestBookingEndpoints:
    def test_create_booking(self, client, monday):
        response = _book(client, "cust-1", monday, "10:15")
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "PENDING"
        assert body["end_time"] == "11:15"
        assert body["history"][0]["status"] == "PENDING"

    def test_taken_slot_is_409_with_alternatives(self, client, monday):
        _book(client, "cust-1", monday, "10:15")
        response = _book(client, "cust-2", monday, "10:15")
        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "SLOT_NO_LONGER_AVAILABLE"
        assert [s["start_time"] for s in body["details"]["alternatives"]] == ["09:00", "11:30"]

    def test_past_date_is_422(self, client, monday):
        response = _book(client, "cust-1", "2026-10-12", "09:00")
        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_missing_booking_is_404(self, client):
        response = client.get(f"{PREFIX}/bookings/BK-MISSING")
        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    def test_confirm_check_in_check_out(self, client, monday):
        booking_id = _book(client, "cust-1", monday, "10:15").json()["id"]
        assert client.post(f"{PREFIX}/bookings/{booking_id}/confirm").json()["status"] == "CONFIRMED"
        assert client.post(f"{PREFIX}/bookings/{booking_id}/check-in").json()["status"] == "IN_PROGRESS"
        assert client.post(f"{PREFIX}/bookings/{booking_id}/check-out").json()["status"] == "COMPLETED"

    def test_declined_payment_is_402(self, client, monday, billing):
        booking_id = _book(client, "cust-1", monday, "10:15").json()["id"]
        billing.decline(booking_id)
        response = client.post(f"{PREFIX}/bookings/{booking_id}/confirm")
        assert response.status_code == 402
        assert response.json()["error"] == "BILLING_CONFIRMATION_FAILED"
        booking = client.get(f"{PREFIX}/bookings/{booking_id}").json()
        assert booking["status"] == "CANCELLED"
        assert booking["cancellation_reason"] == "BILLING_FAILED"

    def test_invalid_transition_is_409(self, client, monday):
        booking_id = _book(client, "cust-1", monday, "10:15").json()["id"]
        response = client.post(f"{PREFIX}/bookings/{booking_id}/check-in")
        assert response.status_code == 409
        assert response.json()["details"] == {
            "entity": "Booking", "current": "PENDING", "requested": "IN_PROGRESS",
        }

    def test_cancel_without_body(self, client, monday):
        booking_id = _book(client, "cust-1", monday, "10:15").json()["id"]
        response = client.post(f"{PREFIX}/bookings/{booking_id}/cancel")
        assert response.json()["cancellation_reason"] == "CUSTOMER_REQUEST"
        assert response.json()["cancelled_by"] == "customer"

    def test_cancel_with_reason(self, client, monday):
        booking_id = _book(client, "cust-1", monday, "10:15").json()["id"]
        response = client.post(
            f"{PREFIX}/bookings/{booking_id}/cancel",
            json={"reason": "TECHNICIAN_UNAVAILABLE", "actor": "admin"},
        )
        assert response.json()["cancellation_reason"] == "TECHNICIAN_UNAVAILABLE"

    def test_reschedule(self, client, monday):
        booking_id = _book(client, "cust-1", monday, "09:00").json()["id"]
        response = client.post(
            f"{PREFIX}/bookings/{booking_id}/reschedule",
            json={"new_date": monday, "new_start_time": "11:30"},
        )
        assert response.status_code == 201
        assert response.json()["rescheduled_from"] == booking_id
        old = client.get(f"{PREFIX}/bookings/{booking_id}").json()
        assert old["status"] == "RESCHEDULED"

    def test_upcoming_for_customer(self, client, monday):
        _book(client, "cust-1", monday, "09:00")
        _book(client, "cust-2", monday, "10:15")
        response = client.get(f"{PREFIX}/bookings", params={"customer_id": "cust-1"})
        assert [b["start_time"] for b in response.json()] == ["09:00"]


class TestQuoteEndpoints:
    @pytest.fixture
    def request_id(self, client):
        response = client.post(
            f"{PREFIX}/service-requests",
            json={"customer_id": "cust-1", "category": "Plumbing", "urgency": "HIGH"},
        )
        assert response.status_code == 201
        return response.json()["id"]

    def _quote(self, client, request_id, technician_id):
        return client.post(
            f"{PREFIX}/service-requests/{request_id}/quotes",
            json={
                "technician_id": technician_id,
                "estimated_hours": "2",
                "materials_cost": "40",
                "labor_cost": "160",
            },
        )

    def test_submit_and_list(self, client, request_id):
        response = self._quote(client, request_id, "tech-a")
        assert response.status_code == 201
        assert float(response.json()["total_cost"]) == 200.0
        listed = client.get(f"{PREFIX}/service-requests/{request_id}/quotes").json()
        assert [q["technician_id"] for q in listed] == ["tech-a"]

    def test_duplicate_quote_is_409(self, client, request_id):
        self._quote(client, request_id, "tech-a")
        response = self._quote(client, request_id, "tech-a")
        assert response.status_code == 409
        assert response.json()["error"] == "DUPLICATE_QUOTE"

    def test_accept_then_second_accept_conflicts(self, client, request_id):
        first = self._quote(client, request_id, "tech-a").json()["id"]
        second = self._quote(client, request_id, "tech-b").json()["id"]

        response = client.post(f"{PREFIX}/quotes/{first}/accept", json={"scheduled_date": "2026-10-26"})
        assert response.status_code == 201
        assert response.json()["status"] == "SCHEDULED"
        assert response.json()["scheduled_date"] == "2026-10-26"

        response = client.post(f"{PREFIX}/quotes/{second}/accept")
        assert response.status_code == 409
        assert response.json()["error"] == "ALREADY_ACCEPTED"

        request = client.get(f"{PREFIX}/service-requests/{request_id}").json()
        assert request["status"] == "ASSIGNED"
        assert request["assigned_technician_id"] == "tech-a"

    def test_job_flow_and_rating(self, client, request_id):
        quote_id = self._quote(client, request_id, "tech-a").json()["id"]
        job_id = client.post(f"{PREFIX}/quotes/{quote_id}/accept").json()["id"]

        assert client.post(f"{PREFIX}/jobs/{job_id}/start").json()["status"] == "IN_PROGRESS"
        done = client.post(f"{PREFIX}/jobs/{job_id}/complete", json={"actual_hours": "2.5"})
        assert done.json()["status"] == "COMPLETED"

        response = client.post(f"{PREFIX}/jobs/{job_id}/rate", json={"stars": 5, "feedback": "tidy work"})
        assert response.status_code == 204
        assert client.get(f"{PREFIX}/jobs/{job_id}").json()["customer_rating"] == 5

        response = client.post(f"{PREFIX}/jobs/{job_id}/rate", json={"stars": 2})
        assert response.status_code == 409
        assert response.json()["error"] == "ALREADY_RATED"

    def test_rating_out_of_range_is_422(self, client, request_id):
        quote_id = self._quote(client, request_id, "tech-a").json()["id"]
        job_id = client.post(f"{PREFIX}/quotes/{quote_id}/accept").json()["id"]
        client.post(f"{PREFIX}/jobs/{job_id}/start")
        client.post(f"{PREFIX}/jobs/{job_id}/complete", json={"actual_hours": "1"})
        response = client.post(f"{PREFIX}/jobs/{job_id}/rate", json={"stars": 9})
        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"


class TestAdminEndpoints:
    def test_create_rule_applies_defaults(self, client):
        response = client.post(
            f"{PREFIX}/admin/availability-rules",
            json={"day_of_week": 2, "start_time": "08:00", "end_time": "16:00"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["day_name"] == "Tuesday"
        assert body["buffer_minutes"] == 30
        assert body["slot_duration_minutes"] == 60

    def test_invalid_rule_is_422(self, client):
        response = client.post(
            f"{PREFIX}/admin/availability-rules",
            json={"day_of_week": 2, "start_time": "16:00", "end_time": "08:00"},
        )
        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_patch_and_deactivate(self, client, monday_rule):
        url = f"{PREFIX}/admin/availability-rules/{monday_rule.id}"
        assert client.patch(url, json={"buffer_minutes": 5}).json()["buffer_minutes"] == 5
        assert client.post(f"{url}/deactivate").json()["is_available"] is False
        listed = client.get(f"{PREFIX}/admin/availability-rules", params={"is_available": True}).json()
        assert listed == []

    def test_bulk_upsert(self, client, monday_rule):
        response = client.put(
            f"{PREFIX}/admin/availability-rules",
            json=[
                {"id": monday_rule.id, "end_time": "13:00"},
                {"day_of_week": 3, "start_time": "09:00", "end_time": "11:00"},
            ],
        )
        assert response.status_code == 200
        assert [r["end_time"] for r in response.json()] == ["13:00", "11:00"]

    def test_stats(self, client, monday):
        booking_id = _book(client, "cust-1", monday, "09:00").json()["id"]
        client.post(f"{PREFIX}/bookings/{booking_id}/cancel")
        stats = client.get(f"{PREFIX}/admin/bookings/stats").json()
        assert stats["total"] == 1
        assert stats["cancellation_rate"] == 100.0


class TestDefaultApp:
    def test_builds_own_coordinator(self):
        app = create_app(config=make_config())
        with TestClient(app) as client:
            assert client.get("/health").status_code == 200
            assert app.state.coordinator.rules.list_rules() == []
