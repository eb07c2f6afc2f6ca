"""Integration tests for the reservation API endpoints.

These go through the real wiring (ORM stores, Django cache, system clock),
so event dates are computed relative to today.

Run with: pytest tests/test_reservation_api.py -v
"""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from reservations import models as orm


def next_wednesday(weeks_ahead: int = 8):
    day = timezone.localdate() + timedelta(weeks=weeks_ahead)
    return day + timedelta(days=(2 - day.weekday()) % 7)


@pytest.fixture
def venue_row(db):
    return orm.Venue.objects.create(
        name="Grand Hall", capacity=500, location="Downtown", base_rate=Decimal("5000")
    )


@pytest.fixture
def event_day():
    return next_wednesday()


def booking_payload(venue_row, event_day, **overrides) -> dict:
    payload = {
        "venue_id": str(venue_row.id),
        "customer_id": "customer-1",
        "event_name": "Product Launch",
        "event_type": "CORPORATE",
        "start_date": event_day.isoformat(),
        "end_date": event_day.isoformat(),
        "start_time": "10:00",
        "end_time": "13:00",
        "guest_count": 10,
        "line_items": [
            {"item_type": "CHAIR", "item_name": "Chairs", "quantity": 10, "unit_price": "50"}
        ],
    }
    payload.update(overrides)
    return payload


def quotation_payload(venue_row, event_day, **overrides) -> dict:
    payload = booking_payload(venue_row, event_day)
    del payload["start_date"], payload["end_date"]
    payload.update(event_date=event_day.isoformat(), event_name="Annual Dinner", **overrides)
    return payload


@pytest.mark.django_db
class TestBookingEndpoints:
    """Tests for /api/bookings."""

    def test_create_and_get(self, api_client, venue_row, event_day):
        response = api_client.post(
            "/api/bookings", booking_payload(venue_row, event_day), format="json"
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "PENDING"
        assert data["start_time"] == "10:00"
        assert Decimal(data["total_amount"]) == Decimal("6490.00")
        assert Decimal(data["deposit_amount"]) == Decimal("1298")
        assert Decimal(data["balance_amount"]) == Decimal("5192.00")
        assert len(data["line_items"]) == 1

        fetched = api_client.get(f"/api/bookings/{data['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["id"] == data["id"]

    def test_invalid_id_returns_400(self, api_client, db):
        response = api_client.get("/api/bookings/not-a-uuid")

        assert response.status_code == 400
        assert response.json() == {"code": "INVALID_ID", "message": "Invalid booking ID format"}

    def test_missing_booking_returns_404(self, api_client, db):
        response = api_client.get(f"/api/bookings/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["code"] == "BOOKING_NOT_FOUND"

    def test_validation_errors_are_all_reported(self, api_client, venue_row, event_day):
        payload = booking_payload(
            venue_row, event_day, customer_id="", guest_count=0, end_time="09:00"
        )
        response = api_client.post("/api/bookings", payload, format="json")

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_FAILED"
        assert "Customer ID is required" in body["errors"]
        assert "End time must be after start time" in body["errors"]
        assert "Guest count must be greater than 0" in body["errors"]

    def test_malformed_payload_is_a_validation_error(self, api_client, venue_row, event_day):
        payload = booking_payload(venue_row, event_day, start_date="next tuesday")
        response = api_client.post("/api/bookings", payload, format="json")

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_FAILED"

    def test_double_booking_returns_409(self, api_client, venue_row, event_day):
        api_client.post("/api/bookings", booking_payload(venue_row, event_day), format="json")
        response = api_client.post(
            "/api/bookings",
            booking_payload(venue_row, event_day, start_time="12:00", end_time="15:00"),
            format="json",
        )

        assert response.status_code == 409
        assert response.json()["code"] == "VENUE_UNAVAILABLE"

    def test_lifecycle_and_guards(self, api_client, venue_row, event_day):
        booking_id = api_client.post(
            "/api/bookings", booking_payload(venue_row, event_day), format="json"
        ).json()["id"]

        assert api_client.post(f"/api/bookings/{booking_id}/check-in").status_code == 409
        assert api_client.post(f"/api/bookings/{booking_id}/confirm").json()["status"] == "CONFIRMED"
        assert api_client.post(f"/api/bookings/{booking_id}/check-in").json()["status"] == "CHECKED_IN"
        assert api_client.post(f"/api/bookings/{booking_id}/check-out").json()["status"] == "COMPLETED"
        assert api_client.post(f"/api/bookings/{booking_id}/cancel", {"reason": "x"}).status_code == 409

    def test_cancel_reports_refund(self, api_client, venue_row, event_day):
        booking_id = api_client.post(
            "/api/bookings", booking_payload(venue_row, event_day), format="json"
        ).json()["id"]

        response = api_client.post(
            f"/api/bookings/{booking_id}/cancel", {"reason": "Venue change"}, format="json"
        )

        assert response.status_code == 200
        body = response.json()
        assert body["booking"]["status"] == "CANCELLED"
        assert Decimal(body["refund_amount"]) == Decimal("5841")

    def test_patch_reprices(self, api_client, venue_row, event_day):
        booking_id = api_client.post(
            "/api/bookings", booking_payload(venue_row, event_day), format="json"
        ).json()["id"]

        response = api_client.patch(
            f"/api/bookings/{booking_id}", {"guest_count": 20}, format="json"
        )

        assert response.status_code == 200
        assert Decimal(response.json()["total_amount"]) == Decimal("7080.00")

    def test_list_and_statistics(self, api_client, venue_row, event_day):
        for start, end in (("08:00", "10:00"), ("10:00", "12:00")):
            api_client.post(
                "/api/bookings",
                booking_payload(venue_row, event_day, start_time=start, end_time=end),
                format="json",
            )

        page = api_client.get("/api/bookings", {"limit": 1, "sort_by": "start_date"}).json()
        assert page["total"] == 2
        assert len(page["items"]) == 1
        assert page["has_next"] is True

        stats = api_client.get("/api/bookings/statistics").json()
        assert stats["total_bookings"] == 2

    def test_bad_pagination_is_rejected(self, api_client, db):
        response = api_client.get("/api/bookings", {"limit": 500})
        assert response.status_code == 400


@pytest.mark.django_db
class TestQuotationEndpoints:
    """Tests for /api/quotations."""

    def test_quote_send_accept(self, api_client, venue_row, event_day):
        created = api_client.post(
            "/api/quotations", quotation_payload(venue_row, event_day), format="json"
        )
        assert created.status_code == 201
        quotation = created.json()
        assert quotation["status"] == "DRAFT"
        assert Decimal(quotation["total_amount"]) == Decimal("6490.00")

        sent = api_client.post(f"/api/quotations/{quotation['id']}/send")
        assert sent.json()["status"] == "SENT"

        accepted = api_client.post(f"/api/quotations/{quotation['id']}/accept")
        assert accepted.status_code == 201
        body = accepted.json()
        assert body["quotation"]["status"] == "ACCEPTED"
        assert body["booking"]["quotation_id"] == quotation["id"]
        assert Decimal(body["booking"]["total_amount"]) == Decimal("6490.00")

        again = api_client.post(f"/api/quotations/{quotation['id']}/accept")
        assert again.status_code == 409

    def test_lookup_by_number(self, api_client, venue_row, event_day):
        quotation = api_client.post(
            "/api/quotations", quotation_payload(venue_row, event_day), format="json"
        ).json()

        response = api_client.get(f"/api/quotations/by-number/{quotation['quotation_number']}")

        assert response.status_code == 200
        assert response.json()["id"] == quotation["id"]
        assert api_client.get("/api/quotations/by-number/QUO00000000NONE").status_code == 404

    def test_patch_line_items(self, api_client, venue_row, event_day):
        quotation = api_client.post(
            "/api/quotations", quotation_payload(venue_row, event_day), format="json"
        ).json()

        response = api_client.patch(
            f"/api/quotations/{quotation['id']}",
            {
                "line_items": [
                    {"item_type": "OTHER", "item_name": "Flowers", "quantity": 1, "unit_price": "2000"}
                ]
            },
            format="json",
        )

        assert response.status_code == 200
        assert [item["item_name"] for item in response.json()["line_items"]] == ["Flowers"]
        assert Decimal(response.json()["total_amount"]) == Decimal("8260.00")

    def test_rejected_quotation_cannot_be_accepted(self, api_client, venue_row, event_day):
        quotation = api_client.post(
            "/api/quotations", quotation_payload(venue_row, event_day), format="json"
        ).json()
        api_client.post(f"/api/quotations/{quotation['id']}/reject")

        response = api_client.post(f"/api/quotations/{quotation['id']}/accept")
        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_TRANSITION"

    def test_statistics(self, api_client, venue_row, event_day):
        api_client.post("/api/quotations", quotation_payload(venue_row, event_day), format="json")
        stats = api_client.get("/api/quotations/statistics").json()
        assert stats["total_quotations"] == 1
        assert stats["draft_quotations"] == 1


@pytest.mark.django_db
class TestPricingAndAvailability:
    def test_cost_calculation(self, api_client, venue_row, event_day):
        payload = quotation_payload(venue_row, event_day)
        response = api_client.post("/api/cost/calculate", payload, format="json")

        assert response.status_code == 200
        body = response.json()
        assert Decimal(body["subtotal"]) == Decimal("5500.00")
        assert Decimal(body["tax_amount"]) == Decimal("990.00")
        assert Decimal(body["total_amount"]) == Decimal("6490.00")
        assert Decimal(body["breakdown"]["chairs"]) == Decimal("500.00")
        assert "id" not in body["line_items"][0]

    def test_cost_calculation_for_unknown_venue(self, api_client, venue_row, event_day):
        payload = quotation_payload(venue_row, event_day, venue_id=str(uuid.uuid4()))
        response = api_client.post("/api/cost/calculate", payload, format="json")
        assert response.status_code == 404

    def test_availability(self, api_client, venue_row, event_day):
        url = f"/api/venues/{venue_row.id}/availability"
        query = {"date": event_day.isoformat(), "start_time": "11:00", "end_time": "12:00"}

        assert api_client.get(url, query).json()["available"] is True
        api_client.post("/api/bookings", booking_payload(venue_row, event_day), format="json")
        assert api_client.get(url, query).json()["available"] is False

    def test_availability_respects_blocks(self, api_client, venue_row, event_day):
        orm.AvailabilityBlock.objects.create(
            venue=venue_row,
            date=event_day,
            start_time="09:00",
            end_time="18:00",
            reason="Private function",
        )
        response = api_client.get(
            f"/api/venues/{venue_row.id}/availability",
            {"date": event_day.isoformat(), "start_time": "10:00", "end_time": "11:00"},
        )
        assert response.json()["available"] is False

    def test_availability_for_unknown_venue(self, api_client, db, event_day):
        response = api_client.get(
            f"/api/venues/{uuid.uuid4()}/availability",
            {"date": event_day.isoformat(), "start_time": "10:00", "end_time": "11:00"},
        )
        assert response.status_code == 404
