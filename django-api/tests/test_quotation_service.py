"""Unit tests for QuotationService against the in-memory stores.

Run with: pytest tests/test_quotation_service.py -v
"""

import uuid
from datetime import date, timedelta
from decimal import Decimal
from itertools import repeat

import pytest
from conftest import NOW, chairs, make_booking

from reservations.domain import BookingStatus, LineItem, LineItemType, QuotationStatus
from reservations.domain.errors import (
    DuplicateError,
    InvalidTransitionError,
    QuotationNotFoundError,
    ValidationFailedError,
    VenueNotFoundError,
    VenueUnavailableError,
)
from reservations.domain.models import BookingFilters, QuotationFilters
from reservations.domain.requests import (
    CostRequest,
    CreateBookingRequest,
    CreateQuotationRequest,
    UpdateQuotationRequest,
)
from reservations.services import QuotationService

WEDNESDAY = date(2030, 6, 5)


def quotation_request(venue, **overrides) -> CreateQuotationRequest:
    fields = dict(
        venue_id=str(venue.id),
        customer_id="customer-1",
        event_name="Annual Dinner",
        event_type="CORPORATE",
        event_date=WEDNESDAY,
        start_time="10:00",
        end_time="13:00",
        guest_count=10,
        line_items=(chairs(10),),
    )
    fields.update(overrides)
    return CreateQuotationRequest(**fields)


@pytest.fixture
def service_with_numbers(
    venue_store, quotation_store, availability, cost_engine, booking_service,
    unit_of_work, memory_cache, publisher, clock,
):
    """Build a QuotationService whose numbers come from ``numbers``."""

    def build(numbers) -> QuotationService:
        source = iter(numbers)
        return QuotationService(
            venues=venue_store,
            quotations=quotation_store,
            availability=availability,
            cost_engine=cost_engine,
            bookings=booking_service,
            unit_of_work=unit_of_work,
            cache=memory_cache,
            publisher=publisher,
            clock=clock,
            number_factory=lambda: next(source),
        )

    return build


class TestCreateQuotation:
    """Tests for QuotationService.create_quotation."""

    def test_creates_priced_draft(self, quotation_service, venue):
        quotation = quotation_service.create_quotation(quotation_request(venue))

        assert quotation.status == QuotationStatus.DRAFT
        assert quotation.quotation_number.startswith("QUO")
        assert quotation.subtotal == Decimal("5500.00")
        assert quotation.tax_amount == Decimal("990.00")
        assert quotation.total_amount == Decimal("6490.00")
        assert quotation.valid_until == NOW + timedelta(days=7)

    def test_retries_taken_numbers(self, service_with_numbers, venue):
        service = service_with_numbers(
            ["QUO00000001AAAA", "QUO00000001AAAA", "QUO00000002BBBB"]
        )
        first = service.create_quotation(quotation_request(venue))
        second = service.create_quotation(quotation_request(venue))

        assert first.quotation_number == "QUO00000001AAAA"
        assert second.quotation_number == "QUO00000002BBBB"

    def test_gives_up_after_repeated_collisions(self, service_with_numbers, venue):
        service = service_with_numbers(repeat("QUO00000001AAAA"))
        service.create_quotation(quotation_request(venue))

        with pytest.raises(DuplicateError):
            service.create_quotation(quotation_request(venue))

    def test_requires_line_items_and_future_validity(self, quotation_service, venue):
        request = quotation_request(venue, line_items=(), valid_until=NOW - timedelta(hours=1))
        with pytest.raises(ValidationFailedError) as exc_info:
            quotation_service.create_quotation(request)

        assert exc_info.value.errors == (
            "At least one line item is required",
            "Valid until date must be in the future",
        )

    def test_unknown_venue(self, quotation_service, venue):
        with pytest.raises(VenueNotFoundError):
            quotation_service.create_quotation(
                quotation_request(venue, venue_id=str(uuid.uuid4()))
            )


class TestUpdateQuotation:
    def test_new_line_items_replace_old_and_reprice(self, quotation_service, venue):
        quotation = quotation_service.create_quotation(quotation_request(venue))
        flowers = LineItem(LineItemType.OTHER, "Flowers", 1, Decimal("2000"))

        updated = quotation_service.update_quotation(
            str(quotation.id), UpdateQuotationRequest(line_items=(flowers,))
        )

        assert [item.item_name for item in updated.line_items] == ["Flowers"]
        assert updated.subtotal == Decimal("7000.00")
        assert updated.total_amount == Decimal("8260.00")
        assert quotation_service.get_quotation(str(quotation.id)) == updated

    def test_guest_change_reprices_existing_items(self, quotation_service, venue):
        quotation = quotation_service.create_quotation(quotation_request(venue))
        updated = quotation_service.update_quotation(
            str(quotation.id), UpdateQuotationRequest(guest_count=20)
        )
        assert updated.line_items[0].quantity == 20
        assert updated.subtotal == Decimal("6000.00")

    def test_notes_change_keeps_pricing(self, quotation_service, venue):
        quotation = quotation_service.create_quotation(quotation_request(venue))
        updated = quotation_service.update_quotation(
            str(quotation.id), UpdateQuotationRequest(notes="Vegetarian menu")
        )
        assert updated.notes == "Vegetarian menu"
        assert updated.total_amount == quotation.total_amount
        assert updated.line_items == quotation.line_items

    def test_accepted_quotation_is_frozen(self, quotation_service, venue):
        quotation = quotation_service.create_quotation(quotation_request(venue))
        quotation_service.send_quotation(str(quotation.id))
        quotation_service.accept_quotation(str(quotation.id))

        with pytest.raises(InvalidTransitionError):
            quotation_service.update_quotation(
                str(quotation.id), UpdateQuotationRequest(notes="Too late")
            )


class TestAcceptQuotation:
    def test_accepting_creates_matching_booking(self, quotation_service, publisher, venue):
        quotation = quotation_service.create_quotation(quotation_request(venue))
        quotation_service.send_quotation(str(quotation.id))

        result = quotation_service.accept_quotation(str(quotation.id))

        assert result.quotation.status == QuotationStatus.ACCEPTED
        assert result.quotation.is_accepted
        assert result.booking.status == BookingStatus.PENDING
        assert result.booking.quotation_id == quotation.id
        assert result.booking.total_amount == Decimal("6490.00")
        assert result.booking.deposit_amount == Decimal("1298")
        assert publisher.topics == [
            "quotation.created",
            "quotation.sent",
            "booking.created",
            "quotation.accepted",
        ]

    def test_draft_cannot_be_accepted(self, quotation_service, venue):
        quotation = quotation_service.create_quotation(quotation_request(venue))
        with pytest.raises(InvalidTransitionError):
            quotation_service.accept_quotation(str(quotation.id))

    def test_expired_validity_cannot_be_accepted(self, quotation_service, clock, venue):
        quotation = quotation_service.create_quotation(quotation_request(venue))
        quotation_service.send_quotation(str(quotation.id))
        clock.advance(days=8)

        with pytest.raises(InvalidTransitionError):
            quotation_service.accept_quotation(str(quotation.id))

    def test_past_event_date_conflicts_while_still_valid(
        self, quotation_service, booking_store, clock, venue
    ):
        quotation = quotation_service.create_quotation(
            quotation_request(venue, valid_until=NOW + timedelta(days=30))
        )
        quotation_service.send_quotation(str(quotation.id))
        clock.advance(days=3)

        with pytest.raises(InvalidTransitionError):
            quotation_service.accept_quotation(str(quotation.id))

        assert quotation_service.get_quotation(str(quotation.id)).status == QuotationStatus.SENT
        assert booking_store.count(BookingFilters()) == 0

    def test_taken_slot_leaves_quotation_sent(
        self, quotation_service, booking_service, booking_store, venue
    ):
        quotation = quotation_service.create_quotation(quotation_request(venue))
        quotation_service.send_quotation(str(quotation.id))
        booking_service.create_booking(
            CreateBookingRequest(
                venue_id=str(venue.id),
                customer_id="customer-2",
                event_name="Walk-in",
                event_type="PARTY",
                start_date=WEDNESDAY,
                end_date=WEDNESDAY,
                start_time="12:00",
                end_time="14:00",
                guest_count=5,
            )
        )

        with pytest.raises(VenueUnavailableError):
            quotation_service.accept_quotation(str(quotation.id))

        assert quotation_service.get_quotation(str(quotation.id)).status == QuotationStatus.SENT
        assert booking_store.count(BookingFilters()) == 1

    def test_failed_booking_rolls_back_acceptance(
        self, quotation_service, booking_store, venue
    ):
        quotation = quotation_service.create_quotation(quotation_request(venue))
        quotation_service.send_quotation(str(quotation.id))
        stale = make_booking(venue_id=venue.id, quotation_id=quotation.id)
        booking_store.add(stale.cancel("Superseded", Decimal("0"), NOW))

        with pytest.raises(DuplicateError):
            quotation_service.accept_quotation(str(quotation.id))

        current = quotation_service.get_quotation(str(quotation.id))
        assert current.status == QuotationStatus.SENT
        assert not current.is_accepted
        assert booking_store.count(BookingFilters()) == 1

    def test_cannot_accept_twice(self, quotation_service, venue):
        quotation = quotation_service.create_quotation(quotation_request(venue))
        quotation_service.send_quotation(str(quotation.id))
        quotation_service.accept_quotation(str(quotation.id))

        with pytest.raises(InvalidTransitionError):
            quotation_service.accept_quotation(str(quotation.id))


class TestOtherTransitions:
    def test_reject_twice_conflicts(self, quotation_service, venue):
        quotation = quotation_service.create_quotation(quotation_request(venue))
        quotation_service.reject_quotation(str(quotation.id))
        with pytest.raises(InvalidTransitionError):
            quotation_service.reject_quotation(str(quotation.id))

    def test_expire(self, quotation_service, venue):
        quotation = quotation_service.create_quotation(quotation_request(venue))
        expired = quotation_service.expire_quotation(str(quotation.id))
        assert expired.is_expired and expired.status == QuotationStatus.EXPIRED

    def test_expire_overdue(self, quotation_service, clock, venue):
        short = quotation_service.create_quotation(
            quotation_request(venue, valid_until=NOW + timedelta(days=1))
        )
        long = quotation_service.create_quotation(quotation_request(venue))
        clock.advance(days=2)

        expired = quotation_service.expire_overdue()

        assert [q.id for q in expired] == [short.id]
        assert quotation_service.get_quotation(str(long.id)).status == QuotationStatus.DRAFT
        assert quotation_service.expire_overdue() == []


class TestQueries:
    def test_get_by_number(self, quotation_service, venue):
        quotation = quotation_service.create_quotation(quotation_request(venue))
        assert quotation_service.get_by_number(quotation.quotation_number).id == quotation.id
        with pytest.raises(QuotationNotFoundError):
            quotation_service.get_by_number("QUO99999999ZZZZ")

    def test_statistics(self, quotation_service, venue):
        ids = [
            str(quotation_service.create_quotation(quotation_request(venue)).id)
            for _ in range(3)
        ]
        quotation_service.send_quotation(ids[0])
        quotation_service.accept_quotation(ids[0])
        quotation_service.reject_quotation(ids[1])

        stats = quotation_service.get_statistics()

        assert stats.total_quotations == 3
        assert stats.draft_quotations == 1
        assert stats.accepted_quotations == 1
        assert stats.rejected_quotations == 1
        assert stats.total_value == Decimal("6490.00")
        assert stats.acceptance_rate == Decimal("33.33")

    def test_list_by_status(self, quotation_service, venue):
        for _ in range(2):
            quotation_service.create_quotation(quotation_request(venue))
        sent = quotation_service.create_quotation(quotation_request(venue))
        quotation_service.send_quotation(str(sent.id))

        page = quotation_service.list_quotations(QuotationFilters(status=QuotationStatus.SENT))
        assert [q.id for q in page.items] == [sent.id]


class TestCalculateCost:
    def cost_request(self, venue, **overrides) -> CostRequest:
        fields = dict(
            venue_id=str(venue.id),
            event_date=WEDNESDAY,
            start_time="10:00",
            end_time="13:00",
            guest_count=10,
            line_items=(chairs(10),),
        )
        fields.update(overrides)
        return CostRequest(**fields)

    def test_prices_against_venue_rate(self, quotation_service, venue):
        cost = quotation_service.calculate_cost(self.cost_request(venue))
        assert cost.total_amount == Decimal("6490.00")

    def test_unknown_venue(self, quotation_service, venue):
        with pytest.raises(VenueNotFoundError):
            quotation_service.calculate_cost(
                self.cost_request(venue, venue_id=str(uuid.uuid4()))
            )

    def test_validation_errors(self, quotation_service, venue):
        with pytest.raises(ValidationFailedError):
            quotation_service.calculate_cost(self.cost_request(venue, guest_count=0))


