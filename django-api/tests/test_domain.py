"""Unit tests for domain value objects and aggregate state machines.

Run with: pytest tests/test_domain.py -v
"""

from dataclasses import replace
from datetime import date, time, timedelta
from decimal import Decimal

import pytest
from conftest import NOW, make_booking, make_quotation

from reservations.domain import (
    BookingStatus,
    DateRange,
    QuotationStatus,
    TimeWindow,
)
from reservations.domain.errors import (
    ErrorCode,
    InvalidTransitionError,
    ValidationFailedError,
)
from reservations.domain.models import Page
from reservations.domain.value_objects import parse_time, quantize_money, round_whole


class TestTimeWindow:
    """Tests for TimeWindow value object."""

    def test_from_strings_parses_hh_mm(self):
        window = TimeWindow.from_strings("10:00", "13:30")
        assert window.start == time(10, 0)
        assert window.end == time(13, 30)
        assert window.duration_hours == Decimal("3.5")

    def test_rejects_empty_or_inverted_window(self):
        with pytest.raises(ValueError):
            TimeWindow.from_strings("13:00", "13:00")
        with pytest.raises(ValueError):
            TimeWindow.from_strings("14:00", "13:00")

    @pytest.mark.parametrize("value", ["24:00", "9:00", "10:60", "ten", ""])
    def test_parse_time_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            parse_time(value)

    @pytest.mark.parametrize(
        "other, expected",
        [
            (("09:00", "10:00"), False),
            (("09:00", "10:01"), True),
            (("11:00", "12:00"), True),
            (("12:59", "15:00"), True),
            (("13:00", "15:00"), False),
            (("08:00", "14:00"), True),
        ],
    )
    def test_overlap_is_half_open(self, other, expected):
        window = TimeWindow.from_strings("10:00", "13:00")
        assert window.overlaps(TimeWindow.from_strings(*other)) is expected
        assert TimeWindow.from_strings(*other).overlaps(window) is expected


class TestDateRange:
    """Tests for DateRange value object."""

    def test_days_are_inclusive(self):
        days = list(DateRange(date(2030, 6, 10), date(2030, 6, 12)).days())
        assert days == [date(2030, 6, 10), date(2030, 6, 11), date(2030, 6, 12)]

    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValueError):
            DateRange(date(2030, 6, 12), date(2030, 6, 10))

    def test_last_representable_day(self):
        days = list(DateRange(date.max - timedelta(days=1), date.max).days())
        assert days == [date.max - timedelta(days=1), date.max]

    def test_span_counts_both_ends(self):
        assert DateRange(date(2030, 6, 10), date(2030, 6, 10)).span_days == 1
        assert DateRange(date(2030, 6, 10), date(2030, 7, 9)).span_days == 30


class TestMoneyRounding:
    def test_quantize_money_rounds_half_up(self):
        assert quantize_money(Decimal("10.005")) == Decimal("10.01")
        assert quantize_money(Decimal("10.004")) == Decimal("10.00")

    def test_round_whole_rounds_half_up(self):
        assert round_whole(Decimal("3244.5")) == Decimal("3245")
        assert round_whole(Decimal("3244.49")) == Decimal("3244")


class TestBookingTransitions:
    """Tests for the booking state machine."""

    def test_happy_path(self):
        booking = make_booking()
        confirmed = booking.confirm(NOW)
        checked_in = confirmed.check_in(NOW)
        completed = checked_in.check_out(NOW)

        assert confirmed.status == BookingStatus.CONFIRMED
        assert confirmed.is_confirmed and confirmed.confirmed_at == NOW
        assert checked_in.status == BookingStatus.CHECKED_IN
        assert checked_in.checked_in_at == NOW
        assert completed.status == BookingStatus.COMPLETED
        assert completed.checked_out_at == NOW

    def test_transitions_do_not_mutate_original(self):
        booking = make_booking()
        booking.confirm(NOW)
        assert booking.status == BookingStatus.PENDING
        assert booking.is_confirmed is False

    def test_confirm_twice_raises(self):
        confirmed = make_booking().confirm(NOW)
        with pytest.raises(InvalidTransitionError) as exc_info:
            confirmed.confirm(NOW)
        assert exc_info.value.code == ErrorCode.INVALID_TRANSITION

    def test_check_in_requires_confirmation(self):
        with pytest.raises(InvalidTransitionError):
            make_booking().check_in(NOW)

    def test_check_out_requires_check_in(self):
        with pytest.raises(InvalidTransitionError):
            make_booking().confirm(NOW).check_out(NOW)

    def test_cancel_records_reason_and_refund(self):
        cancelled = make_booking().cancel("Venue change", Decimal("3245"), NOW)
        assert cancelled.status == BookingStatus.CANCELLED
        assert cancelled.is_cancelled
        assert cancelled.cancellation_reason == "Venue change"
        assert cancelled.refund_amount == Decimal("3245")
        assert cancelled.cancelled_at == NOW

    @pytest.mark.parametrize(
        "status", [BookingStatus.COMPLETED, BookingStatus.NO_SHOW]
    )
    def test_cannot_cancel_finished_booking(self, status):
        with pytest.raises(InvalidTransitionError):
            make_booking(status=status).cancel("reason", Decimal("0"), NOW)

    def test_cancelled_booking_rejects_every_transition(self):
        cancelled = make_booking().cancel("reason", Decimal("0"), NOW)
        for transition in (cancelled.confirm, cancelled.check_in, cancelled.check_out):
            with pytest.raises(InvalidTransitionError):
                transition(NOW)
        with pytest.raises(InvalidTransitionError):
            cancelled.cancel("again", Decimal("0"), NOW)

    def test_no_show_only_from_confirmed(self):
        with pytest.raises(InvalidTransitionError):
            make_booking().mark_no_show(NOW)
        no_show = make_booking().confirm(NOW).mark_no_show(NOW)
        assert no_show.status == BookingStatus.NO_SHOW
        assert not no_show.is_editable


class TestQuotationTransitions:
    """Tests for the quotation state machine."""

    def test_send_then_accept(self):
        sent = make_quotation().send(NOW)
        accepted = sent.accept(NOW)
        assert sent.status == QuotationStatus.SENT
        assert accepted.status == QuotationStatus.ACCEPTED
        assert accepted.is_accepted and accepted.accepted_at == NOW

    def test_only_drafts_can_be_sent(self):
        with pytest.raises(InvalidTransitionError):
            make_quotation().send(NOW).send(NOW)

    def test_accept_requires_sent(self):
        with pytest.raises(InvalidTransitionError):
            make_quotation().accept(NOW)

    def test_accept_after_validity_raises(self):
        sent = make_quotation(valid_until=NOW - timedelta(minutes=1)).send(NOW)
        with pytest.raises(InvalidTransitionError):
            sent.accept(NOW)

    def test_accept_after_event_date_raises(self):
        sent = make_quotation(
            event_date=date(2030, 6, 2), valid_until=NOW + timedelta(days=7)
        ).send(NOW)
        with pytest.raises(InvalidTransitionError):
            sent.accept(NOW)

    def test_accept_on_event_day_is_allowed(self):
        sent = make_quotation(event_date=NOW.date()).send(NOW)
        assert sent.accept(NOW).is_accepted

    def test_accept_twice_raises(self):
        accepted = make_quotation().send(NOW).accept(NOW)
        with pytest.raises(InvalidTransitionError):
            accepted.accept(NOW)

    def test_reject_from_draft_or_sent(self):
        assert make_quotation().reject(NOW).status == QuotationStatus.REJECTED
        assert make_quotation().send(NOW).reject(NOW).status == QuotationStatus.REJECTED

    def test_reject_twice_raises(self):
        with pytest.raises(InvalidTransitionError):
            make_quotation().reject(NOW).reject(NOW)

    def test_expire_blocks_further_changes(self):
        expired = make_quotation().expire(NOW)
        assert expired.is_expired and expired.status == QuotationStatus.EXPIRED
        with pytest.raises(InvalidTransitionError):
            expired.expire(NOW)
        with pytest.raises(InvalidTransitionError):
            expired.ensure_editable()
        with pytest.raises(InvalidTransitionError):
            expired.send(NOW)

    def test_accepted_quotation_cannot_expire_or_be_edited(self):
        accepted = make_quotation().send(NOW).accept(NOW)
        with pytest.raises(InvalidTransitionError):
            accepted.expire(NOW)
        with pytest.raises(InvalidTransitionError):
            accepted.ensure_editable()


class TestErrors:
    def test_validation_error_keeps_every_message(self):
        error = ValidationFailedError(["First problem", "Second problem"])
        assert error.errors == ("First problem", "Second problem")
        assert error.message == "First problem, Second problem"
        assert str(error) == "VALIDATION_FAILED: First problem, Second problem"


class TestPage:
    def test_navigation(self):
        page = Page(items=(), total=25, page=2, limit=10)
        assert page.total_pages == 3
        assert page.has_next and page.has_prev

    def test_last_page(self):
        page = replace(Page(items=(), total=25, page=1, limit=10), page=3)
        assert not page.has_next
