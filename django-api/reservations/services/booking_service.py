"""Booking service - all booking business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
import uuid
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Callable
from uuid import UUID

from reservations.domain import Booking, BookingStatus, DateRange, TimeWindow, Venue
from reservations.domain.errors import (
    BookingNotFoundError,
    InvalidTimeError,
    InvalidTransitionError,
    ValidationFailedError,
    VenueNotFoundError,
    VenueUnavailableError,
)
from reservations.domain.models import (
    BookingFilters,
    BookingStatistics,
    CancellationResult,
    CostBreakdown,
    EventType,
    LineItem,
    Page,
    Pagination,
)
from reservations.domain.requests import (
    CostRequest,
    CreateBookingRequest,
    UpdateBookingRequest,
)
from reservations.domain.validation import (
    date_span_errors,
    validate_create_booking,
    validate_update_booking,
)
from reservations.domain.value_objects import format_time
from reservations.services.availability import AvailabilityChecker
from reservations.services.cost_engine import CostEngine
from reservations.services.refund_policy import calculate_refund
from reservations.services.support import (
    ChangeNotifier,
    Clock,
    check_pagination,
    fingerprint,
    parse_id,
    percentage,
)
from reservations.stores.interfaces import (
    BookingStore,
    EventPublisher,
    ReservationCache,
    UnitOfWork,
    VenueStore,
)

logger = logging.getLogger(__name__)

LIST_NAMESPACE = "bookings:list"
STATS_NAMESPACE = "bookings:stats"
SORTABLE_FIELDS = frozenset(
    {
        "created_at",
        "updated_at",
        "start_date",
        "event_name",
        "guest_count",
        "total_amount",
        "status",
    }
)


def booking_key(booking_id: UUID) -> str:
    return f"booking:{booking_id}"


class BookingService:
    """Booking lifecycle: PENDING -> CONFIRMED -> CHECKED_IN -> COMPLETED.

    CANCELLED and NO_SHOW are side exits. Every mutation invalidates the
    booking's cache entry plus the cached listings and statistics, then
    publishes a ``booking.<event>`` message.
    """

    def __init__(
        self,
        venues: VenueStore,
        bookings: BookingStore,
        availability: AvailabilityChecker,
        cost_engine: CostEngine,
        unit_of_work: UnitOfWork,
        cache: ReservationCache,
        publisher: EventPublisher,
        clock: Clock,
        cache_ttl: int = 1800,
    ) -> None:
        self._venues = venues
        self._bookings = bookings
        self._availability = availability
        self._cost_engine = cost_engine
        self._uow = unit_of_work
        self._cache = cache
        self._clock = clock
        self._cache_ttl = cache_ttl
        self._notifier = ChangeNotifier(cache, publisher, (LIST_NAMESPACE, STATS_NAMESPACE))

    # Queries

    def get_booking(self, booking_id: str) -> Booking:
        """Return a booking by ID.

        Raises:
            InvalidIdError: If the booking_id is not a valid UUID.
            BookingNotFoundError: If the booking does not exist.
        """
        identifier = parse_id(booking_id, "booking")
        key = booking_key(identifier)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        booking = self._load(identifier)
        self._cache.set(key, booking, self._cache_ttl)
        return booking

    def list_bookings(
        self, filters: BookingFilters | None = None, pagination: Pagination | None = None
    ) -> Page:
        filters = filters or BookingFilters()
        pagination = pagination or Pagination()
        check_pagination(pagination, SORTABLE_FIELDS)

        key = f"{LIST_NAMESPACE}:{fingerprint(filters, pagination)}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        page = self._bookings.search(filters, pagination)
        self._cache.set(key, page, self._cache_ttl, namespace=LIST_NAMESPACE)
        return page

    def get_statistics(self, filters: BookingFilters | None = None) -> BookingStatistics:
        filters = filters or BookingFilters()
        key = f"{STATS_NAMESPACE}:{fingerprint(filters)}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        total = self._bookings.count(filters)
        confirmed = self._bookings.count(filters, is_confirmed=True)
        completed = self._bookings.count(filters, status=BookingStatus.COMPLETED)
        cancelled = self._bookings.count(filters, is_cancelled=True)
        revenue, average = self._bookings.amount_stats(
            filters, status=BookingStatus.COMPLETED
        )
        stats = BookingStatistics(
            total_bookings=total,
            confirmed_bookings=confirmed,
            completed_bookings=completed,
            cancelled_bookings=cancelled,
            total_revenue=revenue,
            average_booking_value=average,
            confirmation_rate=percentage(confirmed, total),
            completion_rate=percentage(completed, total),
            cancellation_rate=percentage(cancelled, total),
        )
        self._cache.set(key, stats, self._cache_ttl, namespace=STATS_NAMESPACE)
        return stats

    def check_availability(
        self,
        venue_id: str,
        start_date: date,
        end_date: date | None,
        start_time: str,
        end_time: str,
    ) -> bool:
        """True when the venue is free for the window on every day of the range.

        Raises:
            InvalidIdError: If the venue_id is not a valid UUID.
            InvalidTimeError: If the times are not HH:MM or do not form a window.
            ValidationFailedError: If the date range is reversed or too long.
            VenueNotFoundError: If the venue does not exist.
        """
        identifier = parse_id(venue_id, "venue")
        window = self._merged_window(start_time, end_time)
        end_date = end_date or start_date
        errors = date_span_errors(start_date, end_date)
        if errors:
            raise ValidationFailedError(errors)
        dates = DateRange(start=start_date, end=end_date)
        if self._venues.get_venue(identifier) is None:
            raise VenueNotFoundError(str(identifier))
        return self._availability.is_available_for_range(identifier, dates, window)

    # Commands

    def create_booking(self, request: CreateBookingRequest) -> Booking:
        """Validate, check availability, price and persist a PENDING booking.

        Raises:
            ValidationFailedError: With every violation in the request.
            VenueNotFoundError: If the venue does not exist.
            VenueUnavailableError: If any day of the range is taken or blocked.
        """
        now = self._clock()
        errors = validate_create_booking(request, now.date())
        if errors:
            raise ValidationFailedError(errors)

        venue_id = UUID(request.venue_id)
        window = TimeWindow.from_strings(request.start_time, request.end_time)
        dates = DateRange(start=request.start_date, end=request.end_date)

        with self._uow.atomic(venue_id):
            venue = self._venues.get_venue(venue_id)
            if venue is None:
                raise VenueNotFoundError(request.venue_id)
            if not self._availability.is_available_for_range(venue_id, dates, window):
                raise VenueUnavailableError()

            cost = self._price(
                venue,
                request.start_date,
                window,
                request.guest_count,
                request.line_items,
                request.discount_percentage,
            )
            deposit, balance = self._cost_engine.deposit_for(cost.total_amount)
            booking = Booking(
                id=uuid.uuid4(),
                venue_id=venue_id,
                customer_id=request.customer_id,
                quotation_id=(
                    parse_id(request.quotation_id, "quotation")
                    if request.quotation_id
                    else None
                ),
                event_name=request.event_name.strip(),
                event_type=EventType(request.event_type),
                start_date=request.start_date,
                end_date=request.end_date,
                start_time=window.start,
                end_time=window.end,
                guest_count=request.guest_count,
                special_requests=request.special_requests,
                base_amount=cost.base_amount,
                additional_charges=cost.additional_charges,
                discount_percentage=Decimal(request.discount_percentage or 0),
                discount=cost.discount_amount,
                tax_amount=cost.tax_amount,
                total_amount=cost.total_amount,
                deposit_amount=deposit,
                balance_amount=balance,
                line_items=cost.line_items,
                created_at=now,
                updated_at=now,
            )
            booking = self._bookings.add(booking)

        self._changed(booking, "booking.created")
        logger.info(
            "Booking created successfully",
            extra={
                "booking_id": str(booking.id),
                "venue_id": str(booking.venue_id),
                "customer_id": booking.customer_id,
            },
        )
        return booking

    def update_booking(self, booking_id: str, request: UpdateBookingRequest) -> Booking:
        """Apply a partial update; re-check availability when the schedule moves.

        Raises:
            ValidationFailedError: With every violation in the request.
            InvalidTransitionError: If the booking is cancelled, completed or a no-show.
            VenueUnavailableError: If the new schedule collides with another booking.
        """
        errors = validate_update_booking(request, self._clock().date())
        if errors:
            raise ValidationFailedError(errors)

        identifier = parse_id(booking_id, "booking")
        current = self._load(identifier)
        with self._uow.atomic(current.venue_id):
            current = self._load(identifier)
            if current.is_cancelled:
                raise InvalidTransitionError("Cannot update cancelled booking")
            if not current.is_editable:
                raise InvalidTransitionError(
                    f"Cannot update {current.status.value.lower()} booking"
                )

            changes = request.changes()
            if "event_type" in changes:
                changes["event_type"] = EventType(changes["event_type"])
            if "start_time" in changes or "end_time" in changes:
                window = self._merged_window(
                    request.start_time or format_time(current.start_time),
                    request.end_time or format_time(current.end_time),
                )
                changes["start_time"] = window.start
                changes["end_time"] = window.end
            updated = replace(current, **changes, updated_at=self._clock())
            span_errors = date_span_errors(updated.start_date, updated.end_date)
            if span_errors:
                raise ValidationFailedError(span_errors)
            dates = updated.dates

            if request.touches_schedule and not self._availability.is_available_for_range(
                updated.venue_id, dates, updated.window, exclude_booking_id=updated.id
            ):
                raise VenueUnavailableError()

            if request.touches_schedule or request.guest_count is not None:
                updated = self._repriced(updated)
            saved = self._bookings.save(updated, replace_line_items=True)

        self._changed(saved, "booking.updated")
        logger.info("Booking updated successfully", extra={"booking_id": str(saved.id)})
        return saved

    def confirm_booking(self, booking_id: str) -> Booking:
        return self._transition(
            booking_id, lambda b: b.confirm(self._clock()), "booking.confirmed"
        )

    def check_in_booking(self, booking_id: str) -> Booking:
        return self._transition(
            booking_id, lambda b: b.check_in(self._clock()), "booking.checked_in"
        )

    def check_out_booking(self, booking_id: str) -> Booking:
        return self._transition(
            booking_id, lambda b: b.check_out(self._clock()), "booking.checked_out"
        )

    def mark_no_show(self, booking_id: str) -> Booking:
        return self._transition(
            booking_id, lambda b: b.mark_no_show(self._clock()), "booking.no_show"
        )

    def cancel_booking(self, booking_id: str, reason: str) -> CancellationResult:
        """Cancel a booking and record the refund owed under the refund policy.

        Payments are tracked elsewhere, so the full total is treated as paid.

        Raises:
            ValidationFailedError: If no reason is given.
            InvalidTransitionError: If already cancelled, completed or a no-show.
        """
        if not reason or not reason.strip():
            raise ValidationFailedError(["Cancellation reason is required"])

        def cancel(booking: Booking) -> Booking:
            booking.ensure_cancellable()
            now = self._clock()
            refund = calculate_refund(
                booking.total_amount,
                booking.total_amount,
                booking.event_start(now.tzinfo),
                now,
            )
            return booking.cancel(reason.strip(), refund, now)

        booking = self._transition(booking_id, cancel, "booking.cancelled")
        logger.info(
            "Booking cancelled",
            extra={"booking_id": str(booking.id), "refund_amount": str(booking.refund_amount)},
        )
        return CancellationResult(booking=booking, refund_amount=booking.refund_amount)

    # Internals

    def _load(self, booking_id: UUID) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(str(booking_id))
        return booking

    def _transition(
        self, booking_id: str, apply: Callable[[Booking], Booking], topic: str
    ) -> Booking:
        identifier = parse_id(booking_id, "booking")
        current = self._load(identifier)
        with self._uow.atomic(current.venue_id):
            updated = apply(self._load(identifier))
            saved = self._bookings.save(updated)
        self._changed(saved, topic)
        logger.info("Booking %s", topic.split(".", 1)[1], extra={"booking_id": str(saved.id)})
        return saved

    def _changed(self, booking: Booking, topic: str) -> None:
        self._notifier.changed(
            booking_key(booking.id),
            topic,
            {
                "booking_id": str(booking.id),
                "venue_id": str(booking.venue_id),
                "customer_id": booking.customer_id,
                "status": booking.status.value,
            },
        )

    @staticmethod
    def _merged_window(start: str, end: str) -> TimeWindow:
        try:
            return TimeWindow.from_strings(start, end)
        except ValueError as exc:
            raise InvalidTimeError(str(exc)) from exc

    def _price(
        self,
        venue: Venue,
        event_date: date,
        window: TimeWindow,
        guest_count: int,
        line_items: tuple[LineItem, ...],
        discount_percentage,
    ) -> CostBreakdown:
        request = CostRequest(
            venue_id=str(venue.id),
            event_date=event_date,
            start_time=format_time(window.start),
            end_time=format_time(window.end),
            guest_count=guest_count,
            line_items=tuple(line_items),
            discount_percentage=discount_percentage,
        )
        return self._cost_engine.calculate_cost(request, venue)

    def _repriced(self, booking: Booking) -> Booking:
        venue = self._venues.get_venue(booking.venue_id)
        if venue is None:
            raise VenueNotFoundError(str(booking.venue_id))
        cost = self._price(
            venue,
            booking.start_date,
            booking.window,
            booking.guest_count,
            booking.line_items,
            booking.discount_percentage,
        )
        deposit, balance = self._cost_engine.deposit_for(cost.total_amount)
        return replace(
            booking,
            base_amount=cost.base_amount,
            additional_charges=cost.additional_charges,
            discount=cost.discount_amount,
            tax_amount=cost.tax_amount,
            total_amount=cost.total_amount,
            deposit_amount=deposit,
            balance_amount=balance,
            line_items=cost.line_items,
        )
