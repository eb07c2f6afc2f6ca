"""Quotation service.

DRAFT -> SENT -> ACCEPTED | REJECTED | EXPIRED. Acceptance materializes
exactly one booking through BookingService inside the same unit of work,
so a failed booking leaves the quotation untouched.
"""

import logging
import uuid
from dataclasses import replace
from datetime import timedelta
from decimal import Decimal
from typing import Callable
from uuid import UUID

from reservations.domain import Quotation, QuotationStatus, TimeWindow
from reservations.domain.errors import (
    DuplicateError,
    InvalidTimeError,
    QuotationNotFoundError,
    ValidationFailedError,
    VenueNotFoundError,
    VenueUnavailableError,
)
from reservations.domain.models import (
    AcceptanceResult,
    CostBreakdown,
    EventType,
    Page,
    Pagination,
    QuotationFilters,
    QuotationStatistics,
)
from reservations.domain.requests import (
    CostRequest,
    CreateBookingRequest,
    CreateQuotationRequest,
    UpdateQuotationRequest,
)
from reservations.domain.validation import (
    validate_create_quotation,
    validate_update_quotation,
)
from reservations.domain.value_objects import format_time
from reservations.services.availability import AvailabilityChecker
from reservations.services.booking_service import BookingService
from reservations.services.cost_engine import CostEngine, generate_quotation_number
from reservations.services.support import (
    ChangeNotifier,
    Clock,
    check_pagination,
    fingerprint,
    parse_id,
    percentage,
)
from reservations.stores.interfaces import (
    EventPublisher,
    QuotationStore,
    ReservationCache,
    UnitOfWork,
    VenueStore,
)

logger = logging.getLogger(__name__)

LIST_NAMESPACE = "quotations:list"
STATS_NAMESPACE = "quotations:stats"
NUMBER_ATTEMPTS = 3
PRICING_FIELDS = frozenset(
    {"event_date", "start_time", "end_time", "guest_count", "discount_percentage"}
)
SORTABLE_FIELDS = frozenset(
    {
        "created_at",
        "updated_at",
        "event_date",
        "valid_until",
        "total_amount",
        "status",
    }
)


def quotation_key(quotation_id: UUID) -> str:
    return f"quotation:{quotation_id}"


class QuotationService:
    """Service for quotation lifecycle operations."""

    def __init__(
        self,
        venues: VenueStore,
        quotations: QuotationStore,
        availability: AvailabilityChecker,
        cost_engine: CostEngine,
        bookings: BookingService,
        unit_of_work: UnitOfWork,
        cache: ReservationCache,
        publisher: EventPublisher,
        clock: Clock,
        cache_ttl: int = 1800,
        validity_days: int = 7,
        number_factory: Callable[[], str] = generate_quotation_number,
    ) -> None:
        self._venues = venues
        self._quotations = quotations
        self._availability = availability
        self._cost_engine = cost_engine
        self._booking_service = bookings
        self._uow = unit_of_work
        self._cache = cache
        self._clock = clock
        self._cache_ttl = cache_ttl
        self._validity = timedelta(days=validity_days)
        self._number_factory = number_factory
        self._notifier = ChangeNotifier(cache, publisher, (LIST_NAMESPACE, STATS_NAMESPACE))

    # Queries

    def get_quotation(self, quotation_id: str) -> Quotation:
        """Return a quotation by ID.

        Raises:
            InvalidIdError: If the quotation_id is not a valid UUID.
            QuotationNotFoundError: If the quotation does not exist.
        """
        identifier = parse_id(quotation_id, "quotation")
        key = quotation_key(identifier)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        quotation = self._load(identifier)
        self._cache.set(key, quotation, self._cache_ttl)
        return quotation

    def get_by_number(self, quotation_number: str) -> Quotation:
        quotation = self._quotations.get_by_number(quotation_number)
        if quotation is None:
            raise QuotationNotFoundError(quotation_number)
        return quotation

    def list_quotations(
        self,
        filters: QuotationFilters | None = None,
        pagination: Pagination | None = None,
    ) -> Page:
        filters = filters or QuotationFilters()
        pagination = pagination or Pagination()
        check_pagination(pagination, SORTABLE_FIELDS)

        key = f"{LIST_NAMESPACE}:{fingerprint(filters, pagination)}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        page = self._quotations.search(filters, pagination)
        self._cache.set(key, page, self._cache_ttl, namespace=LIST_NAMESPACE)
        return page

    def get_statistics(self, filters: QuotationFilters | None = None) -> QuotationStatistics:
        filters = filters or QuotationFilters()
        key = f"{STATS_NAMESPACE}:{fingerprint(filters)}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        total = self._quotations.count(filters)
        by_status = {
            status: self._quotations.count(filters, status=status)
            for status in QuotationStatus
        }
        value, average = self._quotations.amount_stats(
            filters, status=QuotationStatus.ACCEPTED
        )
        stats = QuotationStatistics(
            total_quotations=total,
            draft_quotations=by_status[QuotationStatus.DRAFT],
            sent_quotations=by_status[QuotationStatus.SENT],
            accepted_quotations=by_status[QuotationStatus.ACCEPTED],
            rejected_quotations=by_status[QuotationStatus.REJECTED],
            expired_quotations=by_status[QuotationStatus.EXPIRED],
            total_value=value,
            average_value=average,
            acceptance_rate=percentage(by_status[QuotationStatus.ACCEPTED], total),
            rejection_rate=percentage(by_status[QuotationStatus.REJECTED], total),
            expiration_rate=percentage(by_status[QuotationStatus.EXPIRED], total),
        )
        self._cache.set(key, stats, self._cache_ttl, namespace=STATS_NAMESPACE)
        return stats

    def calculate_cost(self, request: CostRequest) -> CostBreakdown:
        """Price a request without persisting anything.

        Raises:
            ValidationFailedError: With every violation in the request.
            VenueNotFoundError: If the venue does not exist.
        """
        errors = self._cost_engine.validate(request, self._clock().date())
        if errors:
            raise ValidationFailedError(errors)
        venue_id = parse_id(request.venue_id, "venue")
        venue = self._venues.get_venue(venue_id)
        if venue is None:
            raise VenueNotFoundError(str(venue_id))
        return self._cost_engine.calculate_cost(request, venue)

    # Commands

    def create_quotation(self, request: CreateQuotationRequest) -> Quotation:
        now = self._clock()
        errors = validate_create_quotation(request, now)
        if errors:
            raise ValidationFailedError(errors)

        venue_id = UUID(request.venue_id)
        venue = self._venues.get_venue(venue_id)
        if venue is None:
            raise VenueNotFoundError(request.venue_id)

        discount_pct = Decimal(request.discount_percentage or 0)
        cost = self._cost_engine.calculate_cost(
            CostRequest(
                venue_id=request.venue_id,
                event_date=request.event_date,
                start_time=request.start_time,
                end_time=request.end_time,
                guest_count=request.guest_count,
                line_items=tuple(request.line_items),
                discount_percentage=discount_pct,
            ),
            venue,
        )
        window = TimeWindow.from_strings(request.start_time, request.end_time)
        draft = Quotation(
            id=uuid.uuid4(),
            venue_id=venue_id,
            customer_id=request.customer_id,
            quotation_number="",
            event_name=request.event_name.strip(),
            event_type=EventType(request.event_type),
            event_date=request.event_date,
            start_time=window.start,
            end_time=window.end,
            guest_count=request.guest_count,
            discount_percentage=discount_pct,
            base_amount=cost.base_amount,
            subtotal=cost.subtotal,
            discount=cost.discount_amount,
            tax_amount=cost.tax_amount,
            total_amount=cost.total_amount,
            valid_until=request.valid_until or now + self._validity,
            notes=request.notes,
            line_items=cost.line_items,
            created_at=now,
            updated_at=now,
        )
        quotation = self._add_with_unique_number(draft)

        self._changed(quotation, "quotation.created")
        logger.info(
            "Quotation created successfully",
            extra={
                "quotation_id": str(quotation.id),
                "quotation_number": quotation.quotation_number,
                "venue_id": str(quotation.venue_id),
                "customer_id": quotation.customer_id,
            },
        )
        return quotation

    def update_quotation(self, quotation_id: str, request: UpdateQuotationRequest) -> Quotation:
        """Apply a partial update; supplied line items replace the existing ones.

        Raises:
            ValidationFailedError: With every violation in the request.
            InvalidTransitionError: If the quotation is accepted or expired.
        """
        now = self._clock()
        errors = validate_update_quotation(request, now)
        if errors:
            raise ValidationFailedError(errors)

        identifier = parse_id(quotation_id, "quotation")
        current = self._load(identifier)
        with self._uow.atomic(current.venue_id):
            current = self._load(identifier)
            current.ensure_editable()

            changes = request.changes()
            reprice = request.line_items is not None or bool(PRICING_FIELDS & changes.keys())
            if "event_type" in changes:
                changes["event_type"] = EventType(changes["event_type"])
            if "discount_percentage" in changes:
                changes["discount_percentage"] = Decimal(changes["discount_percentage"])
            window = self._merged_window(
                request.start_time or format_time(current.start_time),
                request.end_time or format_time(current.end_time),
            )
            changes["start_time"] = window.start
            changes["end_time"] = window.end
            updated = replace(current, **changes, updated_at=now)

            if reprice:
                venue = self._venues.get_venue(updated.venue_id)
                if venue is None:
                    raise VenueNotFoundError(str(updated.venue_id))
                line_items = (
                    tuple(request.line_items)
                    if request.line_items is not None
                    else tuple(replace(item, id=None) for item in current.line_items)
                )
                cost = self._cost_engine.calculate_cost(
                    CostRequest(
                        venue_id=str(updated.venue_id),
                        event_date=updated.event_date,
                        start_time=format_time(updated.start_time),
                        end_time=format_time(updated.end_time),
                        guest_count=updated.guest_count,
                        line_items=line_items,
                        discount_percentage=updated.discount_percentage,
                    ),
                    venue,
                )
                items = self._quotations.replace_line_items(updated.id, cost.line_items)
                updated = replace(
                    updated,
                    base_amount=cost.base_amount,
                    subtotal=cost.subtotal,
                    discount=cost.discount_amount,
                    tax_amount=cost.tax_amount,
                    total_amount=cost.total_amount,
                    line_items=items,
                )
            saved = self._quotations.save(updated)

        self._changed(saved, "quotation.updated")
        logger.info("Quotation updated successfully", extra={"quotation_id": str(saved.id)})
        return saved

    def send_quotation(self, quotation_id: str) -> Quotation:
        return self._transition(
            quotation_id, lambda q: q.send(self._clock()), "quotation.sent"
        )

    def reject_quotation(self, quotation_id: str) -> Quotation:
        return self._transition(
            quotation_id, lambda q: q.reject(self._clock()), "quotation.rejected"
        )

    def expire_quotation(self, quotation_id: str) -> Quotation:
        return self._transition(
            quotation_id, lambda q: q.expire(self._clock()), "quotation.expired"
        )

    def accept_quotation(self, quotation_id: str) -> AcceptanceResult:
        """Accept a SENT quotation and create its booking.

        Both writes share one unit of work: if the booking cannot be created
        the quotation stays SENT.

        Raises:
            InvalidTransitionError: If not SENT, already accepted, expired or the
                event date has passed.
            VenueUnavailableError: If the slot was taken since quoting.
        """
        identifier = parse_id(quotation_id, "quotation")
        current = self._load(identifier)
        with self._uow.atomic(current.venue_id):
            current = self._load(identifier)
            now = self._clock()
            current.ensure_acceptable(now)
            if not self._availability.is_available(
                current.venue_id, current.event_date, current.window
            ):
                raise VenueUnavailableError(
                    "Venue is no longer available for the selected date and time"
                )

            accepted = self._quotations.save(current.accept(now))
            booking = self._booking_service.create_booking(
                CreateBookingRequest(
                    venue_id=str(accepted.venue_id),
                    customer_id=accepted.customer_id,
                    event_name=accepted.event_name,
                    event_type=accepted.event_type,
                    start_date=accepted.event_date,
                    end_date=accepted.event_date,
                    start_time=format_time(accepted.start_time),
                    end_time=format_time(accepted.end_time),
                    guest_count=accepted.guest_count,
                    line_items=tuple(
                        replace(item, id=None) for item in accepted.line_items
                    ),
                    discount_percentage=accepted.discount_percentage,
                    quotation_id=str(accepted.id),
                )
            )

        self._changed(accepted, "quotation.accepted")
        logger.info(
            "Quotation accepted successfully",
            extra={"quotation_id": str(accepted.id), "booking_id": str(booking.id)},
        )
        return AcceptanceResult(quotation=accepted, booking=booking)

    def expire_overdue(self) -> list[Quotation]:
        """Expire every open quotation whose validity period has passed."""
        now = self._clock()
        expired = []
        for quotation in self._quotations.find_overdue(now):
            with self._uow.atomic(quotation.venue_id):
                current = self._load(quotation.id)
                if current.is_accepted or current.is_expired:
                    continue
                saved = self._quotations.save(current.expire(now))
            self._changed(saved, "quotation.expired")
            expired.append(saved)
        if expired:
            logger.info("Expired %d overdue quotations", len(expired))
        return expired

    # Internals

    def _load(self, quotation_id: UUID) -> Quotation:
        quotation = self._quotations.get(quotation_id)
        if quotation is None:
            raise QuotationNotFoundError(str(quotation_id))
        return quotation

    def _add_with_unique_number(self, draft: Quotation) -> Quotation:
        for attempt in range(1, NUMBER_ATTEMPTS + 1):
            candidate = replace(draft, quotation_number=self._number_factory())
            try:
                return self._quotations.add(candidate)
            except DuplicateError:
                logger.warning(
                    "Quotation number %s already taken (attempt %d)",
                    candidate.quotation_number,
                    attempt,
                )
        raise DuplicateError("Could not generate a unique quotation number")

    def _transition(
        self, quotation_id: str, apply: Callable[[Quotation], Quotation], topic: str
    ) -> Quotation:
        identifier = parse_id(quotation_id, "quotation")
        current = self._load(identifier)
        with self._uow.atomic(current.venue_id):
            saved = self._quotations.save(apply(self._load(identifier)))
        self._changed(saved, topic)
        logger.info("Quotation %s", topic.split(".", 1)[1], extra={"quotation_id": str(saved.id)})
        return saved

    def _changed(self, quotation: Quotation, topic: str) -> None:
        self._notifier.changed(
            quotation_key(quotation.id),
            topic,
            {
                "quotation_id": str(quotation.id),
                "quotation_number": quotation.quotation_number,
                "venue_id": str(quotation.venue_id),
                "customer_id": quotation.customer_id,
                "status": quotation.status.value,
            },
        )

    @staticmethod
    def _merged_window(start: str, end: str) -> TimeWindow:
        try:
            return TimeWindow.from_strings(start, end)
        except ValueError as exc:
            raise InvalidTimeError(str(exc)) from exc
