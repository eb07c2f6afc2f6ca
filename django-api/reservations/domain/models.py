"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in reservations/models.py (persistence layer).

Lifecycle guards live on the aggregates: every transition method either
returns a new instance in the target state or raises InvalidTransitionError
without touching the original.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from uuid import UUID

from reservations.domain.errors import InvalidTransitionError
from reservations.domain.value_objects import DateRange, TimeWindow


class EventType(str, Enum):
    WEDDING = "WEDDING"
    CORPORATE = "CORPORATE"
    BIRTHDAY = "BIRTHDAY"
    ANNIVERSARY = "ANNIVERSARY"
    CONFERENCE = "CONFERENCE"
    SEMINAR = "SEMINAR"
    PARTY = "PARTY"
    MEETING = "MEETING"
    OTHER = "OTHER"


class LineItemType(str, Enum):
    HALL_RENTAL = "HALL_RENTAL"
    CHAIR = "CHAIR"
    TABLE = "TABLE"
    DECORATION = "DECORATION"
    LIGHTING = "LIGHTING"
    AV_EQUIPMENT = "AV_EQUIPMENT"
    CATERING = "CATERING"
    SECURITY = "SECURITY"
    GENERATOR = "GENERATOR"
    CLEANING = "CLEANING"
    PARKING = "PARKING"
    OTHER = "OTHER"


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CHECKED_IN = "CHECKED_IN"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"
    PARTIALLY_REFUNDED = "PARTIALLY_REFUNDED"


class QuotationStatus(str, Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


@dataclass(frozen=True)
class RateCard:
    """Venue pricing as configured by administrators."""

    base_rate: Decimal
    hourly_rate: Decimal | None = None
    daily_rate: Decimal | None = None
    weekend_rate: Decimal | None = None


@dataclass(frozen=True)
class Venue:
    """Domain representation of a bookable venue (read-only to this core)."""

    id: UUID
    name: str
    capacity: int
    location: str
    rate_card: RateCard
    is_active: bool = True
    is_available: bool = True

    @property
    def is_bookable(self) -> bool:
        return self.is_active and self.is_available


@dataclass(frozen=True)
class AvailabilityBlock:
    """Administrative override marking a venue unavailable."""

    venue_id: UUID
    date: date
    window: TimeWindow
    is_available: bool = False
    reason: str | None = None


@dataclass(frozen=True)
class LineItem:
    """A priced add-on. total_price is always quantity x unit_price."""

    item_type: LineItemType
    item_name: str
    quantity: int
    unit_price: Decimal
    description: str | None = None
    id: UUID | None = None

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CostBreakdown:
    """Result of a cost calculation."""

    base_amount: Decimal
    line_items: tuple[LineItem, ...]
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    breakdown: dict[str, Decimal]

    @property
    def additional_charges(self) -> Decimal:
        return self.subtotal - self.base_amount


@dataclass(frozen=True)
class Booking:
    """Domain representation of a Booking."""

    id: UUID
    venue_id: UUID
    customer_id: str
    event_name: str
    event_type: EventType
    start_date: date
    end_date: date
    start_time: time
    end_time: time
    guest_count: int
    base_amount: Decimal
    additional_charges: Decimal
    discount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    deposit_amount: Decimal
    balance_amount: Decimal
    created_at: datetime
    updated_at: datetime
    discount_percentage: Decimal = Decimal("0")
    quotation_id: UUID | None = None
    special_requests: str | None = None
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    is_confirmed: bool = False
    is_cancelled: bool = False
    cancellation_reason: str | None = None
    refund_amount: Decimal | None = None
    confirmed_at: datetime | None = None
    checked_in_at: datetime | None = None
    checked_out_at: datetime | None = None
    cancelled_at: datetime | None = None
    line_items: tuple[LineItem, ...] = ()

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(start=self.start_time, end=self.end_time)

    @property
    def dates(self) -> DateRange:
        return DateRange(start=self.start_date, end=self.end_date)

    def event_start(self, tz=None) -> datetime:
        return datetime.combine(self.start_date, self.start_time, tzinfo=tz)

    @property
    def is_editable(self) -> bool:
        return not self.is_cancelled and self.status not in (
            BookingStatus.COMPLETED,
            BookingStatus.NO_SHOW,
        )

    def confirm(self, now: datetime) -> "Booking":
        if self.is_cancelled:
            raise InvalidTransitionError("Cannot confirm cancelled booking")
        if self.is_confirmed:
            raise InvalidTransitionError("Booking is already confirmed")
        if self.status != BookingStatus.PENDING:
            raise InvalidTransitionError(
                f"Cannot confirm booking in status {self.status.value}"
            )
        return replace(
            self,
            is_confirmed=True,
            status=BookingStatus.CONFIRMED,
            confirmed_at=now,
            updated_at=now,
        )

    def check_in(self, now: datetime) -> "Booking":
        if self.is_cancelled:
            raise InvalidTransitionError("Cannot check in cancelled booking")
        if not self.is_confirmed:
            raise InvalidTransitionError("Booking must be confirmed before check-in")
        if self.status == BookingStatus.CHECKED_IN:
            raise InvalidTransitionError("Booking is already checked in")
        if self.status != BookingStatus.CONFIRMED:
            raise InvalidTransitionError(
                f"Cannot check in booking in status {self.status.value}"
            )
        return replace(
            self,
            status=BookingStatus.CHECKED_IN,
            checked_in_at=now,
            updated_at=now,
        )

    def check_out(self, now: datetime) -> "Booking":
        if self.is_cancelled:
            raise InvalidTransitionError("Cannot check out cancelled booking")
        if self.status != BookingStatus.CHECKED_IN:
            raise InvalidTransitionError("Booking must be checked in before check-out")
        return replace(
            self,
            status=BookingStatus.COMPLETED,
            checked_out_at=now,
            updated_at=now,
        )

    def ensure_cancellable(self) -> None:
        if self.is_cancelled:
            raise InvalidTransitionError("Booking is already cancelled")
        if self.status == BookingStatus.COMPLETED:
            raise InvalidTransitionError("Cannot cancel completed booking")
        if self.status == BookingStatus.NO_SHOW:
            raise InvalidTransitionError("Cannot cancel a no-show booking")

    def cancel(self, reason: str, refund_amount: Decimal, now: datetime) -> "Booking":
        self.ensure_cancellable()
        return replace(
            self,
            is_cancelled=True,
            status=BookingStatus.CANCELLED,
            cancellation_reason=reason,
            refund_amount=refund_amount,
            cancelled_at=now,
            updated_at=now,
        )

    def mark_no_show(self, now: datetime) -> "Booking":
        if self.is_cancelled or self.status != BookingStatus.CONFIRMED:
            raise InvalidTransitionError("Only confirmed bookings can be marked as no-show")
        return replace(self, status=BookingStatus.NO_SHOW, updated_at=now)


@dataclass(frozen=True)
class Quotation:
    """Domain representation of a Quotation."""

    id: UUID
    venue_id: UUID
    customer_id: str
    quotation_number: str
    event_name: str
    event_type: EventType
    event_date: date
    start_time: time
    end_time: time
    guest_count: int
    base_amount: Decimal
    subtotal: Decimal
    discount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    valid_until: datetime
    created_at: datetime
    updated_at: datetime
    discount_percentage: Decimal = Decimal("0")
    status: QuotationStatus = QuotationStatus.DRAFT
    is_accepted: bool = False
    is_expired: bool = False
    accepted_at: datetime | None = None
    notes: str | None = None
    line_items: tuple[LineItem, ...] = ()

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(start=self.start_time, end=self.end_time)

    def is_past_validity(self, now: datetime) -> bool:
        return self.valid_until < now

    def ensure_editable(self) -> None:
        if self.is_accepted:
            raise InvalidTransitionError("Cannot update accepted quotation")
        if self.is_expired:
            raise InvalidTransitionError("Cannot update expired quotation")

    def send(self, now: datetime) -> "Quotation":
        if self.is_expired:
            raise InvalidTransitionError("Cannot send expired quotation")
        if self.status != QuotationStatus.DRAFT:
            raise InvalidTransitionError("Only draft quotations can be sent")
        return replace(self, status=QuotationStatus.SENT, updated_at=now)

    def ensure_acceptable(self, now: datetime) -> None:
        if self.is_accepted:
            raise InvalidTransitionError("Quotation is already accepted")
        if self.is_expired or self.is_past_validity(now):
            raise InvalidTransitionError("Cannot accept expired quotation")
        if self.event_date < now.date():
            raise InvalidTransitionError("Cannot accept quotation for a past event")
        if self.status != QuotationStatus.SENT:
            raise InvalidTransitionError("Only sent quotations can be accepted")

    def accept(self, now: datetime) -> "Quotation":
        self.ensure_acceptable(now)
        return replace(
            self,
            is_accepted=True,
            status=QuotationStatus.ACCEPTED,
            accepted_at=now,
            updated_at=now,
        )

    def reject(self, now: datetime) -> "Quotation":
        if self.is_accepted:
            raise InvalidTransitionError("Cannot reject accepted quotation")
        if self.is_expired:
            raise InvalidTransitionError("Cannot reject expired quotation")
        if self.status not in (QuotationStatus.DRAFT, QuotationStatus.SENT):
            raise InvalidTransitionError(
                f"Cannot reject quotation in status {self.status.value}"
            )
        return replace(self, status=QuotationStatus.REJECTED, updated_at=now)

    def expire(self, now: datetime) -> "Quotation":
        if self.is_accepted:
            raise InvalidTransitionError("Cannot expire accepted quotation")
        if self.is_expired:
            raise InvalidTransitionError("Quotation is already expired")
        return replace(
            self, is_expired=True, status=QuotationStatus.EXPIRED, updated_at=now
        )


@dataclass(frozen=True)
class Page:
    """One page of a filtered, sorted listing."""

    items: tuple
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


@dataclass(frozen=True)
class CancellationResult:
    booking: Booking
    refund_amount: Decimal


@dataclass(frozen=True)
class AcceptanceResult:
    quotation: Quotation
    booking: Booking


@dataclass(frozen=True)
class BookingStatistics:
    total_bookings: int
    confirmed_bookings: int
    completed_bookings: int
    cancelled_bookings: int
    total_revenue: Decimal
    average_booking_value: Decimal
    confirmation_rate: Decimal
    completion_rate: Decimal
    cancellation_rate: Decimal


@dataclass(frozen=True)
class QuotationStatistics:
    total_quotations: int
    draft_quotations: int
    sent_quotations: int
    accepted_quotations: int
    rejected_quotations: int
    expired_quotations: int
    total_value: Decimal
    average_value: Decimal
    acceptance_rate: Decimal
    rejection_rate: Decimal
    expiration_rate: Decimal


@dataclass(frozen=True)
class BookingFilters:
    venue_id: UUID | None = None
    customer_id: str | None = None
    event_type: EventType | None = None
    status: BookingStatus | None = None
    payment_status: PaymentStatus | None = None
    start_date: date | None = None
    end_date: date | None = None
    is_confirmed: bool | None = None
    is_cancelled: bool | None = None


@dataclass(frozen=True)
class QuotationFilters:
    venue_id: UUID | None = None
    customer_id: str | None = None
    event_type: EventType | None = None
    status: QuotationStatus | None = None
    is_accepted: bool | None = None
    is_expired: bool | None = None
    start_date: date | None = None
    end_date: date | None = None


@dataclass(frozen=True)
class Pagination:
    page: int = 1
    limit: int = 10
    sort_by: str = "created_at"
    descending: bool = True

