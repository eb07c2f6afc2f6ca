"""Operation inputs for the lifecycle services.

Times are carried as HH:MM strings until validation has passed; the
services convert them to TimeWindow afterwards.
"""

from dataclasses import asdict, dataclass
from datetime import date, datetime
from decimal import Decimal

from reservations.domain.models import EventType, LineItem


@dataclass(frozen=True)
class CostRequest:
    venue_id: str | None
    event_date: date | None
    start_time: str | None
    end_time: str | None
    guest_count: int
    line_items: tuple[LineItem, ...] = ()
    discount_percentage: Decimal = Decimal("0")


@dataclass(frozen=True)
class CreateBookingRequest:
    venue_id: str
    customer_id: str
    event_name: str
    event_type: EventType | str
    start_date: date | None
    end_date: date | None
    start_time: str | None
    end_time: str | None
    guest_count: int
    special_requests: str | None = None
    line_items: tuple[LineItem, ...] = ()
    discount_percentage: Decimal = Decimal("0")
    quotation_id: str | None = None


@dataclass(frozen=True)
class UpdateBookingRequest:
    """Partial update; None means "leave unchanged"."""

    event_name: str | None = None
    event_type: EventType | str | None = None
    start_date: date | None = None
    end_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    guest_count: int | None = None
    special_requests: str | None = None

    def changes(self) -> dict:
        return {key: value for key, value in asdict(self).items() if value is not None}

    @property
    def touches_schedule(self) -> bool:
        return any(
            value is not None
            for value in (self.start_date, self.end_date, self.start_time, self.end_time)
        )


@dataclass(frozen=True)
class CreateQuotationRequest:
    venue_id: str
    customer_id: str
    event_name: str
    event_type: EventType | str
    event_date: date | None
    start_time: str | None
    end_time: str | None
    guest_count: int
    line_items: tuple[LineItem, ...] = ()
    discount_percentage: Decimal = Decimal("0")
    valid_until: datetime | None = None
    notes: str | None = None


@dataclass(frozen=True)
class UpdateQuotationRequest:
    """Partial update; line_items=None keeps the current items."""

    event_name: str | None = None
    event_type: EventType | str | None = None
    event_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    guest_count: int | None = None
    discount_percentage: Decimal | None = None
    valid_until: datetime | None = None
    notes: str | None = None
    line_items: tuple[LineItem, ...] | None = None

    def changes(self) -> dict:
        # asdict() would recurse into the line items, so build the dict by hand.
        fields = (
            "event_name",
            "event_type",
            "event_date",
            "start_time",
            "end_time",
            "guest_count",
            "discount_percentage",
            "valid_until",
            "notes",
        )
        return {
            name: getattr(self, name)
            for name in fields
            if getattr(self, name) is not None
        }
