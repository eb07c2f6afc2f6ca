from reservations.domain.models import (
    AvailabilityBlock,
    Booking,
    BookingStatus,
    CostBreakdown,
    EventType,
    LineItem,
    LineItemType,
    PaymentStatus,
    Quotation,
    QuotationStatus,
    RateCard,
    Venue,
)
from reservations.domain.value_objects import DateRange, TimeWindow

__all__ = [
    "AvailabilityBlock",
    "Booking",
    "BookingStatus",
    "CostBreakdown",
    "EventType",
    "LineItem",
    "LineItemType",
    "PaymentStatus",
    "Quotation",
    "QuotationStatus",
    "RateCard",
    "Venue",
    "DateRange",
    "TimeWindow",
]
