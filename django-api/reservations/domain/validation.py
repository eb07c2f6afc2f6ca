"""Request validation.

Each validator returns the full list of violations instead of stopping at
the first one; services raise ValidationFailedError when the list is
non-empty.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from uuid import UUID

from reservations.domain.models import EventType, LineItem, LineItemType
from reservations.domain.requests import (
    CostRequest,
    CreateBookingRequest,
    CreateQuotationRequest,
    UpdateBookingRequest,
    UpdateQuotationRequest,
)
from reservations.domain.value_objects import TimeWindow, is_valid_time_string

MAX_GUESTS = 10_000
MAX_QUANTITY = 10_000
MAX_EVENT_NAME = 200
MAX_ITEM_NAME = 100
MAX_ITEM_DESCRIPTION = 200
MAX_SPECIAL_REQUESTS = 1000
MAX_DURATION_HOURS = Decimal(24)
MAX_BOOKING_DAYS = 30


def is_valid_uuid(value: object) -> bool:
    try:
        UUID(str(value))
    except (TypeError, ValueError):
        return False
    return True


def _is_member(enum_cls: type[Enum], value: object) -> bool:
    try:
        enum_cls(value)
    except ValueError:
        return False
    return True


def _is_blank(value: str | None) -> bool:
    return not value or not value.strip()


def _check_event_name(errors: list[str], name: str | None, *, required: bool) -> None:
    if name is None and not required:
        return
    if _is_blank(name):
        errors.append("Event name is required" if required else "Event name cannot be empty")
    elif len(name) > MAX_EVENT_NAME:
        errors.append(f"Event name must be less than {MAX_EVENT_NAME} characters")


def _check_guest_count(errors: list[str], guest_count: int | None, *, required: bool) -> None:
    if guest_count is None and not required:
        return
    if not guest_count or guest_count <= 0:
        errors.append("Guest count must be greater than 0")
    elif guest_count > MAX_GUESTS:
        errors.append("Guest count cannot exceed 10,000")


def _check_window(
    errors: list[str], start: str | None, end: str | None, *, required: bool
) -> None:
    start_ok = is_valid_time_string(start)
    end_ok = is_valid_time_string(end)
    if required or start is not None:
        if not start_ok:
            errors.append("Valid start time is required (HH:MM format)")
    if required or end is not None:
        if not end_ok:
            errors.append("Valid end time is required (HH:MM format)")
    if start_ok and end_ok and start >= end:
        errors.append("End time must be after start time")


def _check_discount(errors: list[str], discount: Decimal | None) -> None:
    if discount is None:
        return
    try:
        value = Decimal(discount)
    except (InvalidOperation, TypeError, ValueError):
        errors.append("Discount must be a number")
        return
    if value < 0 or value > 100:
        errors.append("Discount must be between 0 and 100 percent")


def _check_not_past(errors: list[str], label: str, day: date | None, today: date) -> None:
    if day is not None and day < today:
        errors.append(f"{label} cannot be in the past")


def date_span_errors(start: date, end: date) -> list[str]:
    """Violations of the inclusive ``start``..``end`` booking range."""
    if end < start:
        return ["End date must be after start date"]
    if (end - start).days + 1 > MAX_BOOKING_DAYS:
        return [f"Booking cannot span more than {MAX_BOOKING_DAYS} days"]
    return []


def validate_line_item(item: LineItem) -> list[str]:
    errors: list[str] = []
    if not _is_member(LineItemType, item.item_type):
        errors.append("Valid item type is required")
    if _is_blank(item.item_name):
        errors.append("Item name is required")
    elif len(item.item_name) > MAX_ITEM_NAME:
        errors.append(f"Item name must be less than {MAX_ITEM_NAME} characters")
    if item.description and len(item.description) > MAX_ITEM_DESCRIPTION:
        errors.append(
            f"Description must be less than {MAX_ITEM_DESCRIPTION} characters"
        )
    if not item.quantity or item.quantity <= 0:
        errors.append("Quantity must be greater than 0")
    elif item.quantity > MAX_QUANTITY:
        errors.append("Quantity cannot exceed 10,000")
    if item.unit_price is None or item.unit_price <= 0:
        errors.append("Unit price must be greater than 0")
    return errors


def _check_line_items(
    errors: list[str], items: tuple[LineItem, ...] | None, *, required: bool
) -> None:
    if not items:
        if required:
            errors.append("At least one line item is required")
        return
    for index, item in enumerate(items, start=1):
        item_errors = validate_line_item(item)
        if item_errors:
            errors.append(f"Line item {index}: {', '.join(item_errors)}")


def validate_cost_request(request: CostRequest, today: date) -> list[str]:
    """Checks applied before pricing an externally supplied request."""
    errors: list[str] = []
    if not request.venue_id:
        errors.append("Venue ID is required")
    if request.event_date is None:
        errors.append("Event date is required")
    else:
        _check_not_past(errors, "Event date", request.event_date, today)
    if not request.start_time or not request.end_time:
        errors.append("Start time and end time are required")
    elif not (
        is_valid_time_string(request.start_time)
        and is_valid_time_string(request.end_time)
    ):
        errors.append("Start time and end time must use HH:MM format")
    else:
        window_errors: list[str] = []
        _check_window(window_errors, request.start_time, request.end_time, required=True)
        errors.extend(window_errors)
        if not window_errors:
            duration = TimeWindow.from_strings(
                request.start_time, request.end_time
            ).duration_hours
            if duration > MAX_DURATION_HOURS:
                errors.append("Event duration cannot exceed 24 hours")
    if not request.guest_count or request.guest_count <= 0:
        errors.append("Guest count must be greater than 0")
    if not request.line_items:
        errors.append("At least one line item is required")
    _check_discount(errors, request.discount_percentage)
    return errors


def validate_create_booking(request: CreateBookingRequest, today: date) -> list[str]:
    errors: list[str] = []
    if not request.venue_id:
        errors.append("Venue ID is required")
    elif not is_valid_uuid(request.venue_id):
        errors.append("Invalid venue ID format")
    if _is_blank(request.customer_id):
        errors.append("Customer ID is required")
    _check_event_name(errors, request.event_name, required=True)
    if not _is_member(EventType, request.event_type):
        errors.append("Valid event type is required")
    if request.start_date is None:
        errors.append("Start date is required")
    else:
        _check_not_past(errors, "Start date", request.start_date, today)
    if request.end_date is None:
        errors.append("End date is required")
    elif request.start_date is not None:
        errors.extend(date_span_errors(request.start_date, request.end_date))
    _check_window(errors, request.start_time, request.end_time, required=True)
    _check_guest_count(errors, request.guest_count, required=True)
    if request.special_requests and len(request.special_requests) > MAX_SPECIAL_REQUESTS:
        errors.append("Special requests must be less than 1000 characters")
    _check_line_items(errors, request.line_items, required=False)
    _check_discount(errors, request.discount_percentage)
    return errors


def validate_update_booking(request: UpdateBookingRequest, today: date) -> list[str]:
    errors: list[str] = []
    _check_not_past(errors, "Start date", request.start_date, today)
    _check_event_name(errors, request.event_name, required=False)
    if request.event_type is not None and not _is_member(EventType, request.event_type):
        errors.append("Invalid event type")
    _check_window(errors, request.start_time, request.end_time, required=False)
    if request.start_date is not None and request.end_date is not None:
        errors.extend(date_span_errors(request.start_date, request.end_date))
    _check_guest_count(errors, request.guest_count, required=False)
    if request.special_requests and len(request.special_requests) > MAX_SPECIAL_REQUESTS:
        errors.append("Special requests must be less than 1000 characters")
    return errors


def validate_create_quotation(
    request: CreateQuotationRequest, now: datetime
) -> list[str]:
    errors: list[str] = []
    if not request.venue_id:
        errors.append("Venue ID is required")
    elif not is_valid_uuid(request.venue_id):
        errors.append("Invalid venue ID format")
    if _is_blank(request.customer_id):
        errors.append("Customer ID is required")
    _check_event_name(errors, request.event_name, required=True)
    if not _is_member(EventType, request.event_type):
        errors.append("Valid event type is required")
    if request.event_date is None:
        errors.append("Event date is required")
    else:
        _check_not_past(errors, "Event date", request.event_date, now.date())
    _check_window(errors, request.start_time, request.end_time, required=True)
    _check_guest_count(errors, request.guest_count, required=True)
    _check_line_items(errors, request.line_items, required=True)
    _check_discount(errors, request.discount_percentage)
    if request.valid_until is not None and request.valid_until <= now:
        errors.append("Valid until date must be in the future")
    return errors


def validate_update_quotation(
    request: UpdateQuotationRequest, now: datetime
) -> list[str]:
    errors: list[str] = []
    _check_event_name(errors, request.event_name, required=False)
    if request.event_type is not None and not _is_member(EventType, request.event_type):
        errors.append("Invalid event type")
    _check_not_past(errors, "Event date", request.event_date, now.date())
    _check_window(errors, request.start_time, request.end_time, required=False)
    _check_guest_count(errors, request.guest_count, required=False)
    if request.line_items is not None:
        _check_line_items(errors, request.line_items, required=True)
    _check_discount(errors, request.discount_percentage)
    if request.valid_until is not None and request.valid_until <= now:
        errors.append("Valid until date must be in the future")
    return errors
