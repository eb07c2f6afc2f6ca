"""Django ORM implementation of the store interfaces.

Reads are retried on transient connection errors. Any other DatabaseError
is logged and surfaces as StoreFailureError so no driver detail reaches a
client.
"""

import functools
import logging
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator
from uuid import UUID

from django.db import DatabaseError, IntegrityError, InterfaceError, OperationalError, transaction
from django.db.models import Avg, Q, QuerySet, Sum

from reservations import models as orm
from reservations.domain import (
    AvailabilityBlock,
    Booking,
    BookingStatus,
    EventType,
    LineItem,
    LineItemType,
    PaymentStatus,
    Quotation,
    QuotationStatus,
    RateCard,
    TimeWindow,
    Venue,
)
from reservations.domain.errors import DuplicateError, StoreFailureError
from reservations.domain.models import BookingFilters, Page, Pagination, QuotationFilters
from reservations.domain.value_objects import quantize_money
from reservations.stores.interfaces import BookingStore, QuotationStore, UnitOfWork, VenueStore
from reservations.stores.retry import call_with_retries

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (OperationalError, InterfaceError)


def _guarded(retry: bool):
    """Retry transient errors on reads and map DatabaseError to StoreFailureError."""

    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs):
            try:
                if retry and not transaction.get_connection().in_atomic_block:
                    return call_with_retries(
                        lambda: method(self, *args, **kwargs),
                        attempts=self._attempts,
                        delay=self._delay,
                        retry_on=TRANSIENT_ERRORS,
                        description=f"{type(self).__name__}.{method.__name__}",
                    )
                return method(self, *args, **kwargs)
            except DatabaseError as exc:
                logger.error(
                    "%s.%s failed", type(self).__name__, method.__name__, exc_info=True
                )
                raise StoreFailureError() from exc

        return wrapper

    return decorator


def _db_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _conditions(conditions: dict[str, Any]) -> dict[str, Any]:
    return {name: _db_value(value) for name, value in conditions.items()}


def _to_line_item(row: orm.LineItem) -> LineItem:
    return LineItem(
        id=row.id,
        item_type=LineItemType(row.item_type),
        item_name=row.item_name,
        description=row.description,
        quantity=row.quantity,
        unit_price=row.unit_price,
    )


def _line_item_rows(items: tuple[LineItem, ...], **owner: Any) -> list[orm.LineItem]:
    return [
        orm.LineItem(
            item_type=_db_value(item.item_type),
            item_name=item.item_name,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=quantize_money(item.total_price),
            position=position,
            **owner,
        )
        for position, item in enumerate(items)
    ]


def _to_venue(row: orm.Venue) -> Venue:
    return Venue(
        id=row.id,
        name=row.name,
        capacity=row.capacity,
        location=row.location,
        rate_card=RateCard(
            base_rate=row.base_rate,
            hourly_rate=row.hourly_rate,
            daily_rate=row.daily_rate,
            weekend_rate=row.weekend_rate,
        ),
        is_active=row.is_active,
        is_available=row.is_available,
    )


def _to_booking(row: orm.Booking) -> Booking:
    return Booking(
        id=row.id,
        venue_id=row.venue_id,
        customer_id=row.customer_id,
        quotation_id=row.quotation_id,
        event_name=row.event_name,
        event_type=EventType(row.event_type),
        start_date=row.start_date,
        end_date=row.end_date,
        start_time=row.start_time,
        end_time=row.end_time,
        guest_count=row.guest_count,
        special_requests=row.special_requests,
        base_amount=row.base_amount,
        additional_charges=row.additional_charges,
        discount_percentage=row.discount_percentage,
        discount=row.discount,
        tax_amount=row.tax_amount,
        total_amount=row.total_amount,
        deposit_amount=row.deposit_amount,
        balance_amount=row.balance_amount,
        status=BookingStatus(row.status),
        payment_status=PaymentStatus(row.payment_status),
        is_confirmed=row.is_confirmed,
        is_cancelled=row.is_cancelled,
        cancellation_reason=row.cancellation_reason,
        refund_amount=row.refund_amount,
        confirmed_at=row.confirmed_at,
        checked_in_at=row.checked_in_at,
        checked_out_at=row.checked_out_at,
        cancelled_at=row.cancelled_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
        line_items=tuple(_to_line_item(item) for item in row.line_items.all()),
    )


def _to_quotation(row: orm.Quotation) -> Quotation:
    return Quotation(
        id=row.id,
        venue_id=row.venue_id,
        customer_id=row.customer_id,
        quotation_number=row.quotation_number,
        event_name=row.event_name,
        event_type=EventType(row.event_type),
        event_date=row.event_date,
        start_time=row.start_time,
        end_time=row.end_time,
        guest_count=row.guest_count,
        discount_percentage=row.discount_percentage,
        base_amount=row.base_amount,
        subtotal=row.subtotal,
        discount=row.discount,
        tax_amount=row.tax_amount,
        total_amount=row.total_amount,
        valid_until=row.valid_until,
        status=QuotationStatus(row.status),
        is_accepted=row.is_accepted,
        is_expired=row.is_expired,
        accepted_at=row.accepted_at,
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
        line_items=tuple(_to_line_item(item) for item in row.line_items.all()),
    )


BOOKING_COLUMNS = (
    "customer_id",
    "event_name",
    "start_date",
    "end_date",
    "start_time",
    "end_time",
    "guest_count",
    "special_requests",
    "base_amount",
    "additional_charges",
    "discount_percentage",
    "discount",
    "tax_amount",
    "total_amount",
    "deposit_amount",
    "balance_amount",
    "is_confirmed",
    "is_cancelled",
    "cancellation_reason",
    "refund_amount",
    "confirmed_at",
    "checked_in_at",
    "checked_out_at",
    "cancelled_at",
    "created_at",
    "updated_at",
)

QUOTATION_COLUMNS = (
    "customer_id",
    "quotation_number",
    "event_name",
    "event_date",
    "start_time",
    "end_time",
    "guest_count",
    "discount_percentage",
    "base_amount",
    "subtotal",
    "discount",
    "tax_amount",
    "total_amount",
    "valid_until",
    "is_accepted",
    "is_expired",
    "accepted_at",
    "notes",
    "created_at",
    "updated_at",
)


def _booking_fields(booking: Booking) -> dict[str, Any]:
    fields = {name: getattr(booking, name) for name in BOOKING_COLUMNS}
    fields.update(
        venue_id=booking.venue_id,
        quotation_id=booking.quotation_id,
        event_type=_db_value(booking.event_type),
        status=_db_value(booking.status),
        payment_status=_db_value(booking.payment_status),
    )
    return fields


def _quotation_fields(quotation: Quotation) -> dict[str, Any]:
    fields = {name: getattr(quotation, name) for name in QUOTATION_COLUMNS}
    fields.update(
        venue_id=quotation.venue_id,
        event_type=_db_value(quotation.event_type),
        status=_db_value(quotation.status),
    )
    return fields


def _page(queryset: QuerySet, pagination: Pagination, convert) -> Page:
    prefix = "-" if pagination.descending else ""
    ordered = queryset.order_by(f"{prefix}{pagination.sort_by}", "id")
    offset = (pagination.page - 1) * pagination.limit
    rows = ordered.prefetch_related("line_items")[offset : offset + pagination.limit]
    return Page(
        items=tuple(convert(row) for row in rows),
        total=queryset.count(),
        page=pagination.page,
        limit=pagination.limit,
    )


def _amount_stats(queryset: QuerySet) -> tuple[Decimal, Decimal]:
    totals = queryset.aggregate(total=Sum("total_amount"), average=Avg("total_amount"))
    return (
        quantize_money(Decimal(totals["total"] or 0)),
        quantize_money(Decimal(totals["average"] or 0)),
    )


class _DjangoStore:
    def __init__(self, attempts: int = 3, delay: float = 0.2) -> None:
        self._attempts = attempts
        self._delay = delay


class DjangoVenueStore(_DjangoStore, VenueStore):
    """Venues and availability blocks from the ORM."""

    @_guarded(retry=True)
    def get_venue(self, venue_id: UUID) -> Venue | None:
        row = orm.Venue.objects.filter(pk=venue_id).first()
        return _to_venue(row) if row else None

    @_guarded(retry=True)
    def get_blocks(self, venue_id: UUID, day: date) -> list[AvailabilityBlock]:
        return [
            AvailabilityBlock(
                venue_id=row.venue_id,
                date=row.date,
                window=TimeWindow(start=row.start_time, end=row.end_time),
                is_available=row.is_available,
                reason=row.reason,
            )
            for row in orm.AvailabilityBlock.objects.filter(venue_id=venue_id, date=day)
        ]


class DjangoBookingStore(_DjangoStore, BookingStore):
    """Bookings and their line items from the ORM."""

    @_guarded(retry=False)
    def add(self, booking: Booking) -> Booking:
        try:
            with transaction.atomic():
                row = orm.Booking.objects.create(id=booking.id, **_booking_fields(booking))
                orm.LineItem.objects.bulk_create(_line_item_rows(booking.line_items, booking=row))
        except IntegrityError as exc:
            if booking.quotation_id is not None and (
                orm.Booking.objects.filter(quotation_id=booking.quotation_id)
                .exclude(pk=booking.id)
                .exists()
            ):
                raise DuplicateError("A booking already exists for this quotation") from exc
            raise
        return self.get(booking.id)

    @_guarded(retry=True)
    def get(self, booking_id: UUID) -> Booking | None:
        row = orm.Booking.objects.prefetch_related("line_items").filter(pk=booking_id).first()
        return _to_booking(row) if row else None

    @_guarded(retry=False)
    def save(self, booking: Booking, replace_line_items: bool = False) -> Booking:
        with transaction.atomic():
            orm.Booking.objects.filter(pk=booking.id).update(**_booking_fields(booking))
            if replace_line_items:
                orm.LineItem.objects.filter(booking_id=booking.id).delete()
                orm.LineItem.objects.bulk_create(
                    _line_item_rows(booking.line_items, booking_id=booking.id)
                )
        return self.get(booking.id)

    @_guarded(retry=True)
    def find_active_on(
        self, venue_id: UUID, day: date, exclude_id: UUID | None = None
    ) -> list[Booking]:
        queryset = orm.Booking.objects.filter(
            venue_id=venue_id,
            is_cancelled=False,
            start_date__lte=day,
            end_date__gte=day,
        )
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        return [_to_booking(row) for row in queryset.prefetch_related("line_items")]

    @_guarded(retry=True)
    def search(self, filters: BookingFilters, pagination: Pagination) -> Page:
        return _page(self._filtered(filters), pagination, _to_booking)

    @_guarded(retry=True)
    def count(self, filters: BookingFilters, **conditions: Any) -> int:
        return self._filtered(filters).filter(**_conditions(conditions)).count()

    @_guarded(retry=True)
    def amount_stats(
        self, filters: BookingFilters, **conditions: Any
    ) -> tuple[Decimal, Decimal]:
        return _amount_stats(self._filtered(filters).filter(**_conditions(conditions)))

    @staticmethod
    def _filtered(filters: BookingFilters) -> QuerySet:
        query = Q()
        for name in (
            "venue_id",
            "customer_id",
            "event_type",
            "status",
            "payment_status",
            "is_confirmed",
            "is_cancelled",
        ):
            value = getattr(filters, name)
            if value is not None:
                query &= Q(**{name: _db_value(value)})
        if filters.start_date is not None:
            query &= Q(start_date__gte=filters.start_date)
        if filters.end_date is not None:
            query &= Q(start_date__lte=filters.end_date)
        return orm.Booking.objects.filter(query)


class DjangoQuotationStore(_DjangoStore, QuotationStore):
    """Quotations and their line items from the ORM."""

    @_guarded(retry=False)
    def add(self, quotation: Quotation) -> Quotation:
        try:
            with transaction.atomic():
                row = orm.Quotation.objects.create(id=quotation.id, **_quotation_fields(quotation))
                orm.LineItem.objects.bulk_create(
                    _line_item_rows(quotation.line_items, quotation=row)
                )
        except IntegrityError as exc:
            if (
                orm.Quotation.objects.filter(quotation_number=quotation.quotation_number)
                .exclude(pk=quotation.id)
                .exists()
            ):
                raise DuplicateError(
                    f"Quotation number {quotation.quotation_number} already exists"
                ) from exc
            raise
        return self.get(quotation.id)

    @_guarded(retry=True)
    def get(self, quotation_id: UUID) -> Quotation | None:
        row = orm.Quotation.objects.prefetch_related("line_items").filter(pk=quotation_id).first()
        return _to_quotation(row) if row else None

    @_guarded(retry=True)
    def get_by_number(self, quotation_number: str) -> Quotation | None:
        row = (
            orm.Quotation.objects.prefetch_related("line_items")
            .filter(quotation_number=quotation_number)
            .first()
        )
        return _to_quotation(row) if row else None

    @_guarded(retry=False)
    def save(self, quotation: Quotation) -> Quotation:
        orm.Quotation.objects.filter(pk=quotation.id).update(**_quotation_fields(quotation))
        return self.get(quotation.id)

    @_guarded(retry=False)
    def replace_line_items(
        self, quotation_id: UUID, items: tuple[LineItem, ...]
    ) -> tuple[LineItem, ...]:
        with transaction.atomic():
            orm.LineItem.objects.filter(quotation_id=quotation_id).delete()
            rows = orm.LineItem.objects.bulk_create(
                _line_item_rows(items, quotation_id=quotation_id)
            )
        return tuple(_to_line_item(row) for row in rows)

    @_guarded(retry=True)
    def search(self, filters: QuotationFilters, pagination: Pagination) -> Page:
        return _page(self._filtered(filters), pagination, _to_quotation)

    @_guarded(retry=True)
    def count(self, filters: QuotationFilters, **conditions: Any) -> int:
        return self._filtered(filters).filter(**_conditions(conditions)).count()

    @_guarded(retry=True)
    def amount_stats(
        self, filters: QuotationFilters, **conditions: Any
    ) -> tuple[Decimal, Decimal]:
        return _amount_stats(self._filtered(filters).filter(**_conditions(conditions)))

    @_guarded(retry=True)
    def find_overdue(self, now: datetime) -> list[Quotation]:
        rows = orm.Quotation.objects.filter(
            is_accepted=False, is_expired=False, valid_until__lt=now
        ).prefetch_related("line_items")
        return [_to_quotation(row) for row in rows]

    @staticmethod
    def _filtered(filters: QuotationFilters) -> QuerySet:
        query = Q()
        for name in (
            "venue_id",
            "customer_id",
            "event_type",
            "status",
            "is_accepted",
            "is_expired",
        ):
            value = getattr(filters, name)
            if value is not None:
                query &= Q(**{name: _db_value(value)})
        if filters.start_date is not None:
            query &= Q(event_date__gte=filters.start_date)
        if filters.end_date is not None:
            query &= Q(event_date__lte=filters.end_date)
        return orm.Quotation.objects.filter(query)


class DjangoUnitOfWork(UnitOfWork):
    """transaction.atomic() plus a row lock on the venue.

    Backends without SELECT ... FOR UPDATE (SQLite) serialize writers at the
    database level instead.
    """

    @contextmanager
    def atomic(self, venue_id: UUID) -> Iterator[None]:
        with transaction.atomic():
            list(
                orm.Venue.objects.select_for_update()
                .filter(pk=venue_id)
                .values_list("pk", flat=True)
            )
            yield
