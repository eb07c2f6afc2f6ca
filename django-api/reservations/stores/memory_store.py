"""Dict-backed store implementations.

Used by the unit tests and by anything that wants the services without a
database. All stores share one MemoryDatabase so MemoryUnitOfWork can undo
every write made inside a failed scope.
"""

import threading
import uuid
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterator
from uuid import UUID

from reservations.domain import AvailabilityBlock, Booking, LineItem, Quotation, Venue
from reservations.domain.errors import DuplicateError
from reservations.domain.models import (
    BookingFilters,
    Page,
    Pagination,
    QuotationFilters,
)
from reservations.domain.value_objects import quantize_money
from reservations.stores.interfaces import (
    BookingStore,
    EventPublisher,
    QuotationStore,
    UnitOfWork,
    VenueStore,
)

_MISSING = object()


class MemoryDatabase:
    """Tables keyed by id, plus a per-thread undo journal."""

    def __init__(self) -> None:
        self.venues: dict[UUID, Venue] = {}
        self.blocks: list[AvailabilityBlock] = []
        self.bookings: dict[UUID, Booking] = {}
        self.quotations: dict[UUID, Quotation] = {}
        self._local = threading.local()

    def write(self, table: dict, key: UUID, value: Any) -> None:
        journal = getattr(self._local, "journal", None)
        if journal is not None and (id(table), key) not in journal:
            journal[(id(table), key)] = (table, table.get(key, _MISSING))
        table[key] = value

    @contextmanager
    def journaled(self) -> Iterator[None]:
        if getattr(self._local, "journal", None) is not None:
            yield
            return
        self._local.journal = {}
        try:
            yield
        except BaseException:
            for (_, key), (table, previous) in self._local.journal.items():
                if previous is _MISSING:
                    table.pop(key, None)
                else:
                    table[key] = previous
            raise
        finally:
            self._local.journal = None


class MemoryVenueStore(VenueStore):
    def __init__(self, db: MemoryDatabase) -> None:
        self._db = db

    def add_venue(self, venue: Venue) -> Venue:
        self._db.venues[venue.id] = venue
        return venue

    def add_block(self, block: AvailabilityBlock) -> AvailabilityBlock:
        self._db.blocks.append(block)
        return block

    def get_venue(self, venue_id: UUID) -> Venue | None:
        return self._db.venues.get(venue_id)

    def get_blocks(self, venue_id: UUID, day: date) -> list[AvailabilityBlock]:
        return [
            block
            for block in self._db.blocks
            if block.venue_id == venue_id and block.date == day
        ]


def _with_item_ids(items: tuple[LineItem, ...]) -> tuple[LineItem, ...]:
    return tuple(item if item.id else replace(item, id=uuid.uuid4()) for item in items)


def _matches(entity: Any, filters: Any, conditions: dict[str, Any], date_field: str) -> bool:
    for name in ("venue_id", "customer_id", "event_type", "status", "payment_status",
                 "is_confirmed", "is_cancelled", "is_accepted", "is_expired"):
        expected = getattr(filters, name, None)
        if expected is not None and getattr(entity, name) != expected:
            return False
    day = getattr(entity, date_field)
    if filters.start_date is not None and day < filters.start_date:
        return False
    if filters.end_date is not None and day > filters.end_date:
        return False
    return all(getattr(entity, name) == value for name, value in conditions.items())


def _page(rows: list, pagination: Pagination) -> Page:
    rows.sort(key=lambda row: getattr(row, pagination.sort_by), reverse=pagination.descending)
    offset = (pagination.page - 1) * pagination.limit
    return Page(
        items=tuple(rows[offset : offset + pagination.limit]),
        total=len(rows),
        page=pagination.page,
        limit=pagination.limit,
    )


def _amount_stats(rows: list) -> tuple[Decimal, Decimal]:
    if not rows:
        return Decimal("0.00"), Decimal("0.00")
    total = sum((row.total_amount for row in rows), Decimal("0"))
    return quantize_money(total), quantize_money(total / len(rows))


class MemoryBookingStore(BookingStore):
    def __init__(self, db: MemoryDatabase) -> None:
        self._db = db

    def add(self, booking: Booking) -> Booking:
        if booking.quotation_id is not None and any(
            existing.quotation_id == booking.quotation_id
            for existing in self._db.bookings.values()
        ):
            raise DuplicateError("A booking already exists for this quotation")
        stored = replace(booking, line_items=_with_item_ids(booking.line_items))
        self._db.write(self._db.bookings, stored.id, stored)
        return stored

    def get(self, booking_id: UUID) -> Booking | None:
        return self._db.bookings.get(booking_id)

    def save(self, booking: Booking, replace_line_items: bool = False) -> Booking:
        existing = self._db.bookings[booking.id]
        items = (
            _with_item_ids(booking.line_items) if replace_line_items else existing.line_items
        )
        stored = replace(booking, line_items=items)
        self._db.write(self._db.bookings, stored.id, stored)
        return stored

    def find_active_on(
        self, venue_id: UUID, day: date, exclude_id: UUID | None = None
    ) -> list[Booking]:
        return [
            booking
            for booking in self._db.bookings.values()
            if booking.venue_id == venue_id
            and not booking.is_cancelled
            and booking.start_date <= day <= booking.end_date
            and booking.id != exclude_id
        ]

    def search(self, filters: BookingFilters, pagination: Pagination) -> Page:
        return _page(self._matching(filters, {}), pagination)

    def count(self, filters: BookingFilters, **conditions: Any) -> int:
        return len(self._matching(filters, conditions))

    def amount_stats(
        self, filters: BookingFilters, **conditions: Any
    ) -> tuple[Decimal, Decimal]:
        return _amount_stats(self._matching(filters, conditions))

    def _matching(self, filters: BookingFilters, conditions: dict[str, Any]) -> list[Booking]:
        return [
            booking
            for booking in self._db.bookings.values()
            if _matches(booking, filters, conditions, "start_date")
        ]


class MemoryQuotationStore(QuotationStore):
    def __init__(self, db: MemoryDatabase) -> None:
        self._db = db

    def add(self, quotation: Quotation) -> Quotation:
        if self.get_by_number(quotation.quotation_number) is not None:
            raise DuplicateError(
                f"Quotation number {quotation.quotation_number} already exists"
            )
        stored = replace(quotation, line_items=_with_item_ids(quotation.line_items))
        self._db.write(self._db.quotations, stored.id, stored)
        return stored

    def get(self, quotation_id: UUID) -> Quotation | None:
        return self._db.quotations.get(quotation_id)

    def get_by_number(self, quotation_number: str) -> Quotation | None:
        return next(
            (
                quotation
                for quotation in self._db.quotations.values()
                if quotation.quotation_number == quotation_number
            ),
            None,
        )

    def save(self, quotation: Quotation) -> Quotation:
        existing = self._db.quotations[quotation.id]
        stored = replace(quotation, line_items=existing.line_items)
        self._db.write(self._db.quotations, stored.id, stored)
        return stored

    def replace_line_items(
        self, quotation_id: UUID, items: tuple[LineItem, ...]
    ) -> tuple[LineItem, ...]:
        fresh = _with_item_ids(tuple(replace(item, id=None) for item in items))
        existing = self._db.quotations[quotation_id]
        self._db.write(
            self._db.quotations, quotation_id, replace(existing, line_items=fresh)
        )
        return fresh

    def search(self, filters: QuotationFilters, pagination: Pagination) -> Page:
        return _page(self._matching(filters, {}), pagination)

    def count(self, filters: QuotationFilters, **conditions: Any) -> int:
        return len(self._matching(filters, conditions))

    def amount_stats(
        self, filters: QuotationFilters, **conditions: Any
    ) -> tuple[Decimal, Decimal]:
        return _amount_stats(self._matching(filters, conditions))

    def find_overdue(self, now: datetime) -> list[Quotation]:
        return [
            quotation
            for quotation in self._db.quotations.values()
            if not quotation.is_accepted
            and not quotation.is_expired
            and quotation.valid_until < now
        ]

    def _matching(
        self, filters: QuotationFilters, conditions: dict[str, Any]
    ) -> list[Quotation]:
        return [
            quotation
            for quotation in self._db.quotations.values()
            if _matches(quotation, filters, conditions, "event_date")
        ]


class MemoryUnitOfWork(UnitOfWork):
    """Per-venue re-entrant lock; writes are undone if the scope raises."""

    def __init__(self, db: MemoryDatabase) -> None:
        self._db = db
        self._guard = threading.Lock()
        self._locks: defaultdict[UUID, threading.RLock] = defaultdict(threading.RLock)

    @contextmanager
    def atomic(self, venue_id: UUID) -> Iterator[None]:
        with self._guard:
            lock = self._locks[venue_id]
        with lock, self._db.journaled():
            yield


class RecordingPublisher(EventPublisher):
    """Keeps published events in memory, in order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def publish(self, topic: str, payload: dict) -> None:
        self.events.append((topic, payload))

    @property
    def topics(self) -> list[str]:
        return [topic for topic, _ in self.events]
