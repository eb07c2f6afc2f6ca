"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Services depend only on
these interfaces; reservations.stores.django_store and
reservations.stores.memory_store are the two implementations.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from reservations.domain import AvailabilityBlock, Booking, LineItem, Quotation, Venue
from reservations.domain.models import (
    BookingFilters,
    Page,
    Pagination,
    QuotationFilters,
)


class VenueStore(ABC):
    """Read-only access to venues and their availability blocks."""

    @abstractmethod
    def get_venue(self, venue_id: UUID) -> Venue | None:
        """Return a venue by ID, or None if not found."""
        ...

    @abstractmethod
    def get_blocks(self, venue_id: UUID, day: date) -> list[AvailabilityBlock]:
        """Return the unavailable blocks recorded for a venue on a day."""
        ...


class BookingStore(ABC):
    """Interface for booking persistence operations."""

    @abstractmethod
    def add(self, booking: Booking) -> Booking:
        """Persist a new booking together with its line items."""
        ...

    @abstractmethod
    def get(self, booking_id: UUID) -> Booking | None:
        """Return a booking by ID, or None if not found."""
        ...

    @abstractmethod
    def save(self, booking: Booking, replace_line_items: bool = False) -> Booking:
        """Write back an existing booking; line items only when asked to."""
        ...

    @abstractmethod
    def find_active_on(
        self, venue_id: UUID, day: date, exclude_id: UUID | None = None
    ) -> list[Booking]:
        """Return non-cancelled bookings of a venue whose date range includes ``day``."""
        ...

    @abstractmethod
    def search(self, filters: BookingFilters, pagination: Pagination) -> Page:
        """Return one page of bookings matching ``filters``."""
        ...

    @abstractmethod
    def count(self, filters: BookingFilters, **conditions: Any) -> int:
        """Count bookings matching ``filters`` plus exact-match ``conditions``."""
        ...

    @abstractmethod
    def amount_stats(
        self, filters: BookingFilters, **conditions: Any
    ) -> tuple[Decimal, Decimal]:
        """Return (sum, average) of total_amount over the matching bookings."""
        ...


class QuotationStore(ABC):
    """Interface for quotation persistence operations."""

    @abstractmethod
    def add(self, quotation: Quotation) -> Quotation:
        """Persist a new quotation and its line items.

        Raises:
            DuplicateError: If the quotation number is already taken.
        """
        ...

    @abstractmethod
    def get(self, quotation_id: UUID) -> Quotation | None:
        ...

    @abstractmethod
    def get_by_number(self, quotation_number: str) -> Quotation | None:
        ...

    @abstractmethod
    def save(self, quotation: Quotation) -> Quotation:
        """Write back the scalar fields of an existing quotation."""
        ...

    @abstractmethod
    def replace_line_items(
        self, quotation_id: UUID, items: tuple[LineItem, ...]
    ) -> tuple[LineItem, ...]:
        """Delete every line item of the quotation and create ``items`` instead."""
        ...

    @abstractmethod
    def search(self, filters: QuotationFilters, pagination: Pagination) -> Page:
        ...

    @abstractmethod
    def count(self, filters: QuotationFilters, **conditions: Any) -> int:
        ...

    @abstractmethod
    def amount_stats(
        self, filters: QuotationFilters, **conditions: Any
    ) -> tuple[Decimal, Decimal]:
        ...

    @abstractmethod
    def find_overdue(self, now: datetime) -> list[Quotation]:
        """Return non-accepted, non-expired quotations whose validity has passed."""
        ...


class UnitOfWork(ABC):
    """Transactional scope for check-then-act sequences on one venue."""

    @abstractmethod
    def atomic(self, venue_id: UUID) -> AbstractContextManager[None]:
        """Serialize writers of ``venue_id`` and make the enclosed writes atomic.

        Nested calls join the outer scope.
        """
        ...


class ReservationCache(ABC):
    """Best-effort cache. Implementations never raise."""

    supports_namespace_delete: bool = False

    @abstractmethod
    def get(self, key: str) -> Any | None:
        ...

    @abstractmethod
    def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
        namespace: str | None = None,
    ) -> None:
        """Store ``value``; keys set with a namespace are dropped by invalidate_namespace."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def invalidate_namespace(self, namespace: str) -> None:
        """Drop every key stored under ``namespace:``."""
        ...


class EventPublisher(ABC):
    """Fire-and-forget notification of completed mutations."""

    @abstractmethod
    def publish(self, topic: str, payload: dict) -> None:
        """Emit ``topic`` (e.g. "booking.confirmed"). Never raises."""
        ...
