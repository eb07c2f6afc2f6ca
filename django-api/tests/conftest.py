"""Pytest configuration and shared fixtures."""

import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from reservations.conf import DEFAULTS, PricingConfig
from reservations.domain import (
    Booking,
    EventType,
    LineItem,
    LineItemType,
    Quotation,
    RateCard,
    Venue,
)
from reservations.services import AvailabilityChecker, BookingService, CostEngine, QuotationService
from reservations.stores.memory_store import (
    MemoryBookingStore,
    MemoryDatabase,
    MemoryQuotationStore,
    MemoryUnitOfWork,
    MemoryVenueStore,
    RecordingPublisher,
)

# Monday morning, UTC.
NOW = datetime(2030, 6, 3, 9, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now += timedelta(**delta)


class MemoryCache:
    """Dict-backed ReservationCache."""

    supports_namespace_delete = True

    def __init__(self) -> None:
        self.data: dict = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ttl=None, namespace=None):
        self.data[key] = value

    def delete(self, key):
        self.data.pop(key, None)

    def invalidate_namespace(self, namespace):
        for key in [k for k in list(self.data) if k.startswith(f"{namespace}:")]:
            self.data.pop(key, None)


def default_pricing() -> PricingConfig:
    return PricingConfig(
        base_hall_rate=Decimal(DEFAULTS["BASE_HALL_RATE"]),
        chair_rate=Decimal(DEFAULTS["CHAIR_RATE"]),
        decoration_rate=Decimal(DEFAULTS["DECORATION_RATE"]),
        lighting_rate=Decimal(DEFAULTS["LIGHTING_RATE"]),
        av_rate=Decimal(DEFAULTS["AV_RATE"]),
        catering_rate_per_person=Decimal(DEFAULTS["CATERING_RATE_PER_PERSON"]),
        security_rate=Decimal(DEFAULTS["SECURITY_RATE"]),
        generator_rate=Decimal(DEFAULTS["GENERATOR_RATE"]),
        tax_percentage=Decimal(DEFAULTS["TAX_PERCENTAGE"]),
        deposit_percentage=Decimal(DEFAULTS["DEPOSIT_PERCENTAGE"]),
    )


def chairs(quantity: int = 10) -> LineItem:
    return LineItem(LineItemType.CHAIR, "Chairs", quantity, Decimal("50"))


def make_booking(**overrides) -> Booking:
    fields = dict(
        id=uuid.uuid4(),
        venue_id=uuid.uuid4(),
        customer_id="customer-1",
        event_name="Launch Party",
        event_type=EventType.PARTY,
        start_date=date(2030, 6, 10),
        end_date=date(2030, 6, 10),
        start_time=time(10, 0),
        end_time=time(13, 0),
        guest_count=10,
        base_amount=Decimal("5000.00"),
        additional_charges=Decimal("500.00"),
        discount=Decimal("0.00"),
        tax_amount=Decimal("990.00"),
        total_amount=Decimal("6490.00"),
        deposit_amount=Decimal("1298"),
        balance_amount=Decimal("5192.00"),
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(overrides)
    return Booking(**fields)


def make_quotation(**overrides) -> Quotation:
    fields = dict(
        id=uuid.uuid4(),
        venue_id=uuid.uuid4(),
        customer_id="customer-1",
        quotation_number="QUO12345678ABCD",
        event_name="Launch Party",
        event_type=EventType.PARTY,
        event_date=date(2030, 6, 10),
        start_time=time(10, 0),
        end_time=time(13, 0),
        guest_count=10,
        base_amount=Decimal("5000.00"),
        subtotal=Decimal("5500.00"),
        discount=Decimal("0.00"),
        tax_amount=Decimal("990.00"),
        total_amount=Decimal("6490.00"),
        valid_until=NOW + timedelta(days=7),
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(overrides)
    return Quotation(**fields)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def memory_db() -> MemoryDatabase:
    return MemoryDatabase()


@pytest.fixture
def venue_store(memory_db) -> MemoryVenueStore:
    return MemoryVenueStore(memory_db)


@pytest.fixture
def booking_store(memory_db) -> MemoryBookingStore:
    return MemoryBookingStore(memory_db)


@pytest.fixture
def quotation_store(memory_db) -> MemoryQuotationStore:
    return MemoryQuotationStore(memory_db)


@pytest.fixture
def venue(venue_store) -> Venue:
    return venue_store.add_venue(
        Venue(
            id=uuid.uuid4(),
            name="Grand Hall",
            capacity=500,
            location="Downtown",
            rate_card=RateCard(base_rate=Decimal("5000")),
        )
    )


@pytest.fixture
def cost_engine() -> CostEngine:
    return CostEngine(default_pricing())


@pytest.fixture
def availability(venue_store, booking_store) -> AvailabilityChecker:
    return AvailabilityChecker(venue_store, booking_store)


@pytest.fixture
def unit_of_work(memory_db) -> MemoryUnitOfWork:
    return MemoryUnitOfWork(memory_db)


@pytest.fixture
def memory_cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def booking_service(
    venue_store, booking_store, availability, cost_engine, unit_of_work, memory_cache, publisher, clock
) -> BookingService:
    return BookingService(
        venues=venue_store,
        bookings=booking_store,
        availability=availability,
        cost_engine=cost_engine,
        unit_of_work=unit_of_work,
        cache=memory_cache,
        publisher=publisher,
        clock=clock,
    )


@pytest.fixture
def quotation_service(
    venue_store,
    quotation_store,
    availability,
    cost_engine,
    booking_service,
    unit_of_work,
    memory_cache,
    publisher,
    clock,
) -> QuotationService:
    return QuotationService(
        venues=venue_store,
        quotations=quotation_store,
        availability=availability,
        cost_engine=cost_engine,
        bookings=booking_service,
        unit_of_work=unit_of_work,
        cache=memory_cache,
        publisher=publisher,
        clock=clock,
    )
