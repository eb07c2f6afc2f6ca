"""Builds the services and their collaborators once per process."""

from dataclasses import dataclass

from django.core.cache import caches
from django.utils import timezone

from reservations.conf import ReservationSettings, reservation_settings
from reservations.services.availability import AvailabilityChecker
from reservations.services.booking_service import BookingService
from reservations.services.cost_engine import CostEngine
from reservations.services.quotation_service import QuotationService
from reservations.stores.cache import DjangoReservationCache
from reservations.stores.django_store import (
    DjangoBookingStore,
    DjangoQuotationStore,
    DjangoUnitOfWork,
    DjangoVenueStore,
)
from reservations.stores.interfaces import ReservationCache
from reservations.stores.publisher import SignalEventPublisher


@dataclass(frozen=True)
class Services:
    bookings: BookingService
    quotations: QuotationService
    cost_engine: CostEngine
    cache: ReservationCache


def build_services(config: ReservationSettings | None = None) -> Services:
    config = config or reservation_settings()
    retry = {"attempts": config.retry_attempts, "delay": config.retry_delay}

    venues = DjangoVenueStore(**retry)
    bookings = DjangoBookingStore(**retry)
    quotations = DjangoQuotationStore(**retry)
    cache = DjangoReservationCache(caches["default"], default_ttl=config.cache_ttl, **retry)
    publisher = SignalEventPublisher()
    unit_of_work = DjangoUnitOfWork()
    availability = AvailabilityChecker(venues, bookings)
    cost_engine = CostEngine(config.pricing)
    clock = timezone.localtime

    booking_service = BookingService(
        venues=venues,
        bookings=bookings,
        availability=availability,
        cost_engine=cost_engine,
        unit_of_work=unit_of_work,
        cache=cache,
        publisher=publisher,
        clock=clock,
        cache_ttl=config.cache_ttl,
    )
    quotation_service = QuotationService(
        venues=venues,
        quotations=quotations,
        availability=availability,
        cost_engine=cost_engine,
        bookings=booking_service,
        unit_of_work=unit_of_work,
        cache=cache,
        publisher=publisher,
        clock=clock,
        cache_ttl=config.cache_ttl,
        validity_days=config.quotation_validity_days,
    )
    return Services(
        bookings=booking_service,
        quotations=quotation_service,
        cost_engine=cost_engine,
        cache=cache,
    )
