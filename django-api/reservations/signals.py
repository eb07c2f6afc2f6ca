"""Django signals.

``reservation_event`` carries the lifecycle events published by the
services. The model receivers keep the cache honest when rows are changed
outside the services, e.g. through the admin.
"""

import logging

from django.apps import apps
from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal, receiver

from reservations.models import Booking, LineItem, Quotation
from reservations.services.booking_service import (
    LIST_NAMESPACE as BOOKING_LIST,
    STATS_NAMESPACE as BOOKING_STATS,
    booking_key,
)
from reservations.services.quotation_service import (
    LIST_NAMESPACE as QUOTATION_LIST,
    STATS_NAMESPACE as QUOTATION_STATS,
    quotation_key,
)

logger = logging.getLogger(__name__)

# Sent with keyword arguments ``topic`` and ``payload``.
reservation_event = Signal()


def _cache():
    return apps.get_app_config("reservations").services.cache


def _invalidate_booking(booking_id) -> None:
    cache = _cache()
    cache.delete(booking_key(booking_id))
    cache.invalidate_namespace(BOOKING_LIST)
    cache.invalidate_namespace(BOOKING_STATS)


def _invalidate_quotation(quotation_id) -> None:
    cache = _cache()
    cache.delete(quotation_key(quotation_id))
    cache.invalidate_namespace(QUOTATION_LIST)
    cache.invalidate_namespace(QUOTATION_STATS)


@receiver([post_save, post_delete], sender=Booking)
def invalidate_booking_cache(sender, instance, **kwargs):
    """Invalidate caches when a booking is saved or deleted."""
    _invalidate_booking(instance.pk)


@receiver([post_save, post_delete], sender=Quotation)
def invalidate_quotation_cache(sender, instance, **kwargs):
    """Invalidate caches when a quotation is saved or deleted."""
    _invalidate_quotation(instance.pk)


@receiver([post_save, post_delete], sender=LineItem)
def invalidate_line_item_owner_cache(sender, instance, **kwargs):
    """A line item change alters its owner's totals."""
    if instance.booking_id:
        _invalidate_booking(instance.booking_id)
    if instance.quotation_id:
        _invalidate_quotation(instance.quotation_id)


@receiver(reservation_event)
def log_reservation_event(sender, topic, payload, **kwargs):
    logger.info("Reservation event %s", topic, extra={"event": topic, **payload})
