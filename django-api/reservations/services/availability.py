"""Availability checks that keep a venue from being double-booked."""

import logging
from datetime import date
from uuid import UUID

from reservations.domain import DateRange, TimeWindow
from reservations.stores.interfaces import BookingStore, VenueStore

logger = logging.getLogger(__name__)


class AvailabilityChecker:
    """Decides whether a venue is free for a date and time window."""

    def __init__(self, venues: VenueStore, bookings: BookingStore) -> None:
        self._venues = venues
        self._bookings = bookings

    def is_available(
        self,
        venue_id: UUID,
        day: date,
        window: TimeWindow,
        exclude_booking_id: UUID | None = None,
    ) -> bool:
        """True when ``window`` on ``day`` is clear of bookings and blocks.

        A block rejects any request it overlaps, not only requests it fully
        covers, so a block over part of the window still makes it unavailable.
        """
        venue = self._venues.get_venue(venue_id)
        if venue is None or not venue.is_bookable:
            return False

        for booking in self._bookings.find_active_on(venue_id, day, exclude_booking_id):
            if booking.window.overlaps(window):
                logger.debug(
                    "Venue %s on %s conflicts with booking %s",
                    venue_id,
                    day,
                    booking.id,
                )
                return False

        for block in self._venues.get_blocks(venue_id, day):
            if not block.is_available and block.window.overlaps(window):
                logger.debug("Venue %s on %s is blocked: %s", venue_id, day, block.reason)
                return False

        return True

    def is_available_for_range(
        self,
        venue_id: UUID,
        dates: DateRange,
        window: TimeWindow,
        exclude_booking_id: UUID | None = None,
    ) -> bool:
        """True when the window is free on every day of ``dates``."""
        return all(
            self.is_available(venue_id, day, window, exclude_booking_id)
            for day in dates.days()
        )
