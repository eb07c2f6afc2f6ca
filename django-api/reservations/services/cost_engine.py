"""Dynamic pricing for venue events.

calculate_cost is deterministic: identical inputs always produce identical
Decimal results. Amounts are quantized to cents before the total is summed,
so total == subtotal - discount + tax holds exactly.
"""

import math
import secrets
import string
import time as time_module
from dataclasses import replace
from datetime import date
from decimal import Decimal

from reservations.conf import PricingConfig
from reservations.domain.errors import InvalidTimeError
from reservations.domain.models import (
    CostBreakdown,
    EventType,
    LineItem,
    LineItemType,
    Venue,
)
from reservations.domain.requests import CostRequest
from reservations.domain.validation import validate_cost_request
from reservations.domain.value_objects import TimeWindow, quantize_money, round_whole

WEEKEND_MULTIPLIER = Decimal("1.5")
HALF_DAY_HOURS = Decimal(4)
FULL_DAY_HOURS = Decimal(8)
FULL_DAY_MULTIPLIER = Decimal("1.5")
EXTENDED_DAY_MULTIPLIER = Decimal(2)

GUEST_DEPENDENT_ITEMS = frozenset(
    {LineItemType.CHAIR, LineItemType.CATERING, LineItemType.CLEANING}
)

BREAKDOWN_KEYS: dict[LineItemType, str] = {
    LineItemType.HALL_RENTAL: "hall_rental",
    LineItemType.CHAIR: "chairs",
    LineItemType.TABLE: "tables",
    LineItemType.DECORATION: "decoration",
    LineItemType.LIGHTING: "lighting",
    LineItemType.AV_EQUIPMENT: "av_equipment",
    LineItemType.CATERING: "catering",
    LineItemType.SECURITY: "security",
    LineItemType.GENERATOR: "generator",
    LineItemType.CLEANING: "cleaning",
    LineItemType.PARKING: "parking",
    LineItemType.OTHER: "other",
}

QUOTATION_PREFIX = "QUO"
_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits

CONFERENCE_TABLE_PRICE = Decimal(200)
GUESTS_PER_TABLE = 6
SECURITY_GUEST_THRESHOLD = 50
GENERATOR_GUEST_THRESHOLD = 100


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def _window(start: str, end: str) -> TimeWindow:
    try:
        return TimeWindow.from_strings(start, end)
    except ValueError as exc:
        raise InvalidTimeError(str(exc)) from exc


class CostEngine:
    """Prices events from a venue's rate card and the configured item rates."""

    def __init__(self, pricing: PricingConfig) -> None:
        self._pricing = pricing
        self._fixed_rates: dict[LineItemType, Decimal] = {
            LineItemType.CHAIR: pricing.chair_rate,
            LineItemType.DECORATION: pricing.decoration_rate,
            LineItemType.LIGHTING: pricing.lighting_rate,
            LineItemType.AV_EQUIPMENT: pricing.av_rate,
            LineItemType.CATERING: pricing.catering_rate_per_person,
            LineItemType.SECURITY: pricing.security_rate,
            LineItemType.GENERATOR: pricing.generator_rate,
        }

    @property
    def pricing(self) -> PricingConfig:
        return self._pricing

    def validate(self, request: CostRequest, today: date) -> list[str]:
        return validate_cost_request(request, today)

    def base_amount(self, venue: Venue | None, event_date: date, window: TimeWindow) -> Decimal:
        rate = venue.rate_card.base_rate if venue is not None else self._pricing.base_hall_rate
        if is_weekend(event_date):
            rate = rate * WEEKEND_MULTIPLIER
        duration = window.duration_hours
        if duration <= HALF_DAY_HOURS:
            return quantize_money(rate)
        if duration <= FULL_DAY_HOURS:
            return quantize_money(rate * FULL_DAY_MULTIPLIER)
        return quantize_money(rate * EXTENDED_DAY_MULTIPLIER)

    def price_line_item(self, item: LineItem, guest_count: int) -> LineItem:
        item_type = LineItemType(item.item_type)
        quantity = item.quantity
        if item_type in GUEST_DEPENDENT_ITEMS:
            quantity = max(quantity, guest_count)
        unit_price = self._fixed_rates.get(item_type, Decimal(item.unit_price))
        return replace(
            item,
            item_type=item_type,
            quantity=quantity,
            unit_price=quantize_money(unit_price),
        )

    def calculate_cost(self, request: CostRequest, venue: Venue | None = None) -> CostBreakdown:
        """Price a proposed event.

        ``venue`` supplies the base rate; without it the configured default
        hall rate applies.

        Raises:
            InvalidTimeError: If start/end are not HH:MM or do not form a window.
        """
        window = _window(request.start_time, request.end_time)
        base_amount = self.base_amount(venue, request.event_date, window)

        items = tuple(
            self.price_line_item(item, request.guest_count)
            for item in request.line_items
        )
        subtotal = base_amount + sum((item.total_price for item in items), Decimal("0"))
        subtotal = quantize_money(subtotal)

        discount_pct = Decimal(request.discount_percentage or 0)
        discount_amount = quantize_money(subtotal * discount_pct / 100)
        tax_amount = quantize_money(
            (subtotal - discount_amount) * self._pricing.tax_percentage / 100
        )
        total_amount = subtotal - discount_amount + tax_amount

        return CostBreakdown(
            base_amount=base_amount,
            line_items=items,
            subtotal=subtotal,
            discount_amount=discount_amount,
            tax_amount=tax_amount,
            total_amount=total_amount,
            breakdown=self._breakdown(items),
        )

    def _breakdown(self, items: tuple[LineItem, ...]) -> dict[str, Decimal]:
        totals = {key: Decimal("0.00") for key in BREAKDOWN_KEYS.values()}
        for item in items:
            key = BREAKDOWN_KEYS.get(item.item_type, "other")
            totals[key] += item.total_price
        return totals

    def deposit_for(self, total_amount: Decimal) -> tuple[Decimal, Decimal]:
        """Split a total into (deposit, balance)."""
        deposit = round_whole(total_amount * self._pricing.deposit_percentage / 100)
        return deposit, total_amount - deposit

    def default_line_items(self, event_type: EventType, guest_count: int) -> list[LineItem]:
        """Starter line items suggested for a new quotation."""
        pricing = self._pricing
        items = [
            LineItem(LineItemType.HALL_RENTAL, "Hall Rental", 1, pricing.base_hall_rate),
        ]
        if guest_count > 0:
            items.append(LineItem(LineItemType.CHAIR, "Chairs", guest_count, pricing.chair_rate))

        if event_type == EventType.WEDDING:
            items += [
                LineItem(
                    LineItemType.DECORATION,
                    "Wedding Decoration Package",
                    1,
                    pricing.decoration_rate * 2,
                ),
                LineItem(
                    LineItemType.LIGHTING,
                    "Wedding Lighting",
                    1,
                    pricing.lighting_rate * Decimal("1.5"),
                ),
                LineItem(
                    LineItemType.CATERING,
                    "Wedding Catering",
                    guest_count,
                    pricing.catering_rate_per_person * Decimal("1.2"),
                ),
            ]
        elif event_type in (EventType.CORPORATE, EventType.CONFERENCE, EventType.SEMINAR):
            items += [
                LineItem(LineItemType.AV_EQUIPMENT, "AV Equipment Package", 1, pricing.av_rate),
                LineItem(
                    LineItemType.TABLE,
                    "Conference Tables",
                    max(1, math.ceil(guest_count / GUESTS_PER_TABLE)),
                    CONFERENCE_TABLE_PRICE,
                ),
            ]
        elif event_type in (EventType.BIRTHDAY, EventType.PARTY):
            items += [
                LineItem(LineItemType.DECORATION, "Party Decoration", 1, pricing.decoration_rate),
                LineItem(
                    LineItemType.CATERING,
                    "Party Catering",
                    guest_count,
                    pricing.catering_rate_per_person,
                ),
            ]

        if guest_count > SECURITY_GUEST_THRESHOLD:
            items.append(LineItem(LineItemType.SECURITY, "Security", 1, pricing.security_rate))
        if guest_count > GENERATOR_GUEST_THRESHOLD:
            items.append(
                LineItem(LineItemType.GENERATOR, "Backup Generator", 1, pricing.generator_rate)
            )
        return items


def generate_quotation_number() -> str:
    """QUO + last 8 digits of the epoch-millisecond clock + 4 random characters."""
    timestamp = str(time_module.time_ns() // 1_000_000)[-8:]
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(4))
    return f"{QUOTATION_PREFIX}{timestamp}{suffix}"
