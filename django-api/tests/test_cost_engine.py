"""Unit tests for CostEngine pricing.

Run with: pytest tests/test_cost_engine.py -v
"""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from conftest import chairs

from reservations.domain import EventType, LineItem, LineItemType, RateCard, TimeWindow, Venue
from reservations.domain.errors import InvalidTimeError
from reservations.domain.requests import CostRequest
from reservations.services.cost_engine import generate_quotation_number, is_weekend

WEDNESDAY = date(2030, 6, 5)
SATURDAY = date(2030, 6, 8)
TODAY = date(2030, 6, 3)


def cost_request(**overrides) -> CostRequest:
    fields = dict(
        venue_id=str(uuid.uuid4()),
        event_date=WEDNESDAY,
        start_time="10:00",
        end_time="13:00",
        guest_count=10,
        line_items=(chairs(10),),
    )
    fields.update(overrides)
    return CostRequest(**fields)


def venue_with_rate(rate: str) -> Venue:
    return Venue(
        id=uuid.uuid4(),
        name="Hall",
        capacity=100,
        location="Uptown",
        rate_card=RateCard(base_rate=Decimal(rate)),
    )


class TestCalculateCost:
    """Tests for CostEngine.calculate_cost."""

    def test_weekday_three_hours_with_chairs(self, cost_engine):
        cost = cost_engine.calculate_cost(cost_request(), venue_with_rate("5000"))

        assert cost.base_amount == Decimal("5000.00")
        assert cost.breakdown["chairs"] == Decimal("500.00")
        assert cost.subtotal == Decimal("5500.00")
        assert cost.discount_amount == Decimal("0.00")
        assert cost.tax_amount == Decimal("990.00")
        assert cost.total_amount == Decimal("6490.00")

    def test_total_identity_holds_with_discount(self, cost_engine):
        request = cost_request(
            line_items=(
                chairs(37),
                LineItem(LineItemType.OTHER, "Flowers", 3, Decimal("333.33")),
            ),
            guest_count=37,
            discount_percentage=Decimal("12.5"),
        )
        cost = cost_engine.calculate_cost(request, venue_with_rate("4999.99"))

        assert cost.total_amount == cost.subtotal - cost.discount_amount + cost.tax_amount
        assert cost.subtotal == cost.base_amount + sum(
            (item.total_price for item in cost.line_items), Decimal("0")
        )

    def test_is_deterministic(self, cost_engine):
        venue = venue_with_rate("5000")
        first = cost_engine.calculate_cost(cost_request(), venue)
        second = cost_engine.calculate_cost(cost_request(), venue)
        assert first == second

    def test_without_venue_uses_configured_hall_rate(self, cost_engine):
        cost = cost_engine.calculate_cost(cost_request())
        assert cost.base_amount == Decimal("5000.00")

    @pytest.mark.parametrize(
        "start, end, expected",
        [
            ("10:00", "14:00", Decimal("5000.00")),
            ("10:00", "14:30", Decimal("7500.00")),
            ("10:00", "18:00", Decimal("7500.00")),
            ("08:00", "18:00", Decimal("10000.00")),
        ],
    )
    def test_duration_tiers(self, cost_engine, start, end, expected):
        cost = cost_engine.calculate_cost(
            cost_request(start_time=start, end_time=end), venue_with_rate("5000")
        )
        assert cost.base_amount == expected

    def test_weekend_surcharge_applies_before_tiering(self, cost_engine):
        venue = venue_with_rate("5000")
        short = cost_engine.base_amount(venue, SATURDAY, TimeWindow.from_strings("10:00", "13:00"))
        full_day = cost_engine.base_amount(venue, SATURDAY, TimeWindow.from_strings("10:00", "17:00"))
        extended = cost_engine.base_amount(venue, SATURDAY, TimeWindow.from_strings("08:00", "18:00"))

        assert short == Decimal("7500.00")
        assert full_day == Decimal("11250.00")
        assert extended == Decimal("15000.00")

    def test_guest_dependent_items_scale_up_to_guest_count(self, cost_engine):
        request = cost_request(
            guest_count=40,
            line_items=(
                chairs(10),
                LineItem(LineItemType.CATERING, "Buffet", 1, Decimal("300")),
                LineItem(LineItemType.TABLE, "Tables", 5, Decimal("200")),
            ),
        )
        items = {item.item_type: item for item in cost_engine.calculate_cost(request).line_items}

        assert items[LineItemType.CHAIR].quantity == 40
        assert items[LineItemType.CATERING].quantity == 40
        assert items[LineItemType.TABLE].quantity == 5

    def test_fixed_rate_items_use_configured_price(self, cost_engine):
        request = cost_request(
            line_items=(LineItem(LineItemType.LIGHTING, "Stage lights", 2, Decimal("1")),),
        )
        item = cost_engine.calculate_cost(request).line_items[0]
        assert item.unit_price == Decimal("1000.00")
        assert item.total_price == Decimal("2000.00")

    def test_invalid_times_raise(self, cost_engine):
        with pytest.raises(InvalidTimeError):
            cost_engine.calculate_cost(cost_request(start_time="25:00"))


class TestValidate:
    """Tests for CostEngine.validate."""

    def test_valid_request_has_no_errors(self, cost_engine):
        assert cost_engine.validate(cost_request(), TODAY) == []

    def test_collects_every_violation(self, cost_engine):
        errors = cost_engine.validate(
            cost_request(
                venue_id="",
                guest_count=0,
                line_items=(),
                discount_percentage=Decimal("150"),
            ),
            TODAY,
        )
        assert errors == [
            "Venue ID is required",
            "Guest count must be greater than 0",
            "At least one line item is required",
            "Discount must be between 0 and 100 percent",
        ]

    def test_past_date_and_inverted_window(self, cost_engine):
        errors = cost_engine.validate(
            cost_request(event_date=date(2030, 6, 1), start_time="15:00", end_time="10:00"),
            TODAY,
        )
        assert "Event date cannot be in the past" in errors
        assert "End time must be after start time" in errors

    def test_malformed_times(self, cost_engine):
        errors = cost_engine.validate(cost_request(start_time="9am"), TODAY)
        assert errors == ["Start time and end time must use HH:MM format"]


class TestDeposit:
    def test_deposit_is_whole_units_and_balance_completes_total(self, cost_engine):
        deposit, balance = cost_engine.deposit_for(Decimal("6490.00"))
        assert deposit == Decimal("1298")
        assert balance == Decimal("5192.00")

    def test_deposit_rounds_half_up(self, cost_engine):
        deposit, balance = cost_engine.deposit_for(Decimal("102.50"))
        assert deposit == Decimal("21")
        assert deposit + balance == Decimal("102.50")


class TestDefaultLineItems:
    def test_wedding_package(self, cost_engine):
        items = cost_engine.default_line_items(EventType.WEDDING, 120)
        types = [item.item_type for item in items]
        assert types == [
            LineItemType.HALL_RENTAL,
            LineItemType.CHAIR,
            LineItemType.DECORATION,
            LineItemType.LIGHTING,
            LineItemType.CATERING,
            LineItemType.SECURITY,
            LineItemType.GENERATOR,
        ]

    def test_conference_tables_cover_guests(self, cost_engine):
        items = cost_engine.default_line_items(EventType.CONFERENCE, 13)
        tables = next(item for item in items if item.item_type == LineItemType.TABLE)
        assert tables.quantity == 3


def test_is_weekend():
    assert is_weekend(SATURDAY)
    assert not is_weekend(WEDNESDAY)


def test_quotation_number_format():
    number = generate_quotation_number()
    assert number.startswith("QUO")
    assert len(number) == 15
    assert number[3:11].isdigit()
    assert number[11:].isalnum() and number[11:].upper() == number[11:]
