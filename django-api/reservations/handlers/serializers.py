"""Serializers for transforming API input into service requests and domain
models into API responses.

Input serializers only check wire format (types, dates, enums). Business
rules are enforced by the services, which report every violation at once.
"""

from decimal import Decimal

from rest_framework import serializers

from reservations.domain.errors import ValidationFailedError
from reservations.domain.models import (
    BookingFilters,
    BookingStatus,
    EventType,
    LineItem,
    LineItemType,
    Pagination,
    PaymentStatus,
    QuotationFilters,
    QuotationStatus,
)
from reservations.domain.requests import (
    CostRequest,
    CreateBookingRequest,
    CreateQuotationRequest,
    UpdateBookingRequest,
    UpdateQuotationRequest,
)


def _values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


def _flatten(errors, prefix: str = "") -> list[str]:
    messages = []
    if isinstance(errors, dict):
        for field, detail in errors.items():
            label = field if field != "non_field_errors" else ""
            messages.extend(_flatten(detail, f"{prefix}{label}: " if label else prefix))
    elif isinstance(errors, list):
        for index, detail in enumerate(errors, start=1):
            if isinstance(detail, dict):
                messages.extend(_flatten(detail, f"{prefix}item {index}: "))
            else:
                messages.extend(_flatten(detail, prefix))
    else:
        messages.append(f"{prefix}{errors}")
    return messages


def parse(serializer_cls, data, **kwargs) -> dict:
    """Validate ``data`` against ``serializer_cls``.

    Raises:
        ValidationFailedError: With one message per invalid field.
    """
    serializer = serializer_cls(data=data, **kwargs)
    if not serializer.is_valid():
        raise ValidationFailedError(_flatten(serializer.errors))
    return serializer.validated_data


# Input


class LineItemInputSerializer(serializers.Serializer):
    item_type = serializers.ChoiceField(choices=_values(LineItemType))
    item_name = serializers.CharField(allow_blank=True)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2)

    def to_line_item(self, data: dict) -> LineItem:
        return LineItem(
            item_type=LineItemType(data["item_type"]),
            item_name=data["item_name"],
            description=data.get("description"),
            quantity=data["quantity"],
            unit_price=data["unit_price"],
        )


def _line_items(data: dict) -> tuple[LineItem, ...]:
    converter = LineItemInputSerializer()
    return tuple(converter.to_line_item(item) for item in data.get("line_items") or ())


class CostRequestSerializer(serializers.Serializer):
    venue_id = serializers.CharField(required=False, allow_blank=True)
    event_date = serializers.DateField(required=False, allow_null=True)
    start_time = serializers.CharField(required=False, allow_blank=True)
    end_time = serializers.CharField(required=False, allow_blank=True)
    guest_count = serializers.IntegerField(required=False, default=0)
    line_items = LineItemInputSerializer(many=True, required=False)
    discount_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, default=Decimal("0")
    )

    @staticmethod
    def to_request(data: dict) -> CostRequest:
        return CostRequest(
            venue_id=data.get("venue_id"),
            event_date=data.get("event_date"),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            guest_count=data["guest_count"],
            line_items=_line_items(data),
            discount_percentage=data["discount_percentage"],
        )


class CreateBookingSerializer(serializers.Serializer):
    venue_id = serializers.CharField(allow_blank=True)
    customer_id = serializers.CharField(allow_blank=True)
    event_name = serializers.CharField(allow_blank=True)
    event_type = serializers.CharField(allow_blank=True)
    start_date = serializers.DateField(required=False, allow_null=True)
    end_date = serializers.DateField(required=False, allow_null=True)
    start_time = serializers.CharField(required=False, allow_blank=True)
    end_time = serializers.CharField(required=False, allow_blank=True)
    guest_count = serializers.IntegerField(required=False, default=0)
    special_requests = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    line_items = LineItemInputSerializer(many=True, required=False)
    discount_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, default=Decimal("0")
    )

    @staticmethod
    def to_request(data: dict) -> CreateBookingRequest:
        return CreateBookingRequest(
            venue_id=data["venue_id"],
            customer_id=data["customer_id"],
            event_name=data["event_name"],
            event_type=data["event_type"],
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            guest_count=data["guest_count"],
            special_requests=data.get("special_requests"),
            line_items=_line_items(data),
            discount_percentage=data["discount_percentage"],
        )


class UpdateBookingSerializer(serializers.Serializer):
    event_name = serializers.CharField(required=False, allow_blank=True)
    event_type = serializers.CharField(required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    start_time = serializers.CharField(required=False)
    end_time = serializers.CharField(required=False)
    guest_count = serializers.IntegerField(required=False)
    special_requests = serializers.CharField(required=False, allow_blank=True)

    @staticmethod
    def to_request(data: dict) -> UpdateBookingRequest:
        return UpdateBookingRequest(**data)


class CancelBookingSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class CreateQuotationSerializer(serializers.Serializer):
    venue_id = serializers.CharField(allow_blank=True)
    customer_id = serializers.CharField(allow_blank=True)
    event_name = serializers.CharField(allow_blank=True)
    event_type = serializers.CharField(allow_blank=True)
    event_date = serializers.DateField(required=False, allow_null=True)
    start_time = serializers.CharField(required=False, allow_blank=True)
    end_time = serializers.CharField(required=False, allow_blank=True)
    guest_count = serializers.IntegerField(required=False, default=0)
    line_items = LineItemInputSerializer(many=True, required=False)
    discount_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, default=Decimal("0")
    )
    valid_until = serializers.DateTimeField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)

    @staticmethod
    def to_request(data: dict) -> CreateQuotationRequest:
        return CreateQuotationRequest(
            venue_id=data["venue_id"],
            customer_id=data["customer_id"],
            event_name=data["event_name"],
            event_type=data["event_type"],
            event_date=data.get("event_date"),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            guest_count=data["guest_count"],
            line_items=_line_items(data),
            discount_percentage=data["discount_percentage"],
            valid_until=data.get("valid_until"),
            notes=data.get("notes"),
        )


class UpdateQuotationSerializer(serializers.Serializer):
    event_name = serializers.CharField(required=False, allow_blank=True)
    event_type = serializers.CharField(required=False)
    event_date = serializers.DateField(required=False)
    start_time = serializers.CharField(required=False)
    end_time = serializers.CharField(required=False)
    guest_count = serializers.IntegerField(required=False)
    discount_percentage = serializers.DecimalField(max_digits=5, decimal_places=2, required=False)
    valid_until = serializers.DateTimeField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    line_items = LineItemInputSerializer(many=True, required=False)

    @staticmethod
    def to_request(data: dict) -> UpdateQuotationRequest:
        fields = {name: value for name, value in data.items() if name != "line_items"}
        line_items = _line_items(data) if "line_items" in data else None
        return UpdateQuotationRequest(**fields, line_items=line_items)


class AvailabilityQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
    end_date = serializers.DateField(required=False)
    start_time = serializers.CharField()
    end_time = serializers.CharField()


class PaginationSerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, default=1)
    limit = serializers.IntegerField(required=False, default=10)
    sort_by = serializers.CharField(required=False, default="created_at")
    order = serializers.ChoiceField(choices=["asc", "desc"], required=False, default="desc")

    @staticmethod
    def to_pagination(data: dict) -> Pagination:
        return Pagination(
            page=data["page"],
            limit=data["limit"],
            sort_by=data["sort_by"],
            descending=data["order"] == "desc",
        )


class BookingFilterSerializer(serializers.Serializer):
    venue_id = serializers.UUIDField(required=False)
    customer_id = serializers.CharField(required=False)
    event_type = serializers.ChoiceField(choices=_values(EventType), required=False)
    status = serializers.ChoiceField(choices=_values(BookingStatus), required=False)
    payment_status = serializers.ChoiceField(choices=_values(PaymentStatus), required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    is_confirmed = serializers.BooleanField(required=False, allow_null=True, default=None)
    is_cancelled = serializers.BooleanField(required=False, allow_null=True, default=None)

    @staticmethod
    def to_filters(data: dict) -> BookingFilters:
        values = dict(data)
        for name, enum_cls in (
            ("event_type", EventType),
            ("status", BookingStatus),
            ("payment_status", PaymentStatus),
        ):
            if values.get(name) is not None:
                values[name] = enum_cls(values[name])
        return BookingFilters(**values)


class QuotationFilterSerializer(serializers.Serializer):
    venue_id = serializers.UUIDField(required=False)
    customer_id = serializers.CharField(required=False)
    event_type = serializers.ChoiceField(choices=_values(EventType), required=False)
    status = serializers.ChoiceField(choices=_values(QuotationStatus), required=False)
    is_accepted = serializers.BooleanField(required=False, allow_null=True, default=None)
    is_expired = serializers.BooleanField(required=False, allow_null=True, default=None)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    @staticmethod
    def to_filters(data: dict) -> QuotationFilters:
        values = dict(data)
        for name, enum_cls in (("event_type", EventType), ("status", QuotationStatus)):
            if values.get(name) is not None:
                values[name] = enum_cls(values[name])
        return QuotationFilters(**values)


# Output


class EnumValueField(serializers.Field):
    def to_representation(self, value):
        return getattr(value, "value", value)


class LineItemSerializer(serializers.Serializer):
    """Serializer for LineItem domain model."""

    id = serializers.UUIDField()
    item_type = EnumValueField()
    item_name = serializers.CharField()
    description = serializers.CharField(allow_null=True)
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_price = serializers.DecimalField(max_digits=14, decimal_places=2)


class PricedLineItemSerializer(LineItemSerializer):
    """Line items of an unsaved cost calculation have no id."""

    id = None


class BookingSerializer(serializers.Serializer):
    """Serializer for Booking domain model."""

    id = serializers.UUIDField()
    venue_id = serializers.UUIDField()
    customer_id = serializers.CharField()
    quotation_id = serializers.UUIDField(allow_null=True)
    event_name = serializers.CharField()
    event_type = EnumValueField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    start_time = serializers.TimeField(format="%H:%M")
    end_time = serializers.TimeField(format="%H:%M")
    guest_count = serializers.IntegerField()
    special_requests = serializers.CharField(allow_null=True)
    base_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    additional_charges = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount_percentage = serializers.DecimalField(max_digits=5, decimal_places=2)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2)
    tax_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    deposit_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    balance_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    status = EnumValueField()
    payment_status = EnumValueField()
    is_confirmed = serializers.BooleanField()
    is_cancelled = serializers.BooleanField()
    cancellation_reason = serializers.CharField(allow_null=True)
    refund_amount = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    confirmed_at = serializers.DateTimeField(allow_null=True)
    checked_in_at = serializers.DateTimeField(allow_null=True)
    checked_out_at = serializers.DateTimeField(allow_null=True)
    cancelled_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()
    line_items = LineItemSerializer(many=True)


class QuotationSerializer(serializers.Serializer):
    """Serializer for Quotation domain model."""

    id = serializers.UUIDField()
    venue_id = serializers.UUIDField()
    customer_id = serializers.CharField()
    quotation_number = serializers.CharField()
    event_name = serializers.CharField()
    event_type = EnumValueField()
    event_date = serializers.DateField()
    start_time = serializers.TimeField(format="%H:%M")
    end_time = serializers.TimeField(format="%H:%M")
    guest_count = serializers.IntegerField()
    discount_percentage = serializers.DecimalField(max_digits=5, decimal_places=2)
    base_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2)
    tax_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    valid_until = serializers.DateTimeField()
    status = EnumValueField()
    is_accepted = serializers.BooleanField()
    is_expired = serializers.BooleanField()
    accepted_at = serializers.DateTimeField(allow_null=True)
    notes = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()
    line_items = LineItemSerializer(many=True)


class CostBreakdownSerializer(serializers.Serializer):
    base_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    additional_charges = serializers.DecimalField(max_digits=12, decimal_places=2)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    tax_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    line_items = PricedLineItemSerializer(many=True)
    breakdown = serializers.DictField(
        child=serializers.DecimalField(max_digits=12, decimal_places=2)
    )


class BookingStatisticsSerializer(serializers.Serializer):
    total_bookings = serializers.IntegerField()
    confirmed_bookings = serializers.IntegerField()
    completed_bookings = serializers.IntegerField()
    cancelled_bookings = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    average_booking_value = serializers.DecimalField(max_digits=14, decimal_places=2)
    confirmation_rate = serializers.DecimalField(max_digits=5, decimal_places=2)
    completion_rate = serializers.DecimalField(max_digits=5, decimal_places=2)
    cancellation_rate = serializers.DecimalField(max_digits=5, decimal_places=2)


class QuotationStatisticsSerializer(serializers.Serializer):
    total_quotations = serializers.IntegerField()
    draft_quotations = serializers.IntegerField()
    sent_quotations = serializers.IntegerField()
    accepted_quotations = serializers.IntegerField()
    rejected_quotations = serializers.IntegerField()
    expired_quotations = serializers.IntegerField()
    total_value = serializers.DecimalField(max_digits=14, decimal_places=2)
    average_value = serializers.DecimalField(max_digits=14, decimal_places=2)
    acceptance_rate = serializers.DecimalField(max_digits=5, decimal_places=2)
    rejection_rate = serializers.DecimalField(max_digits=5, decimal_places=2)
    expiration_rate = serializers.DecimalField(max_digits=5, decimal_places=2)
