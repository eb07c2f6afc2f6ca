"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models
from django.db.models import Q

from reservations.domain.models import (
    BookingStatus,
    EventType,
    LineItemType,
    PaymentStatus,
    QuotationStatus,
)


def _choices(enum_cls) -> list[tuple[str, str]]:
    return [(member.value, member.value.replace("_", " ").title()) for member in enum_cls]


class Venue(models.Model):
    """Persistence model for venues. Managed through the admin."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    capacity = models.PositiveIntegerField()
    location = models.CharField(max_length=255)
    base_rate = models.DecimalField(max_digits=12, decimal_places=2)
    hourly_rate = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    daily_rate = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    weekend_rate = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    is_active = models.BooleanField(default=True)
    is_available = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class AvailabilityBlock(models.Model):
    """Administrative override marking a venue unavailable for a window."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    venue = models.ForeignKey(
        Venue, on_delete=models.CASCADE, related_name="availability_blocks"
    )
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_available = models.BooleanField(default=False)
    reason = models.CharField(max_length=255, blank=True, null=True)

    class Meta:
        ordering = ["date", "start_time"]
        indexes = [
            models.Index(fields=["venue", "date"], name="block_venue_date_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.venue.name} - {self.date} {self.start_time}-{self.end_time}"


class Quotation(models.Model):
    """Persistence model for quotations."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    venue = models.ForeignKey(Venue, on_delete=models.PROTECT, related_name="quotations")
    customer_id = models.CharField(max_length=100)
    quotation_number = models.CharField(max_length=32, unique=True)
    event_name = models.CharField(max_length=200)
    event_type = models.CharField(max_length=20, choices=_choices(EventType))
    event_date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    guest_count = models.PositiveIntegerField()
    discount_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    base_amount = models.DecimalField(max_digits=12, decimal_places=2)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    valid_until = models.DateTimeField()
    status = models.CharField(
        max_length=20, choices=_choices(QuotationStatus), default=QuotationStatus.DRAFT.value
    )
    is_accepted = models.BooleanField(default=False)
    is_expired = models.BooleanField(default=False)
    accepted_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["venue", "event_date"], name="quotation_venue_date_idx"),
            models.Index(fields=["customer_id"], name="quotation_customer_idx"),
            models.Index(fields=["status"], name="quotation_status_idx"),
        ]

    def __str__(self) -> str:
        return self.quotation_number


class Booking(models.Model):
    """Persistence model for bookings. Never hard-deleted."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    venue = models.ForeignKey(Venue, on_delete=models.PROTECT, related_name="bookings")
    quotation = models.OneToOneField(
        Quotation,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="booking",
    )
    customer_id = models.CharField(max_length=100)
    event_name = models.CharField(max_length=200)
    event_type = models.CharField(max_length=20, choices=_choices(EventType))
    start_date = models.DateField()
    end_date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    guest_count = models.PositiveIntegerField()
    special_requests = models.TextField(blank=True, null=True)
    base_amount = models.DecimalField(max_digits=12, decimal_places=2)
    additional_charges = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    discount_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    deposit_amount = models.DecimalField(max_digits=12, decimal_places=2)
    balance_amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(
        max_length=20, choices=_choices(BookingStatus), default=BookingStatus.PENDING.value
    )
    payment_status = models.CharField(
        max_length=20, choices=_choices(PaymentStatus), default=PaymentStatus.PENDING.value
    )
    is_confirmed = models.BooleanField(default=False)
    is_cancelled = models.BooleanField(default=False)
    cancellation_reason = models.TextField(blank=True, null=True)
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    checked_out_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["venue", "start_date", "end_date"], name="booking_venue_dates_idx"),
            models.Index(fields=["customer_id"], name="booking_customer_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.event_name} ({self.start_date})"


class LineItem(models.Model):
    """A priced add-on owned by exactly one quotation or one booking."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    quotation = models.ForeignKey(
        Quotation, on_delete=models.CASCADE, null=True, blank=True, related_name="line_items"
    )
    booking = models.ForeignKey(
        Booking, on_delete=models.CASCADE, null=True, blank=True, related_name="line_items"
    )
    item_type = models.CharField(max_length=20, choices=_choices(LineItemType))
    item_name = models.CharField(max_length=100)
    description = models.CharField(max_length=200, blank=True, null=True)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    total_price = models.DecimalField(max_digits=14, decimal_places=2)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(quotation__isnull=False, booking__isnull=True)
                    | Q(quotation__isnull=True, booking__isnull=False)
                ),
                name="line_item_single_owner",
            ),
        ]

    def save(self, *args, **kwargs):
        self.total_price = self.unit_price * self.quantity
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.item_name} x{self.quantity}"
