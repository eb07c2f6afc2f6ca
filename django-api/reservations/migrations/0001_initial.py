import uuid

import django.db.models.deletion
from django.db import migrations, models

EVENT_TYPES = [
    ("WEDDING", "Wedding"),
    ("CORPORATE", "Corporate"),
    ("BIRTHDAY", "Birthday"),
    ("ANNIVERSARY", "Anniversary"),
    ("CONFERENCE", "Conference"),
    ("SEMINAR", "Seminar"),
    ("PARTY", "Party"),
    ("MEETING", "Meeting"),
    ("OTHER", "Other"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Venue",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("capacity", models.PositiveIntegerField()),
                ("location", models.CharField(max_length=255)),
                ("base_rate", models.DecimalField(decimal_places=2, max_digits=12)),
                ("hourly_rate", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("daily_rate", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("weekend_rate", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("is_available", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Quotation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("customer_id", models.CharField(max_length=100)),
                ("quotation_number", models.CharField(max_length=32, unique=True)),
                ("event_name", models.CharField(max_length=200)),
                ("event_type", models.CharField(choices=EVENT_TYPES, max_length=20)),
                ("event_date", models.DateField()),
                ("start_time", models.TimeField()),
                ("end_time", models.TimeField()),
                ("guest_count", models.PositiveIntegerField()),
                ("discount_percentage", models.DecimalField(decimal_places=2, default=0, max_digits=5)),
                ("base_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("subtotal", models.DecimalField(decimal_places=2, max_digits=12)),
                ("discount", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("tax_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("valid_until", models.DateTimeField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("DRAFT", "Draft"),
                            ("SENT", "Sent"),
                            ("ACCEPTED", "Accepted"),
                            ("REJECTED", "Rejected"),
                            ("EXPIRED", "Expired"),
                        ],
                        default="DRAFT",
                        max_length=20,
                    ),
                ),
                ("is_accepted", models.BooleanField(default=False)),
                ("is_expired", models.BooleanField(default=False)),
                ("accepted_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField()),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="quotations",
                        to="reservations.venue",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["venue", "event_date"], name="quotation_venue_date_idx"),
                    models.Index(fields=["customer_id"], name="quotation_customer_idx"),
                    models.Index(fields=["status"], name="quotation_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("customer_id", models.CharField(max_length=100)),
                ("event_name", models.CharField(max_length=200)),
                ("event_type", models.CharField(choices=EVENT_TYPES, max_length=20)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("start_time", models.TimeField()),
                ("end_time", models.TimeField()),
                ("guest_count", models.PositiveIntegerField()),
                ("special_requests", models.TextField(blank=True, null=True)),
                ("base_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("additional_charges", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("discount_percentage", models.DecimalField(decimal_places=2, default=0, max_digits=5)),
                ("discount", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("tax_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("deposit_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("balance_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("CONFIRMED", "Confirmed"),
                            ("CHECKED_IN", "Checked In"),
                            ("COMPLETED", "Completed"),
                            ("CANCELLED", "Cancelled"),
                            ("NO_SHOW", "No Show"),
                        ],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("PROCESSING", "Processing"),
                            ("COMPLETED", "Completed"),
                            ("FAILED", "Failed"),
                            ("REFUNDED", "Refunded"),
                            ("PARTIALLY_REFUNDED", "Partially Refunded"),
                        ],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                ("is_confirmed", models.BooleanField(default=False)),
                ("is_cancelled", models.BooleanField(default=False)),
                ("cancellation_reason", models.TextField(blank=True, null=True)),
                ("refund_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                ("checked_out_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField()),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="reservations.venue",
                    ),
                ),
                (
                    "quotation",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="booking",
                        to="reservations.quotation",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["venue", "start_date", "end_date"], name="booking_venue_dates_idx"),
                    models.Index(fields=["customer_id"], name="booking_customer_idx"),
                    models.Index(fields=["status"], name="booking_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AvailabilityBlock",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("date", models.DateField()),
                ("start_time", models.TimeField()),
                ("end_time", models.TimeField()),
                ("is_available", models.BooleanField(default=False)),
                ("reason", models.CharField(blank=True, max_length=255, null=True)),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="availability_blocks",
                        to="reservations.venue",
                    ),
                ),
            ],
            options={
                "ordering": ["date", "start_time"],
                "indexes": [
                    models.Index(fields=["venue", "date"], name="block_venue_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LineItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "item_type",
                    models.CharField(
                        choices=[
                            ("HALL_RENTAL", "Hall Rental"),
                            ("CHAIR", "Chair"),
                            ("TABLE", "Table"),
                            ("DECORATION", "Decoration"),
                            ("LIGHTING", "Lighting"),
                            ("AV_EQUIPMENT", "Av Equipment"),
                            ("CATERING", "Catering"),
                            ("SECURITY", "Security"),
                            ("GENERATOR", "Generator"),
                            ("CLEANING", "Cleaning"),
                            ("PARKING", "Parking"),
                            ("OTHER", "Other"),
                        ],
                        max_length=20,
                    ),
                ),
                ("item_name", models.CharField(max_length=100)),
                ("description", models.CharField(blank=True, max_length=200, null=True)),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("total_price", models.DecimalField(decimal_places=2, max_digits=14)),
                ("position", models.PositiveIntegerField(default=0)),
                (
                    "booking",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="line_items",
                        to="reservations.booking",
                    ),
                ),
                (
                    "quotation",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="line_items",
                        to="reservations.quotation",
                    ),
                ),
            ],
            options={
                "ordering": ["position"],
                "constraints": [
                    models.CheckConstraint(
                        condition=(
                            models.Q(("booking__isnull", True), ("quotation__isnull", False))
                            | models.Q(("booking__isnull", False), ("quotation__isnull", True))
                        ),
                        name="line_item_single_owner",
                    ),
                ],
            },
        ),
    ]
