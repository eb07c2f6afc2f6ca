"""Cancellation refund policy."""

from datetime import datetime
from decimal import Decimal

from reservations.domain.errors import ValidationFailedError
from reservations.domain.value_objects import round_whole

# (minimum hours before the event, share of the paid amount refunded)
REFUND_TIERS: tuple[tuple[int, Decimal], ...] = (
    (72, Decimal("0.9")),
    (24, Decimal("0.5")),
    (12, Decimal("0.25")),
)


def hours_until(event_start: datetime, now: datetime) -> Decimal:
    seconds = Decimal(str((event_start - now).total_seconds()))
    return seconds / Decimal(3600)


def calculate_refund(
    total_amount: Decimal,
    paid_amount: Decimal,
    event_start: datetime,
    now: datetime,
) -> Decimal:
    """Return the refund owed when cancelling ``hours_until(event_start)`` ahead.

    Pure: the result depends only on the arguments.

    Raises:
        ValidationFailedError: If either amount is negative.
    """
    errors = []
    if total_amount < 0:
        errors.append("Total amount cannot be negative")
    if paid_amount < 0:
        errors.append("Paid amount cannot be negative")
    if errors:
        raise ValidationFailedError(errors)

    hours = hours_until(event_start, now)
    if hours < 0:
        return Decimal("0")
    for threshold, share in REFUND_TIERS:
        if hours >= threshold:
            return round_whole(Decimal(paid_amount) * share)
    return Decimal("0")
