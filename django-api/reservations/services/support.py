"""Helpers shared by the lifecycle services."""

import hashlib
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Callable
from uuid import UUID

from reservations.domain.errors import InvalidIdError, ValidationFailedError
from reservations.domain.models import Pagination
from reservations.domain.value_objects import quantize_money
from reservations.stores.interfaces import EventPublisher, ReservationCache


Clock = Callable[[], datetime]

MAX_PAGE_SIZE = 100


def parse_id(value: str | UUID, kind: str) -> UUID:
    """Parse an identifier.

    Raises:
        InvalidIdError: If the value is not a valid UUID.
    """
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError) as exc:
        raise InvalidIdError(kind) from exc


def check_pagination(pagination: Pagination, sortable: frozenset[str]) -> None:
    errors = []
    if pagination.page < 1:
        errors.append("Page must be at least 1")
    if not 1 <= pagination.limit <= MAX_PAGE_SIZE:
        errors.append(f"Limit must be between 1 and {MAX_PAGE_SIZE}")
    if pagination.sort_by not in sortable:
        errors.append(f"Cannot sort by {pagination.sort_by!r}")
    if errors:
        raise ValidationFailedError(errors)


def fingerprint(*parts: object) -> str:
    """Stable digest of dataclass arguments, used in cache keys."""
    normalized = []
    for part in parts:
        values = asdict(part) if hasattr(part, "__dataclass_fields__") else part
        normalized.append(repr(sorted(values.items())) if isinstance(values, dict) else repr(values))
    return hashlib.sha1("|".join(normalized).encode("utf-8")).hexdigest()


def percentage(part: int, whole: int) -> Decimal:
    if whole <= 0:
        return Decimal("0.00")
    return quantize_money(Decimal(part) * 100 / Decimal(whole))


class ChangeNotifier:
    """Invalidates cache entries and publishes events after a mutation."""

    def __init__(
        self,
        cache: ReservationCache,
        publisher: EventPublisher,
        namespaces: tuple[str, ...],
    ) -> None:
        self._cache = cache
        self._publisher = publisher
        self._namespaces = namespaces

    def changed(self, entity_key: str, topic: str, payload: dict) -> None:
        self._cache.delete(entity_key)
        for namespace in self._namespaces:
            self._cache.invalidate_namespace(namespace)
        self._publisher.publish(topic, payload)
