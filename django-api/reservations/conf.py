"""Settings for the reservations app.

Values come from the ``RESERVATIONS`` dict in Django settings; anything not
set there falls back to DEFAULTS.
"""

from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

DEFAULTS = {
    "BASE_HALL_RATE": 5000,
    "CHAIR_RATE": 50,
    "DECORATION_RATE": 2000,
    "LIGHTING_RATE": 1000,
    "AV_RATE": 3000,
    "CATERING_RATE_PER_PERSON": 300,
    "SECURITY_RATE": 1000,
    "GENERATOR_RATE": 2000,
    "TAX_PERCENTAGE": 18,
    "DEPOSIT_PERCENTAGE": 20,
    "QUOTATION_VALIDITY_DAYS": 7,
    "CACHE_TTL": 1800,
    "RETRY_ATTEMPTS": 3,
    "RETRY_DELAY": 0.2,
}


@dataclass(frozen=True)
class PricingConfig:
    base_hall_rate: Decimal
    chair_rate: Decimal
    decoration_rate: Decimal
    lighting_rate: Decimal
    av_rate: Decimal
    catering_rate_per_person: Decimal
    security_rate: Decimal
    generator_rate: Decimal
    tax_percentage: Decimal
    deposit_percentage: Decimal


@dataclass(frozen=True)
class ReservationSettings:
    pricing: PricingConfig
    quotation_validity_days: int
    cache_ttl: int
    retry_attempts: int
    retry_delay: float


def _decimal(value) -> Decimal:
    return Decimal(str(value))


def reservation_settings() -> ReservationSettings:
    values = {**DEFAULTS, **getattr(settings, "RESERVATIONS", {})}
    pricing = PricingConfig(
        base_hall_rate=_decimal(values["BASE_HALL_RATE"]),
        chair_rate=_decimal(values["CHAIR_RATE"]),
        decoration_rate=_decimal(values["DECORATION_RATE"]),
        lighting_rate=_decimal(values["LIGHTING_RATE"]),
        av_rate=_decimal(values["AV_RATE"]),
        catering_rate_per_person=_decimal(values["CATERING_RATE_PER_PERSON"]),
        security_rate=_decimal(values["SECURITY_RATE"]),
        generator_rate=_decimal(values["GENERATOR_RATE"]),
        tax_percentage=_decimal(values["TAX_PERCENTAGE"]),
        deposit_percentage=_decimal(values["DEPOSIT_PERCENTAGE"]),
    )
    return ReservationSettings(
        pricing=pricing,
        quotation_validity_days=int(values["QUOTATION_VALIDITY_DAYS"]),
        cache_ttl=int(values["CACHE_TTL"]),
        retry_attempts=int(values["RETRY_ATTEMPTS"]),
        retry_delay=float(values["RETRY_DELAY"]),
    )
