from reservations.services.availability import AvailabilityChecker
from reservations.services.booking_service import BookingService
from reservations.services.cost_engine import CostEngine
from reservations.services.quotation_service import QuotationService
from reservations.services.refund_policy import calculate_refund

__all__ = [
    "AvailabilityChecker",
    "BookingService",
    "CostEngine",
    "QuotationService",
    "calculate_refund",
]
