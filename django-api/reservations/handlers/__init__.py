from reservations.handlers.views import (
    BookingCancelView,
    BookingDetailView,
    BookingListView,
    BookingStatisticsView,
    BookingTransitionView,
    CostCalculationView,
    QuotationAcceptView,
    QuotationByNumberView,
    QuotationDetailView,
    QuotationListView,
    QuotationStatisticsView,
    QuotationTransitionView,
    VenueAvailabilityView,
)

__all__ = [
    "BookingCancelView",
    "BookingDetailView",
    "BookingListView",
    "BookingStatisticsView",
    "BookingTransitionView",
    "CostCalculationView",
    "QuotationAcceptView",
    "QuotationByNumberView",
    "QuotationDetailView",
    "QuotationListView",
    "QuotationStatisticsView",
    "QuotationTransitionView",
    "VenueAvailabilityView",
]
