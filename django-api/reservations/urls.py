from django.urls import path

from reservations.handlers import (
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

urlpatterns = [
    path("bookings", BookingListView.as_view(), name="booking-list"),
    path("bookings/statistics", BookingStatisticsView.as_view(), name="booking-statistics"),
    path("bookings/<str:booking_id>", BookingDetailView.as_view(), name="booking-detail"),
    path("bookings/<str:booking_id>/cancel", BookingCancelView.as_view(), name="booking-cancel"),
    *[
        path(
            f"bookings/<str:booking_id>/{action}",
            BookingTransitionView.as_view(action=action),
            name=f"booking-{action}",
        )
        for action in ("confirm", "check-in", "check-out", "no-show")
    ],
    path("quotations", QuotationListView.as_view(), name="quotation-list"),
    path(
        "quotations/statistics",
        QuotationStatisticsView.as_view(),
        name="quotation-statistics",
    ),
    path(
        "quotations/by-number/<str:quotation_number>",
        QuotationByNumberView.as_view(),
        name="quotation-by-number",
    ),
    path(
        "quotations/<str:quotation_id>",
        QuotationDetailView.as_view(),
        name="quotation-detail",
    ),
    path(
        "quotations/<str:quotation_id>/accept",
        QuotationAcceptView.as_view(),
        name="quotation-accept",
    ),
    *[
        path(
            f"quotations/<str:quotation_id>/{action}",
            QuotationTransitionView.as_view(action=action),
            name=f"quotation-{action}",
        )
        for action in ("send", "reject", "expire")
    ],
    path("cost/calculate", CostCalculationView.as_view(), name="cost-calculate"),
    path(
        "venues/<str:venue_id>/availability",
        VenueAvailabilityView.as_view(),
        name="venue-availability",
    ),
]
