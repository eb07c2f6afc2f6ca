"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Leave domain errors to reservations.handlers.exceptions
- Never contain business logic
- Never expose internal error details
"""

from django.apps import apps
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from reservations.domain.models import Page
from reservations.handlers.serializers import (
    AvailabilityQuerySerializer,
    BookingFilterSerializer,
    BookingSerializer,
    BookingStatisticsSerializer,
    CancelBookingSerializer,
    CostBreakdownSerializer,
    CostRequestSerializer,
    CreateBookingSerializer,
    CreateQuotationSerializer,
    PaginationSerializer,
    QuotationFilterSerializer,
    QuotationSerializer,
    QuotationStatisticsSerializer,
    UpdateBookingSerializer,
    UpdateQuotationSerializer,
    parse,
)
from reservations.services import BookingService, QuotationService


def _page_body(page: Page, serializer_cls) -> dict:
    return {
        "items": serializer_cls(page.items, many=True).data,
        "total": page.total,
        "page": page.page,
        "limit": page.limit,
        "total_pages": page.total_pages,
        "has_next": page.has_next,
        "has_prev": page.has_prev,
    }


class ReservationView(APIView):
    """Base view exposing the services built at startup."""

    @property
    def bookings(self) -> BookingService:
        return apps.get_app_config("reservations").services.bookings

    @property
    def quotations(self) -> QuotationService:
        return apps.get_app_config("reservations").services.quotations


# Bookings


class BookingListView(ReservationView):
    """Handler for GET/POST /api/bookings"""

    def get(self, request: Request) -> Response:
        filters = BookingFilterSerializer.to_filters(
            parse(BookingFilterSerializer, request.query_params)
        )
        pagination = PaginationSerializer.to_pagination(
            parse(PaginationSerializer, request.query_params)
        )
        page = self.bookings.list_bookings(filters, pagination)
        return Response(_page_body(page, BookingSerializer))

    def post(self, request: Request) -> Response:
        data = parse(CreateBookingSerializer, request.data)
        booking = self.bookings.create_booking(CreateBookingSerializer.to_request(data))
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)


class BookingDetailView(ReservationView):
    """Handler for GET/PATCH /api/bookings/{booking_id}"""

    def get(self, request: Request, booking_id: str) -> Response:
        return Response(BookingSerializer(self.bookings.get_booking(booking_id)).data)

    def patch(self, request: Request, booking_id: str) -> Response:
        data = parse(UpdateBookingSerializer, request.data)
        booking = self.bookings.update_booking(
            booking_id, UpdateBookingSerializer.to_request(data)
        )
        return Response(BookingSerializer(booking).data)


class BookingTransitionView(ReservationView):
    """Handler for POST /api/bookings/{booking_id}/{action}"""

    action = ""

    def post(self, request: Request, booking_id: str) -> Response:
        transitions = {
            "confirm": self.bookings.confirm_booking,
            "check-in": self.bookings.check_in_booking,
            "check-out": self.bookings.check_out_booking,
            "no-show": self.bookings.mark_no_show,
        }
        booking = transitions[self.action](booking_id)
        return Response(BookingSerializer(booking).data)


class BookingCancelView(ReservationView):
    """Handler for POST /api/bookings/{booking_id}/cancel"""

    def post(self, request: Request, booking_id: str) -> Response:
        data = parse(CancelBookingSerializer, request.data)
        result = self.bookings.cancel_booking(booking_id, data["reason"])
        body = BookingSerializer(result.booking).data
        return Response({"booking": body, "refund_amount": str(result.refund_amount)})


class BookingStatisticsView(ReservationView):
    """Handler for GET /api/bookings/statistics"""

    def get(self, request: Request) -> Response:
        filters = BookingFilterSerializer.to_filters(
            parse(BookingFilterSerializer, request.query_params)
        )
        stats = self.bookings.get_statistics(filters)
        return Response(BookingStatisticsSerializer(stats).data)


# Quotations


class QuotationListView(ReservationView):
    """Handler for GET/POST /api/quotations"""

    def get(self, request: Request) -> Response:
        filters = QuotationFilterSerializer.to_filters(
            parse(QuotationFilterSerializer, request.query_params)
        )
        pagination = PaginationSerializer.to_pagination(
            parse(PaginationSerializer, request.query_params)
        )
        page = self.quotations.list_quotations(filters, pagination)
        return Response(_page_body(page, QuotationSerializer))

    def post(self, request: Request) -> Response:
        data = parse(CreateQuotationSerializer, request.data)
        quotation = self.quotations.create_quotation(CreateQuotationSerializer.to_request(data))
        return Response(QuotationSerializer(quotation).data, status=status.HTTP_201_CREATED)


class QuotationDetailView(ReservationView):
    """Handler for GET/PATCH /api/quotations/{quotation_id}"""

    def get(self, request: Request, quotation_id: str) -> Response:
        return Response(QuotationSerializer(self.quotations.get_quotation(quotation_id)).data)

    def patch(self, request: Request, quotation_id: str) -> Response:
        data = parse(UpdateQuotationSerializer, request.data)
        quotation = self.quotations.update_quotation(
            quotation_id, UpdateQuotationSerializer.to_request(data)
        )
        return Response(QuotationSerializer(quotation).data)


class QuotationByNumberView(ReservationView):
    """Handler for GET /api/quotations/by-number/{quotation_number}"""

    def get(self, request: Request, quotation_number: str) -> Response:
        quotation = self.quotations.get_by_number(quotation_number)
        return Response(QuotationSerializer(quotation).data)


class QuotationTransitionView(ReservationView):
    """Handler for POST /api/quotations/{quotation_id}/{action}"""

    action = ""

    def post(self, request: Request, quotation_id: str) -> Response:
        transitions = {
            "send": self.quotations.send_quotation,
            "reject": self.quotations.reject_quotation,
            "expire": self.quotations.expire_quotation,
        }
        quotation = transitions[self.action](quotation_id)
        return Response(QuotationSerializer(quotation).data)


class QuotationAcceptView(ReservationView):
    """Handler for POST /api/quotations/{quotation_id}/accept"""

    def post(self, request: Request, quotation_id: str) -> Response:
        result = self.quotations.accept_quotation(quotation_id)
        return Response(
            {
                "quotation": QuotationSerializer(result.quotation).data,
                "booking": BookingSerializer(result.booking).data,
            },
            status=status.HTTP_201_CREATED,
        )


class QuotationStatisticsView(ReservationView):
    """Handler for GET /api/quotations/statistics"""

    def get(self, request: Request) -> Response:
        filters = QuotationFilterSerializer.to_filters(
            parse(QuotationFilterSerializer, request.query_params)
        )
        stats = self.quotations.get_statistics(filters)
        return Response(QuotationStatisticsSerializer(stats).data)


# Pricing and availability


class CostCalculationView(ReservationView):
    """Handler for POST /api/cost/calculate"""

    def post(self, request: Request) -> Response:
        data = parse(CostRequestSerializer, request.data)
        cost = self.quotations.calculate_cost(CostRequestSerializer.to_request(data))
        return Response(CostBreakdownSerializer(cost).data)


class VenueAvailabilityView(ReservationView):
    """Handler for GET /api/venues/{venue_id}/availability"""

    def get(self, request: Request, venue_id: str) -> Response:
        data = parse(AvailabilityQuerySerializer, request.query_params)
        available = self.bookings.check_availability(
            venue_id,
            data["date"],
            data.get("end_date"),
            data["start_time"],
            data["end_time"],
        )
        return Response({"venue_id": venue_id, "available": available})
