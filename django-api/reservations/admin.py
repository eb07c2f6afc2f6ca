from django.contrib import admin

from reservations.models import AvailabilityBlock, Booking, LineItem, Quotation, Venue


class AvailabilityBlockInline(admin.TabularInline):
    model = AvailabilityBlock
    extra = 1


class LineItemInline(admin.TabularInline):
    model = LineItem
    extra = 0
    readonly_fields = ["total_price"]


@admin.register(Venue)
class VenueAdmin(admin.ModelAdmin):
    list_display = ["name", "location", "capacity", "base_rate", "is_active", "is_available"]
    list_filter = ["is_active", "is_available"]
    search_fields = ["name", "location"]
    inlines = [AvailabilityBlockInline]


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ["event_name", "venue", "start_date", "status", "total_amount"]
    list_filter = ["status", "payment_status", "venue"]
    search_fields = ["event_name", "customer_id"]
    inlines = [LineItemInline]


@admin.register(Quotation)
class QuotationAdmin(admin.ModelAdmin):
    list_display = ["quotation_number", "event_name", "venue", "event_date", "status"]
    list_filter = ["status", "venue"]
    search_fields = ["quotation_number", "event_name", "customer_id"]
    inlines = [LineItemInline]
