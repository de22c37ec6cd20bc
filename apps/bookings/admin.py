from django.contrib import admin

from .models import Booking, Discount, Payment
from .services import delete_booking


class PaymentInline(admin.StackedInline):
    model = Payment
    extra = 0


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ('confirmation_code', 'name', 'package', 'start_date', 'adults', 'children', 'total_price', 'created_at')
    list_filter = ('package', 'created_at')
    search_fields = ('confirmation_code', 'name', 'email', 'id_number')
    readonly_fields = ('confirmation_code', 'created_at', 'updated_at')
    date_hierarchy = 'created_at'
    inlines = [PaymentInline]

    def delete_model(self, request, obj):
        delete_booking(obj)


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('booking', 'amount', 'status', 'updated_at')
    list_filter = ('status',)
    search_fields = ('booking__confirmation_code', 'booking__name')


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    list_display = ('code', 'amount', 'expires_at', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('code',)
