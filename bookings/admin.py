from django.contrib import admin, messages

from api.exceptions import HostPilotError

from .models import Reservation
from .services import lifecycle


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = ('id', 'driver_name', 'vehicle', 'pickup_date', 'return_date', 'total_amount', 'status', 'payment_status')
    list_filter = ('status', 'payment_status', 'pickup_date')
    search_fields = ('id', 'driver_name', 'driver_email', 'vehicle__make', 'vehicle__model')
    readonly_fields = ('vehicle', 'driver', 'host', 'pickup_date', 'return_date', 'daily_rate',
                       'number_of_days', 'total_amount', 'status', 'created_at', 'updated_at')
    actions = ['confirm_reservations', 'cancel_reservations']

    def _transition(self, request, queryset, status):
        moved = 0
        for reservation in queryset:
            try:
                lifecycle.transition(reservation.id, status)
                moved += 1
            except HostPilotError as exc:
                self.message_user(request, f"{reservation.id}: {exc.detail}", level=messages.WARNING)
        self.message_user(request, f"{moved} reservation(s) moved to {status}.")

    def confirm_reservations(self, request, queryset):
        self._transition(request, queryset, 'confirmed')
    confirm_reservations.short_description = "Confirm selected reservations"

    def cancel_reservations(self, request, queryset):
        self._transition(request, queryset, 'cancelled')
    cancel_reservations.short_description = "Cancel selected reservations"
