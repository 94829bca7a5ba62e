from django.contrib import admin

from .models import Trip


@admin.register(Trip)
class TripAdmin(admin.ModelAdmin):
    list_display = ('id', 'booking', 'vehicle', 'driver', 'status', 'pickup_time', 'return_time')
    list_filter = ('status',)
    search_fields = ('id', 'booking__id', 'vehicle__make', 'vehicle__model')
    readonly_fields = ('booking', 'driver', 'vehicle', 'host', 'status')
