from django.contrib import admin

from .models import RevenueRecord


@admin.register(RevenueRecord)
class RevenueRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'host', 'vehicle', 'date', 'booking_revenue', 'net_revenue', 'source')
    list_filter = ('source', 'date')
    search_fields = ('id', 'host__company_name', 'reservation__id')
    date_hierarchy = 'date'
