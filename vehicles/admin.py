from django.contrib import admin

from .models import Fleet, MaintenanceCycle, Vehicle
from .services import set_status


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ('id', 'make', 'model', 'year', 'host', 'daily_rate', 'status')
    list_filter = ('status', 'make', 'year')
    search_fields = ('id', 'make', 'model', 'vin', 'license_plate', 'host__company_name')
    readonly_fields = ('status',)
    actions = ['approve_vehicles', 'reject_vehicles']

    def approve_vehicles(self, request, queryset):
        for vehicle in queryset.filter(status='pending'):
            set_status(vehicle, 'available', '(approved in admin)')
    approve_vehicles.short_description = "Approve selected vehicles"

    def reject_vehicles(self, request, queryset):
        for vehicle in queryset.filter(status='pending'):
            set_status(vehicle, 'inactive', '(rejected in admin)')
    reject_vehicles.short_description = "Reject selected vehicles"


@admin.register(Fleet)
class FleetAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'host', 'location', 'status')
    list_filter = ('status',)
    search_fields = ('id', 'name', 'host__company_name')
    filter_horizontal = ('vehicles',)


@admin.register(MaintenanceCycle)
class MaintenanceCycleAdmin(admin.ModelAdmin):
    list_display = ('id', 'vehicle', 'host', 'status', 'cost', 'cycle_date', 'completed_at')
    list_filter = ('status',)
    search_fields = ('id', 'vehicle__make', 'vehicle__model', 'performed_by')
