from django.apps import AppConfig


class RevenueConfig(AppConfig):
    name = 'revenue'

    def ready(self):
        from bookings.signals import reservation_status_changed
        from vehicles.signals import maintenance_completed

        from . import receivers

        reservation_status_changed.connect(receivers.post_completed_reservation, dispatch_uid='revenue.reservation')
        maintenance_completed.connect(receivers.post_completed_maintenance, dispatch_uid='revenue.maintenance')
