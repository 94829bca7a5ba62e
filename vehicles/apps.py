from django.apps import AppConfig


class VehiclesConfig(AppConfig):
    name = 'vehicles'

    def ready(self):
        from bookings.signals import reservation_status_changed

        from . import receivers

        reservation_status_changed.connect(receivers.follow_reservation_status, dispatch_uid='vehicles.follow_reservation')
