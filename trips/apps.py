from django.apps import AppConfig


class TripsConfig(AppConfig):
    name = 'trips'

    def ready(self):
        from bookings.signals import reservation_status_changed

        from . import receivers

        reservation_status_changed.connect(receivers.open_trip_on_confirmation, dispatch_uid='trips.open_on_confirm')
        reservation_status_changed.connect(receivers.flag_trip_of_cancelled_reservation, dispatch_uid='trips.flag_cancelled')
