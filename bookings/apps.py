from django.apps import AppConfig


class BookingsConfig(AppConfig):
    name = 'bookings'

    def ready(self):
        from trips.signals import trip_completed, trip_started

        from . import receivers

        trip_started.connect(receivers.activate_on_pickup, dispatch_uid='bookings.activate_on_pickup')
        trip_completed.connect(receivers.complete_on_return, dispatch_uid='bookings.complete_on_return')
