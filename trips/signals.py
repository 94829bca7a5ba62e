from django.dispatch import Signal

# Arguments: trip.
trip_opened = Signal()
trip_started = Signal()
trip_completed = Signal()
trip_cancelled = Signal()
