from django.dispatch import Signal

# Sent after a reservation has been stored. Arguments: reservation.
reservation_created = Signal()

# Sent after a status transition has been written.
# Arguments: reservation, previous, status.
reservation_status_changed = Signal()
