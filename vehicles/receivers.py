from .services import change_status


def follow_reservation_status(sender, reservation, previous, status, **kwargs):
    if status == 'active':
        change_status(reservation.vehicle_id, 'rented', f'(reservation {reservation.id} picked up)')
    elif status == 'completed':
        change_status(
            reservation.vehicle_id, 'available', f'(reservation {reservation.id} returned)',
            only_from=('rented',),
        )
