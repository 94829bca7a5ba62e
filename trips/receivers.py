import logging

from api.exceptions import DuplicateTripError

from .models import Trip
from .services import lifecycle

logger = logging.getLogger(__name__)


def open_trip_on_confirmation(sender, reservation, previous, status, **kwargs):
    if status != 'confirmed':
        return
    try:
        lifecycle.open(reservation.id)
    except DuplicateTripError:
        logger.info('Trip already open for reservation %s', reservation.id)


def flag_trip_of_cancelled_reservation(sender, reservation, previous, status, **kwargs):
    if status != 'cancelled':
        return
    trip = Trip.objects.filter(booking_id=reservation.id).exclude(status__in=('completed', 'cancelled')).first()
    if trip is not None:
        # Not cascaded: the trip stays as it is for the host to resolve.
        logger.warning(
            'Reservation %s was cancelled while trip %s is %s',
            reservation.id, trip.id, trip.status,
        )
