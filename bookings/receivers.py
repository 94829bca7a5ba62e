import logging

from .services import lifecycle

logger = logging.getLogger(__name__)


def activate_on_pickup(sender, trip, **kwargs):
    reservation = trip.booking
    if reservation.status == 'confirmed':
        lifecycle.transition(reservation.id, 'active')
    elif reservation.status == 'cancelled':
        logger.warning('Trip %s started for cancelled reservation %s', trip.id, reservation.id)


def complete_on_return(sender, trip, **kwargs):
    reservation = trip.booking
    if reservation.status == 'active':
        lifecycle.transition(reservation.id, 'completed')
    elif reservation.status != 'completed':
        logger.warning(
            'Trip %s completed but reservation %s is %s; reservation left unchanged',
            trip.id, reservation.id, reservation.status,
        )
