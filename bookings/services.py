import logging
import math
from decimal import Decimal

from django.conf import settings
from django.db import DatabaseError, transaction
from rest_framework.exceptions import ValidationError

from api.events import publish
from api.exceptions import InvalidTransitionError, NotFoundError, StorageError, VehicleUnavailableError
from api.repository import Repository

from .availability import parse_range, vehicle_conflicts
from .calendar import vehicle_calendar
from .models import Reservation
from .signals import reservation_created, reservation_status_changed

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

CONTACT_FIELDS = (
    'driver_name', 'driver_email', 'driver_phone', 'driver_license',
    'special_requests', 'pickup_location', 'return_location', 'notes',
)
EDITABLE_FIELDS = CONTACT_FIELDS + ('payment_status', 'payment_reference')
IMMUTABLE_FIELDS = (
    'vehicle', 'vehicle_id', 'driver', 'driver_id', 'host', 'host_id',
    'pickup_date', 'return_date', 'daily_rate', 'number_of_days', 'total_amount',
)


def rental_days(pickup_date, return_date):
    """Billable days: whole days between the dates, rounded up, at least one."""
    seconds = (return_date - pickup_date).total_seconds()
    return max(1, math.ceil(seconds / SECONDS_PER_DAY))


def quote(daily_rate, pickup_date, return_date):
    days = rental_days(pickup_date, return_date)
    total = (Decimal(daily_rate) * days).quantize(Decimal('0.01'))
    return days, total


class ReservationLifecycle:
    """
    Creation, editing and status transitions of reservations.

    Every failure is raised before anything is written. Status changes are
    announced through ``reservation_status_changed`` once stored; trips,
    vehicle status and revenue react to that event in their own apps.
    """

    def __init__(self):
        self.reservations = Repository(Reservation)

    def create(self, vehicle_id, driver, pickup_date, return_date, contact_info=None):
        pickup, ret = parse_range(pickup_date, return_date, 'pickupDate', 'returnDate')
        contact = {key: value for key, value in (contact_info or {}).items() if key in CONTACT_FIELDS}
        contact['pickup_location'] = contact.get('pickup_location') or settings.PLATFORM_LOCATION
        contact['return_location'] = contact.get('return_location') or contact['pickup_location']

        with vehicle_calendar(vehicle_id) as vehicle:
            if vehicle.status != 'available':
                logger.info('Booking refused: vehicle %s is %s', vehicle.id, vehicle.status)
                raise VehicleUnavailableError(f'Vehicle is {vehicle.status} and cannot be booked.')
            clashes = vehicle_conflicts(vehicle.id, pickup, ret)
            if clashes:
                logger.info(
                    'Booking refused: vehicle %s %s..%s overlaps %s',
                    vehicle.id, pickup, ret, ', '.join(r.id for r in clashes),
                )
                raise VehicleUnavailableError()
            days, total = quote(vehicle.daily_rate, pickup, ret)
            reservation = self.reservations.insert(
                vehicle=vehicle,
                driver=driver,
                host_id=vehicle.host_id,
                pickup_date=pickup,
                return_date=ret,
                daily_rate=vehicle.daily_rate,
                number_of_days=days,
                total_amount=total,
                status='pending',
                payment_status='pending',
                **contact
            )

        logger.info(
            'Reservation %s created: vehicle %s, %s..%s, %s days, total %s',
            reservation.id, vehicle.id, pickup, ret, days, total,
        )
        publish(reservation_created, Reservation, reservation=reservation)
        return reservation

    def transition(self, reservation_id, status):
        reservation, _ = self._apply(reservation_id, status=status, strict=True)
        return reservation

    def cancel(self, reservation_id):
        return self.transition(reservation_id, 'cancelled')

    def update(self, reservation_id, changes):
        """
        Edit contact, note and payment fields, optionally moving the status
        in the same write. Booking terms (vehicle, dates, rate, amount) are
        fixed once created.
        """
        changes = dict(changes)
        status = changes.pop('status', None)
        frozen = sorted(key for key in changes if key in IMMUTABLE_FIELDS)
        if frozen:
            raise ValidationError({key: 'Cannot be changed after the reservation is created.' for key in frozen})
        unknown = sorted(key for key in changes if key not in EDITABLE_FIELDS)
        if unknown:
            raise ValidationError({key: 'Unknown reservation field.' for key in unknown})
        reservation, _ = self._apply(reservation_id, status=status, changes=changes)
        return reservation

    def _apply(self, reservation_id, status=None, changes=None, strict=False):
        """
        Lock, validate and write one reservation. ``strict`` refuses a
        request for the status the reservation already has.
        """
        changes = changes or {}
        if status is not None and status not in dict(Reservation.STATUS_CHOICES):
            raise InvalidTransitionError(f'Unknown reservation status {status!r}.')
        try:
            with transaction.atomic():
                reservation = Reservation.objects.select_for_update().filter(pk=reservation_id).first()
                if reservation is None:
                    raise NotFoundError('Reservation not found.')
                previous = reservation.status
                moving = status is not None and status != previous
                if (moving or strict) and not reservation.can_transition_to(status):
                    logger.info('Refused transition of %s: %s -> %s', reservation.id, previous, status)
                    raise InvalidTransitionError(f'Cannot move a {previous} reservation to {status}.')
                if changes and reservation.is_terminal:
                    raise InvalidTransitionError(f'A {previous} reservation can no longer be edited.')
                if moving:
                    changes['status'] = status
                if changes:
                    self.reservations.save(reservation, **changes)
        except DatabaseError as exc:
            raise StorageError('Could not update the reservation.') from exc

        if moving:
            logger.info('Reservation %s: %s -> %s', reservation.id, previous, status)
            publish(
                reservation_status_changed, Reservation,
                reservation=reservation, previous=previous, status=status,
            )
        return reservation, previous


lifecycle = ReservationLifecycle()
