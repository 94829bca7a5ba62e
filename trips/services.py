import logging

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from api.events import publish
from api.exceptions import (
    DuplicateTripError, InvalidMileageError, InvalidTransitionError, NotFoundError, StorageError,
)
from api.repository import Repository
from bookings.models import Reservation

from .models import Trip
from .signals import trip_cancelled, trip_completed, trip_opened, trip_started

logger = logging.getLogger(__name__)

# A trip can be opened once its reservation has been confirmed.
OPENABLE_STATUSES = ('confirmed', 'active', 'completed')


def check_readings(mileage=None, fuel_level=None, mileage_field='mileage', fuel_field='fuelLevel'):
    errors = {}
    if mileage is not None and mileage < 0:
        errors[mileage_field] = 'Mileage cannot be negative.'
    if fuel_level is not None and not 0 <= fuel_level <= 100:
        errors[fuel_field] = 'Fuel level must be between 0 and 100.'
    if errors:
        raise ValidationError(errors)


class TripLifecycle:
    """Pickup and return of a confirmed reservation: scheduled -> active -> completed."""

    def __init__(self):
        self.trips = Repository(Trip)

    def open(self, reservation_id):
        try:
            with transaction.atomic():
                reservation = Reservation.objects.select_for_update().filter(pk=reservation_id).first()
                if reservation is None:
                    raise NotFoundError('Reservation not found.')
                if reservation.status not in OPENABLE_STATUSES:
                    raise InvalidTransitionError(
                        f'A trip needs a confirmed reservation; {reservation.id} is {reservation.status}.'
                    )
                if Trip.objects.filter(booking_id=reservation.id).exists():
                    raise DuplicateTripError()
                trip = self.trips.insert(
                    booking=reservation,
                    driver_id=reservation.driver_id,
                    vehicle_id=reservation.vehicle_id,
                    host_id=reservation.host_id,
                    status='scheduled',
                    pickup_location=reservation.pickup_location,
                    return_location=reservation.return_location,
                )
        except IntegrityError as exc:
            raise DuplicateTripError() from exc
        except DatabaseError as exc:
            raise StorageError('Could not open the trip.') from exc

        logger.info('Trip %s opened for reservation %s', trip.id, reservation_id)
        publish(trip_opened, Trip, trip=trip)
        return trip

    def start(self, trip_id, mileage_start=None, fuel_level_start=None, condition_start=None):
        check_readings(mileage_start, fuel_level_start, 'mileageStart', 'fuelLevelStart')
        trip = self._move(
            trip_id, 'scheduled', 'active',
            pickup_time=timezone.now(),
            mileage_start=mileage_start,
            fuel_level_start=fuel_level_start,
            condition_start=condition_start or '',
        )
        publish(trip_started, Trip, trip=trip)
        return trip

    def complete(self, trip_id, mileage_end=None, fuel_level_end=None, condition_end=None, issues=None):
        check_readings(mileage_end, fuel_level_end, 'mileageEnd', 'fuelLevelEnd')

        def check_mileage(trip):
            if trip.mileage_start is not None and mileage_end is not None and mileage_end < trip.mileage_start:
                raise InvalidMileageError(
                    f'mileageEnd {mileage_end} is lower than mileageStart {trip.mileage_start}.'
                )

        trip = self._move(
            trip_id, 'active', 'completed',
            check=check_mileage,
            return_time=timezone.now(),
            mileage_end=mileage_end,
            fuel_level_end=fuel_level_end,
            condition_end=condition_end or '',
            issues=list(issues or []),
        )
        publish(trip_completed, Trip, trip=trip)
        return trip

    def cancel(self, trip_id):
        trip = self._move(trip_id, 'scheduled', 'cancelled')
        publish(trip_cancelled, Trip, trip=trip)
        return trip

    def _move(self, trip_id, expected, status, check=None, **fields):
        try:
            with transaction.atomic():
                trip = Trip.objects.select_for_update().filter(pk=trip_id).first()
                if trip is None:
                    raise NotFoundError('Trip not found.')
                if trip.status != expected:
                    logger.info('Refused trip %s: %s -> %s', trip.id, trip.status, status)
                    raise InvalidTransitionError(f'Cannot move a {trip.status} trip to {status}.')
                if check is not None:
                    check(trip)
                if 'issues' in fields:
                    fields['issues'] = list(trip.issues or []) + fields['issues']
                self.trips.save(trip, status=status, **fields)
        except DatabaseError as exc:
            raise StorageError('Could not update the trip.') from exc
        logger.info('Trip %s: %s -> %s', trip.id, expected, status)
        return trip

    def get(self, trip_id):
        trip = self.trips.get_by_id(trip_id)
        if trip is None:
            raise NotFoundError('Trip not found.')
        return trip

    def filter(self, driver_id=None, host_id=None, status=None):
        filters = {}
        if driver_id:
            filters['driver_id'] = driver_id
        if host_id:
            filters['host_id'] = host_id
        if status:
            filters['status'] = status
        return self.trips.list(**filters)

    def get_active(self):
        return self.filter(status='active')

    def get_by_driver(self, driver_id):
        return self.filter(driver_id=driver_id)

    def get_by_host(self, host_id):
        return self.filter(host_id=host_id)


lifecycle = TripLifecycle()
