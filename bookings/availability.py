"""
Availability resolution for the booking calendar.

Reservation windows are half-open ``[pickup_date, return_date)`` so a
vehicle returned on a day can be picked up again the same day. A same-day
reservation (pickup == return) is billed as one day but its window is
empty: it only conflicts with a reservation spanning that day.
"""
import datetime
import logging

from django.utils.dateparse import parse_date, parse_datetime

from api.exceptions import InvalidRangeError
from api.repository import Repository
from vehicles.models import Vehicle

from .models import BLOCKING_STATUSES, Reservation

logger = logging.getLogger(__name__)

reservations = Repository(Reservation)
vehicles = Repository(Vehicle)


def parse_day(value, field='date'):
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if not value:
        raise InvalidRangeError(f'{field} is required.')
    try:
        day = parse_date(str(value))
        if day is None:
            moment = parse_datetime(str(value))
            day = moment.date() if moment else None
    except ValueError:
        day = None
    if day is None:
        raise InvalidRangeError(f'{field} is not a valid date: {value!r}.')
    return day


def parse_range(start, end, start_field='startDate', end_field='endDate'):
    start_day = parse_day(start, start_field)
    end_day = parse_day(end, end_field)
    if start_day > end_day:
        raise InvalidRangeError(f'{start_field} must be on or before {end_field}.')
    return start_day, end_day


def overlaps(a_start, a_end, b_start, b_end):
    return a_start < b_end and a_end > b_start


def window_filters(start, end):
    """Store-side form of ``overlaps`` against ``[start, end)``."""
    return {
        'status__in': BLOCKING_STATUSES,
        'pickup_date__lt': end,
        'return_date__gt': start,
    }


def conflicts(candidates, start, end):
    return [
        reservation for reservation in candidates
        if overlaps(reservation.pickup_date, reservation.return_date, start, end)
    ]


def vehicle_conflicts(vehicle_id, start, end):
    """
    Reservations blocking ``vehicle_id`` in ``[start, end)``.

    Reads the store directly so a storage failure propagates instead of
    degrading to "no conflicts".
    """
    candidates = Reservation.objects.filter(vehicle_id=vehicle_id, **window_filters(start, end))
    return conflicts(candidates, start, end)


def find_available(start_date, end_date, location=None):
    """
    Vehicles with status ``available`` and no overlapping, non-cancelled
    reservation in the requested window.

    Raises ``InvalidRangeError`` for missing, unparseable or inverted dates.
    An empty list is a valid answer.
    """
    start, end = parse_range(start_date, end_date)
    booked = {r.vehicle_id for r in conflicts(reservations.list(**window_filters(start, end)), start, end)}
    filters = {'status': 'available'}
    if location:
        filters['location__icontains'] = location
    result = [vehicle for vehicle in vehicles.list(**filters) if vehicle.id not in booked]
    logger.debug('Availability %s..%s location=%r: %d free, %d booked', start, end, location, len(result), len(booked))
    return result
