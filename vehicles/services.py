import logging
from decimal import Decimal

from django.db import DatabaseError
from django.utils import timezone

from api.events import publish
from api.exceptions import InvalidTransitionError, NotFoundError, StorageError, VehicleUnavailableError
from api.repository import Repository
from bookings.calendar import vehicle_calendar
from bookings.models import HOLDING_STATUSES, Reservation

from .models import MaintenanceCycle, Vehicle
from .signals import maintenance_completed

logger = logging.getLogger(__name__)

WINDOW_DAYS = 30

vehicles = Repository(Vehicle)
maintenance_cycles = Repository(MaintenanceCycle)


def set_status(vehicle, status, reason=''):
    """Single mutation point for ``Vehicle.status``."""
    if status not in dict(Vehicle.STATUS_CHOICES):
        raise InvalidTransitionError(f'Unknown vehicle status {status!r}.')
    previous = vehicle.status
    if previous == status:
        return vehicle
    vehicles.save(vehicle, status=status)
    logger.info('Vehicle %s: %s -> %s %s', vehicle.id, previous, status, reason)
    return vehicle


def change_status(vehicle_id, status, reason='', only_from=None):
    with vehicle_calendar(vehicle_id) as vehicle:
        if only_from is not None and vehicle.status not in only_from:
            return vehicle
        return set_status(vehicle, status, reason)


def delete_vehicle(vehicle):
    """
    Delete a vehicle with no booking history, or retire it to ``inactive``
    when past reservations still reference it. Returns True when deleted.
    """
    with vehicle_calendar(vehicle.id) as locked:
        if locked.reservations.filter(status__in=HOLDING_STATUSES).exists():
            raise VehicleUnavailableError('Vehicle has open reservations and cannot be deleted.')
        if locked.reservations.exists():
            set_status(locked, 'inactive', '(retired, has booking history)')
            return False
        locked.delete()
    logger.info('Vehicle %s deleted', vehicle.id)
    return True


def start_maintenance(cycle_id):
    cycle = _get_cycle(cycle_id)
    with vehicle_calendar(cycle.vehicle_id) as vehicle:
        cycle = MaintenanceCycle.objects.select_for_update().get(pk=cycle.pk)
        if cycle.status != 'pending':
            raise InvalidTransitionError(f'Cannot start a {cycle.status} maintenance cycle.')
        if vehicle.status == 'rented':
            raise VehicleUnavailableError('Vehicle is rented and cannot go into maintenance.')
        set_status(vehicle, 'maintenance', f'(maintenance {cycle.id})')
        maintenance_cycles.save(cycle, status='in_progress', cycle_date=cycle.cycle_date or timezone.now())
    return cycle


def complete_maintenance(cycle_id):
    cycle = _get_cycle(cycle_id)
    with vehicle_calendar(cycle.vehicle_id) as vehicle:
        cycle = MaintenanceCycle.objects.select_for_update().get(pk=cycle.pk)
        if cycle.status == 'completed':
            raise InvalidTransitionError('Maintenance cycle is already completed.')
        if vehicle.status == 'maintenance':
            set_status(vehicle, 'available', f'(maintenance {cycle.id} done)')
        now = timezone.now()
        maintenance_cycles.save(cycle, status='completed', completed_at=now, cycle_date=cycle.cycle_date or now)
    publish(maintenance_completed, MaintenanceCycle, cycle=cycle)
    return cycle


def _get_cycle(cycle_id):
    try:
        cycle = MaintenanceCycle.objects.filter(pk=cycle_id).first()
    except DatabaseError as exc:
        raise StorageError('Could not read maintenance cycles.') from exc
    if cycle is None:
        raise NotFoundError('Maintenance cycle not found.')
    return cycle


def fleet_metrics(fleet):
    members = list(fleet.vehicles.all())
    reservations = list(Reservation.objects.filter(vehicle__in=members))
    active = sum(1 for vehicle in members if vehicle.status in ('available', 'rented'))
    total_revenue = sum((r.total_amount for r in reservations if r.status == 'completed'), Decimal('0.00'))
    utilization_rate = active / len(members) * 100 if members else 0.0
    average_daily_revenue = total_revenue / (len(members) * WINDOW_DAYS) if members else Decimal('0.00')
    return {
        'totalVehicles': len(members),
        'activeVehicles': active,
        'utilizationRate': round(utilization_rate, 2),
        'totalReservations': len(reservations),
        'totalRevenue': float(total_revenue),
        'averageDailyRevenue': round(float(average_daily_revenue), 2),
    }
