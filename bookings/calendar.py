"""
Mutual exclusion for a vehicle's booking calendar.

Two requests that read a vehicle's reservations and then insert a new one
must not interleave. ``vehicle_calendar`` serializes them with a
per-vehicle lock inside this process and, on databases that support it, a
``SELECT ... FOR UPDATE`` on the vehicle row for other processes.
"""
import logging
import threading
import weakref
from contextlib import contextmanager

from django.db import DatabaseError, transaction

from api.exceptions import StorageError, VehicleNotFoundError
from vehicles.models import Vehicle

logger = logging.getLogger(__name__)

_registry_lock = threading.Lock()
# A lock lives only while some request holds or waits for it.
_vehicle_locks = weakref.WeakValueDictionary()


def _lock_for(vehicle_id):
    with _registry_lock:
        lock = _vehicle_locks.get(vehicle_id)
        if lock is None:
            lock = _vehicle_locks[vehicle_id] = threading.RLock()
        return lock


@contextmanager
def vehicle_calendar(vehicle_id):
    """
    Hold the calendar of ``vehicle_id`` for the duration of the block.

    Yields the freshly read, row-locked ``Vehicle``. The block runs in one
    transaction; raising inside it rolls back every write it made.
    """
    with _lock_for(vehicle_id):
        try:
            with transaction.atomic():
                vehicle = Vehicle.objects.select_for_update().filter(pk=vehicle_id).first()
                if vehicle is None:
                    raise VehicleNotFoundError()
                yield vehicle
        except DatabaseError as exc:
            logger.error('Calendar write for vehicle %s failed: %s', vehicle_id, exc)
            raise StorageError('Could not update the booking calendar.') from exc
