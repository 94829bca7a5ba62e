"""
Revenue postings and the read-only performance rollups built on them.

Money stays ``Decimal`` here; views convert to ``float`` for JSON.
"""
import datetime
import logging
from collections import OrderedDict
from decimal import Decimal

from django.utils import timezone

from api.repository import Repository
from bookings.models import Reservation
from vehicles.models import Vehicle

from .models import RevenueRecord

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
WINDOW_DAYS = 30

records = Repository(RevenueRecord)


def _to_decimal(value):
    return Decimal(str(value or 0))


def post(**fields):
    for name in ('booking_revenue', 'maintenance_cost', 'cleaning_cost', 'subscription_fee'):
        fields[name] = _to_decimal(fields.get(name))
    fields['net_revenue'] = fields['booking_revenue'] - (
        fields['maintenance_cost'] + fields['cleaning_cost'] + fields['subscription_fee']
    )
    record = records.insert(**fields)
    logger.info(
        'Revenue %s for host %s on %s: revenue %s, net %s',
        record.id, record.host_id, record.date, record.booking_revenue, record.net_revenue,
    )
    return record


def post_reservation_revenue(reservation):
    existing = RevenueRecord.objects.filter(reservation_id=reservation.id).first()
    if existing is not None:
        return existing
    return post(
        host_id=reservation.host_id,
        vehicle_id=reservation.vehicle_id,
        reservation=reservation,
        date=reservation.return_date,
        booking_revenue=reservation.total_amount,
        source='direct',
    )


def post_maintenance_costs(cycle):
    existing = RevenueRecord.objects.filter(maintenance_cycle_id=cycle.id).first()
    if existing is not None:
        return existing
    if not cycle.cost and not cycle.cleaning_cost:
        return None
    done = cycle.completed_at or timezone.now()
    return post(
        host_id=cycle.host_id,
        vehicle_id=cycle.vehicle_id,
        maintenance_cycle=cycle,
        date=done.date(),
        maintenance_cost=cycle.cost,
        cleaning_cost=cycle.cleaning_cost,
    )


def revenue_uptime(vehicle_id, start, end):
    """Percent of ``[start, end)`` covered by completed reservations inside it."""
    total_days = (end - start).days
    if total_days <= 0:
        return 0.0
    completed = Reservation.objects.filter(
        vehicle_id=vehicle_id, status='completed', pickup_date__gte=start, return_date__lte=end,
    )
    revenue_days = sum((r.return_date - r.pickup_date).days for r in completed)
    return revenue_days / total_days * 100


def host_records(host, start=None, end=None):
    filters = {'host_id': host.id}
    if start:
        filters['date__gte'] = start
    if end:
        filters['date__lte'] = end
    return records.list(**filters)


def totals(rows):
    revenue = sum((r.booking_revenue for r in rows), ZERO)
    costs = sum((r.costs for r in rows), ZERO)
    return revenue, costs, revenue - costs


def host_performance(host, today=None):
    today = today or timezone.localdate()
    window_start = today - datetime.timedelta(days=WINDOW_DAYS)

    rows = host_records(host)
    vehicles = list(Vehicle.objects.filter(host=host))
    reservations = list(Reservation.objects.filter(host=host))
    recent = [r for r in reservations if timezone.localdate(r.created_at) >= window_start]

    total_revenue, total_costs, net_revenue = totals(rows)
    maintenance_costs = sum((r.maintenance_cost for r in rows), ZERO)
    active_vehicles = sum(1 for v in vehicles if v.status in ('available', 'rented'))

    utilization_rate = active_vehicles / len(vehicles) * 100 if vehicles else 0.0
    average_daily_revenue = (
        total_revenue / (len(vehicles) * WINDOW_DAYS) if vehicles and recent else ZERO
    )
    maintenance_cost_ratio = float(maintenance_costs / total_revenue * 100) if total_revenue > 0 else 0.0

    vehicle_uptimes = [
        {
            'vehicleId': vehicle.id,
            'vehicleName': vehicle.name,
            'revenueUptime': revenue_uptime(vehicle.id, window_start, today),
        }
        for vehicle in vehicles
    ]
    average_uptime = (
        sum(v['revenueUptime'] for v in vehicle_uptimes) / len(vehicle_uptimes) if vehicle_uptimes else 0.0
    )

    return {
        'totalRevenue': total_revenue,
        'totalCosts': total_costs,
        'netRevenue': net_revenue,
        'utilizationRate': utilization_rate,
        'averageDailyRevenue': average_daily_revenue,
        'maintenanceCostRatio': maintenance_cost_ratio,
        'revenueUptime': average_uptime,
        'subscriptionFee': host.monthly_subscription_fee,
        'totalVehicles': len(vehicles),
        'activeVehicles': active_vehicles,
        'totalReservations': len(reservations),
        'recentReservations': len(recent),
        'vehicleUptimes': vehicle_uptimes,
    }


def revenue_summary(host, start=None, end=None):
    rows = host_records(host, start, end)
    total_revenue, total_costs, net_revenue = totals(rows)

    by_date = OrderedDict()
    for row in sorted(rows, key=lambda r: r.date):
        day = by_date.setdefault(row.date, {'date': row.date, 'bookingRevenue': ZERO, 'costs': ZERO, 'netRevenue': ZERO})
        day['bookingRevenue'] += row.booking_revenue
        day['costs'] += row.costs
        day['netRevenue'] = day['bookingRevenue'] - day['costs']

    return {
        'summary': {
            'totalRevenue': total_revenue,
            'totalCosts': total_costs,
            'netRevenue': net_revenue,
            'recordCount': len(rows),
        },
        'byDate': list(by_date.values()),
        'records': rows,
    }
