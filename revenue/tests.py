import datetime
from decimal import Decimal

import pytest

from bookings.models import Reservation
from bookings.services import lifecycle as reservations
from revenue import services
from revenue.models import RevenueRecord

D = datetime.date


def complete(reservation):
    for status in ('confirmed', 'active', 'completed'):
        reservations.transition(reservation.id, status)
    return Reservation.objects.get(pk=reservation.id)


@pytest.mark.django_db
class TestPosting:
    def test_post_computes_net(self, host):
        record = services.post(
            host_id=host.id, date=D(2025, 1, 1),
            booking_revenue=Decimal('300'), maintenance_cost=Decimal('40'),
            cleaning_cost=Decimal('10'), subscription_fee=Decimal('50'),
        )
        assert record.id.startswith('rev_')
        assert record.net_revenue == Decimal('200')
        assert record.costs == Decimal('100')

    def test_reservation_revenue_is_posted_once(self, vehicle, book, jan):
        reservation = complete(book(vehicle, jan(10), jan(12)))

        again = services.post_reservation_revenue(reservation)

        assert RevenueRecord.objects.filter(reservation_id=reservation.id).count() == 1
        assert again.booking_revenue == Decimal('100.00')

    def test_cancelled_reservations_post_nothing(self, vehicle, book, jan):
        reservations.cancel(book(vehicle, jan(10), jan(12)).id)
        assert not RevenueRecord.objects.exists()


@pytest.mark.django_db
def test_revenue_uptime_counts_completed_reservations_inside_the_window(vehicle, book, jan):
    complete(book(vehicle, jan(5), jan(8)))
    complete(book(vehicle, jan(10), jan(12)))
    reservations.cancel(book(vehicle, jan(20), jan(25)).id)
    book(vehicle, jan(26), jan(28))

    assert services.revenue_uptime(vehicle.id, jan(1), jan(11)) == pytest.approx(30.0)
    assert services.revenue_uptime(vehicle.id, jan(1), jan(31)) == pytest.approx(5 / 30 * 100)
    assert services.revenue_uptime(vehicle.id, jan(5), jan(5)) == 0.0


@pytest.mark.django_db
class TestHostPerformance:
    def test_empty_host(self, host):
        result = services.host_performance(host, today=D(2025, 1, 31))

        assert result['totalRevenue'] == 0
        assert result['utilizationRate'] == 0.0
        assert result['maintenanceCostRatio'] == 0.0
        assert result['vehicleUptimes'] == []

    def test_rollup(self, host, make_vehicle, book, jan):
        first = make_vehicle()
        make_vehicle(status='maintenance')
        complete(book(first, jan(10), jan(12)))
        services.post(host_id=host.id, vehicle_id=first.id, date=jan(15), maintenance_cost=Decimal('25'))

        result = services.host_performance(host)

        assert result['totalRevenue'] == Decimal('100.00')
        assert result['totalCosts'] == Decimal('25')
        assert result['netRevenue'] == Decimal('75.00')
        assert result['totalVehicles'] == 2
        assert result['activeVehicles'] == 1
        assert result['utilizationRate'] == 50.0
        assert result['maintenanceCostRatio'] == 25.0
        assert result['totalReservations'] == 1
        assert result['recentReservations'] == 1
        assert result['averageDailyRevenue'] == Decimal('100.00') / 60
        assert {v['vehicleId'] for v in result['vehicleUptimes']} == {v.id for v in host.vehicles.all()}


@pytest.mark.django_db
class TestRevenueAPI:
    def test_dashboard(self, host_client, vehicle, book, jan):
        complete(book(vehicle, jan(10), jan(12)))

        response = host_client.get('/api/performance/dashboard/')

        assert response.status_code == 200
        assert response.json()['totalRevenue'] == 100.0
        assert response.json()['totalVehicles'] == 1

    def test_drivers_have_no_dashboard(self, driver_client):
        assert driver_client.get('/api/performance/dashboard/').status_code == 403

    def test_summary_groups_by_date(self, host_client, host, make_vehicle, book, jan):
        complete(book(make_vehicle(), jan(10), jan(12)))
        complete(book(make_vehicle(), jan(11), jan(12)))
        services.post(host_id=host.id, date=jan(20), maintenance_cost=Decimal('30'))

        response = host_client.get('/api/performance/revenue/', {'startDate': '2025-01-01', 'endDate': '2025-01-15'})

        body = response.json()
        assert body['summary'] == {'totalRevenue': 150.0, 'totalCosts': 0.0, 'netRevenue': 150.0, 'recordCount': 2}
        assert body['byDate'] == [{'date': '2025-01-12', 'bookingRevenue': 150.0, 'costs': 0.0, 'netRevenue': 150.0}]
        assert len(body['records']) == 2

    def test_summary_rejects_inverted_range(self, host_client):
        response = host_client.get('/api/performance/revenue/', {'startDate': '2025-02-01', 'endDate': '2025-01-01'})
        assert response.status_code == 400

    def test_admin_report(self, support_client, host, vehicle, book, jan):
        complete(book(vehicle, jan(10), jan(12)))
        services.post(host_id=host.id, date=jan(20), cleaning_cost=Decimal('15'))

        response = support_client.get('/api/admin/revenue-report/', {'start_date': '2025-01-01'})

        assert response.json()['total_booking_revenue'] == 100.0
        assert response.json()['total_net_revenue'] == 85.0
        assert response.json()['total_reservations'] == 1
        assert response.json()['total_records'] == 2

    def test_admin_report_is_back_office_only(self, host_client):
        assert host_client.get('/api/admin/revenue-report/').status_code == 403
