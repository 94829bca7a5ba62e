from decimal import Decimal

import pytest

from api.exceptions import InvalidTransitionError, VehicleUnavailableError
from bookings.services import lifecycle as reservations
from revenue.models import RevenueRecord
from vehicles import services
from vehicles.models import Fleet, MaintenanceCycle, Vehicle

VEHICLE = {
    'make': 'Honda',
    'model': 'Civic',
    'year': 2021,
    'vin': '1HGCM82633A004352',
    'licensePlate': 'ABC-1234',
    'dailyRate': '45.00',
    'location': 'Austin, TX',
}


@pytest.mark.django_db
class TestVehicleAPI:
    def test_create_starts_pending(self, host_client, host):
        response = host_client.post('/api/vehicles/', VEHICLE, format='json')

        assert response.status_code == 201
        body = response.json()
        assert body['id'].startswith('vehicle_')
        assert body['hostId'] == host.id
        assert body['status'] == 'pending'
        assert body['vin'] == VEHICLE['vin']
        assert body['dailyRate'] == 45

    def test_status_is_not_writable_by_the_host(self, host_client):
        response = host_client.post('/api/vehicles/', dict(VEHICLE, status='available'), format='json')
        assert response.json()['status'] == 'pending'

    @pytest.mark.parametrize('vin', ['1HGCM82633A00435', '1HGCM82633A00435I', '1hgcm82633a004352'])
    def test_vin_is_validated(self, host_client, vin):
        response = host_client.post('/api/vehicles/', dict(VEHICLE, vin=vin), format='json')
        assert response.status_code == 400
        assert 'vin' in response.json()

    def test_drivers_cannot_list_vehicles(self, driver_client):
        assert driver_client.post('/api/vehicles/', VEHICLE, format='json').status_code == 403
        assert driver_client.get('/api/vehicles/').json() == []

    def test_hosts_only_see_their_own(self, host_client, vehicle, make_vehicle, other_host):
        foreign = make_vehicle(host=other_host)

        assert [v['id'] for v in host_client.get('/api/vehicles/').json()] == [vehicle.id]
        assert host_client.get(f'/api/vehicles/{foreign.id}/').status_code == 404

    def test_update(self, host_client, vehicle):
        response = host_client.patch(f'/api/vehicles/{vehicle.id}/', {'dailyRate': '60.00'}, format='json')

        assert response.status_code == 200
        assert Vehicle.objects.get(pk=vehicle.id).daily_rate == Decimal('60.00')

    def test_calendar(self, host_client, vehicle, book, jan):
        later = book(vehicle, jan(20), jan(22))
        earlier = book(vehicle, jan(10), jan(12))

        response = host_client.get(f'/api/vehicles/{vehicle.id}/reservations/')

        assert [r['id'] for r in response.json()] == [earlier.id, later.id]


@pytest.mark.django_db
class TestDelete:
    def test_vehicle_without_history_is_deleted(self, host_client, vehicle):
        assert host_client.delete(f'/api/vehicles/{vehicle.id}/').status_code == 204
        assert not Vehicle.objects.filter(pk=vehicle.id).exists()

    def test_open_reservations_block_deletion(self, host_client, vehicle, book, jan):
        book(vehicle, jan(10), jan(12))

        response = host_client.delete(f'/api/vehicles/{vehicle.id}/')

        assert response.status_code == 409
        assert response.json()['code'] == 'vehicle_unavailable'
        assert Vehicle.objects.filter(pk=vehicle.id).exists()

    def test_vehicle_with_history_is_retired(self, host_client, vehicle, book, jan):
        reservations.cancel(book(vehicle, jan(10), jan(12)).id)

        response = host_client.delete(f'/api/vehicles/{vehicle.id}/')

        assert response.status_code == 200
        assert Vehicle.objects.get(pk=vehicle.id).status == 'inactive'


@pytest.mark.django_db
class TestStatus:
    def test_set_status_logs_and_saves(self, vehicle, caplog):
        with caplog.at_level('INFO', logger='vehicles.services'):
            services.set_status(vehicle, 'maintenance', '(test)')

        assert Vehicle.objects.get(pk=vehicle.id).status == 'maintenance'
        assert 'available -> maintenance' in caplog.text

    def test_unknown_status(self, vehicle):
        with pytest.raises(InvalidTransitionError):
            services.set_status(vehicle, 'scrapped')

    def test_completion_leaves_a_vehicle_in_maintenance_alone(self, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))
        reservations.transition(reservation.id, 'confirmed')
        reservations.transition(reservation.id, 'active')
        Vehicle.objects.filter(pk=vehicle.id).update(status='maintenance')

        reservations.transition(reservation.id, 'completed')

        assert Vehicle.objects.get(pk=vehicle.id).status == 'maintenance'


@pytest.mark.django_db
class TestMaintenance:
    @pytest.fixture
    def cycle(self, host, vehicle):
        return MaintenanceCycle.objects.create(
            host=host, vehicle=vehicle, cost=Decimal('120.00'),
            cleaning={'completed': True, 'notes': '', 'cost': 30},
        )

    def test_cycle_moves_the_vehicle_and_posts_costs(self, cycle, vehicle):
        services.start_maintenance(cycle.id)
        assert Vehicle.objects.get(pk=vehicle.id).status == 'maintenance'
        assert MaintenanceCycle.objects.get(pk=cycle.id).status == 'in_progress'

        services.complete_maintenance(cycle.id)
        assert Vehicle.objects.get(pk=vehicle.id).status == 'available'

        record = RevenueRecord.objects.get(maintenance_cycle_id=cycle.id)
        assert record.maintenance_cost == Decimal('120.00')
        assert record.cleaning_cost == Decimal('30.00')
        assert record.net_revenue == Decimal('-150.00')

    def test_rented_vehicle_cannot_start_maintenance(self, cycle, vehicle):
        Vehicle.objects.filter(pk=vehicle.id).update(status='rented')
        with pytest.raises(VehicleUnavailableError):
            services.start_maintenance(cycle.id)

    def test_completed_cycle_cannot_complete_again(self, cycle):
        services.complete_maintenance(cycle.id)
        with pytest.raises(InvalidTransitionError):
            services.complete_maintenance(cycle.id)

    def test_api(self, host_client, vehicle):
        response = host_client.post('/api/maintenance/', {
            'vehicleId': vehicle.id,
            'performedBy': 'Quick Lube',
            'cost': '80.00',
        }, format='json')
        assert response.status_code == 201
        cycle_id = response.json()['id']
        assert cycle_id.startswith('maint_')
        assert response.json()['inspection']['completed'] is False

        started = host_client.post(f'/api/maintenance/{cycle_id}/start/')
        assert started.json()['status'] == 'in_progress'

        completed = host_client.post(f'/api/maintenance/{cycle_id}/complete/')
        assert completed.json()['status'] == 'completed'
        assert completed.json()['completedAt']

    def test_foreign_vehicle_is_rejected(self, host_client, make_vehicle, other_host):
        foreign = make_vehicle(host=other_host)
        response = host_client.post('/api/maintenance/', {'vehicleId': foreign.id}, format='json')
        assert response.status_code == 400
        assert 'vehicleId' in response.json()


@pytest.mark.django_db
class TestFleets:
    def test_create_and_detail_metrics(self, host_client, make_vehicle, book, jan):
        available = make_vehicle()
        idle = make_vehicle(status='inactive')
        reservation = book(available, jan(10), jan(12))
        for status in ('confirmed', 'active', 'completed'):
            reservations.transition(reservation.id, status)

        response = host_client.post('/api/fleets/', {
            'name': 'Downtown',
            'location': 'Austin, TX',
            'vehicleIds': [available.id, idle.id],
        }, format='json')
        assert response.status_code == 201
        fleet_id = response.json()['id']
        assert fleet_id.startswith('fleet_')

        detail = host_client.get(f'/api/fleets/{fleet_id}/').json()
        assert {v['id'] for v in detail['vehicles']} == {available.id, idle.id}
        assert detail['metrics']['totalVehicles'] == 2
        assert detail['metrics']['activeVehicles'] == 1
        assert detail['metrics']['utilizationRate'] == 50.0
        assert detail['metrics']['totalReservations'] == 1
        assert detail['metrics']['totalRevenue'] == 100.0

    def test_foreign_vehicles_are_rejected(self, host_client, make_vehicle, other_host):
        foreign = make_vehicle(host=other_host)
        response = host_client.post('/api/fleets/', {'name': 'Mixed', 'vehicleIds': [foreign.id]}, format='json')
        assert response.status_code == 400
        assert not Fleet.objects.exists()

    def test_support_staff_see_every_fleet(self, support_client, host, other_host):
        Fleet.objects.create(host=host, name='A')
        Fleet.objects.create(host=other_host, name='B')

        assert len(support_client.get('/api/fleets/').json()) == 2


@pytest.mark.django_db
class TestAdminApproval:
    def test_back_office_approves_a_listing(self, support_client, make_vehicle):
        pending = make_vehicle(status='pending')

        response = support_client.put(f'/api/admin/vehicles/{pending.id}/', {'status': 'available'}, format='json')

        assert response.status_code == 200
        assert response.json()['status'] == 'available'

    def test_hosts_cannot_approve(self, host_client, make_vehicle):
        pending = make_vehicle(status='pending')
        response = host_client.put(f'/api/admin/vehicles/{pending.id}/', {'status': 'available'}, format='json')
        assert response.status_code == 403

    def test_admin_list_filters(self, support_client, make_vehicle):
        make_vehicle(status='pending')
        make_vehicle(status='available')
        response = support_client.get('/api/admin/vehicles/', {'status': 'pending'})
        assert [v['status'] for v in response.json()] == ['pending']
