import datetime
import gc
import threading
from decimal import Decimal

import pytest
from django.db import connection
from rest_framework.exceptions import ValidationError

from api.exceptions import (
    InvalidRangeError, InvalidTransitionError, VehicleNotFoundError, VehicleUnavailableError,
)
from bookings import calendar
from bookings.availability import find_available, overlaps
from bookings.models import Reservation
from bookings.services import lifecycle, rental_days
from revenue.models import RevenueRecord
from trips.models import Trip
from trips.services import lifecycle as trips
from vehicles.models import Vehicle

D = datetime.date
STATUSES = ('pending', 'confirmed', 'active', 'completed', 'cancelled')
LEGAL = {
    ('pending', 'confirmed'),
    ('confirmed', 'active'),
    ('active', 'completed'),
    ('pending', 'cancelled'),
    ('confirmed', 'cancelled'),
}
CONTACT = {'driver_name': 'Dana Driver', 'driver_email': 'driver@example.com'}


@pytest.mark.parametrize('a, b, expected', [
    ((D(2025, 1, 1), D(2025, 1, 5)), (D(2025, 1, 4), D(2025, 1, 6)), True),
    ((D(2025, 1, 1), D(2025, 1, 5)), (D(2025, 1, 5), D(2025, 1, 7)), False),
    ((D(2025, 1, 5), D(2025, 1, 7)), (D(2025, 1, 1), D(2025, 1, 5)), False),
    ((D(2025, 1, 1), D(2025, 1, 10)), (D(2025, 1, 3), D(2025, 1, 4)), True),
    ((D(2025, 1, 5), D(2025, 1, 5)), (D(2025, 1, 5), D(2025, 1, 6)), False),
    ((D(2025, 1, 5), D(2025, 1, 5)), (D(2025, 1, 4), D(2025, 1, 5)), False),
    ((D(2025, 1, 5), D(2025, 1, 5)), (D(2025, 1, 5), D(2025, 1, 5)), False),
    ((D(2025, 1, 5), D(2025, 1, 5)), (D(2025, 1, 4), D(2025, 1, 6)), True),
])
def test_overlaps_is_half_open(a, b, expected):
    assert overlaps(*a, *b) is expected
    assert overlaps(*b, *a) is expected


@pytest.mark.parametrize('pickup, ret, days', [
    (D(2025, 1, 10), D(2025, 1, 12), 2),
    (D(2025, 1, 10), D(2025, 1, 10), 1),
    (datetime.datetime(2025, 1, 10, 9), datetime.datetime(2025, 1, 11, 15), 2),
])
def test_rental_days_rounds_up_with_minimum_of_one(pickup, ret, days):
    assert rental_days(pickup, ret) == days


@pytest.mark.django_db
class TestFindAvailable:
    def test_returns_every_available_vehicle_without_conflicts(self, make_vehicle, other_host):
        austin = make_vehicle(location='Austin, TX')
        denver = make_vehicle(host=other_host, location='Denver, CO')
        make_vehicle(status='maintenance')
        make_vehicle(status='inactive')
        make_vehicle(status='pending')

        found = find_available('2025-02-01', '2025-02-03')

        assert {v.id for v in found} == {austin.id, denver.id}

    def test_excludes_vehicles_with_overlapping_reservations(self, make_vehicle, book, jan):
        booked = make_vehicle()
        free = make_vehicle()
        book(booked, jan(10), jan(12))

        assert [v.id for v in find_available('2025-01-11', '2025-01-13')] == [free.id]
        assert {v.id for v in find_available('2025-01-12', '2025-01-14')} == {booked.id, free.id}

    def test_cancelled_reservations_do_not_block(self, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))
        lifecycle.cancel(reservation.id)

        assert [v.id for v in find_available('2025-01-10', '2025-01-12')] == [vehicle.id]

    def test_location_filter_is_case_insensitive_substring(self, make_vehicle):
        austin = make_vehicle(location='Austin, TX')
        make_vehicle(location='Denver, CO')

        assert [v.id for v in find_available('2025-02-01', '2025-02-03', 'austin')] == [austin.id]

    def test_empty_result_is_not_an_error(self, make_vehicle):
        make_vehicle(status='maintenance')
        assert find_available('2025-02-01', '2025-02-03') == []

    @pytest.mark.parametrize('start, end', [
        ('2025-01-12', '2025-01-10'),
        ('not-a-date', '2025-01-10'),
        ('2025-01-10', None),
        ('', ''),
    ])
    def test_invalid_ranges(self, start, end):
        with pytest.raises(InvalidRangeError):
            find_available(start, end)


@pytest.mark.django_db
class TestCreate:
    def test_prices_and_snapshots_the_rate(self, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))

        assert reservation.id.startswith('booking_')
        assert reservation.total_amount == Decimal('100.00')
        assert reservation.number_of_days == 2
        assert reservation.daily_rate == Decimal('50.00')
        assert reservation.status == 'pending'
        assert reservation.payment_status == 'pending'
        assert reservation.host_id == vehicle.host_id
        assert reservation.created_at is not None

    def test_same_day_booking_bills_one_day(self, vehicle, book, jan):
        assert book(vehicle, jan(10), jan(10)).total_amount == Decimal('50.00')

    def test_accepts_iso_strings(self, vehicle, book):
        reservation = book(vehicle, '2025-01-10', '2025-01-13')
        assert reservation.pickup_date == D(2025, 1, 10)
        assert reservation.total_amount == Decimal('150.00')

    def test_total_is_not_recomputed_when_the_rate_changes(self, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))
        Vehicle.objects.filter(pk=vehicle.pk).update(daily_rate=Decimal('80.00'))

        lifecycle.update(reservation.id, {'notes': 'Late arrival'})
        lifecycle.transition(reservation.id, 'confirmed')

        stored = Reservation.objects.get(pk=reservation.id)
        assert stored.daily_rate == Decimal('50.00')
        assert stored.total_amount == Decimal('100.00')

    def test_overlapping_booking_is_refused(self, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))
        lifecycle.transition(reservation.id, 'confirmed')

        with pytest.raises(VehicleUnavailableError):
            book(vehicle, jan(11), jan(13))
        assert Reservation.objects.count() == 1

    def test_back_to_back_booking_is_allowed(self, vehicle, book, jan):
        book(vehicle, jan(10), jan(12))
        assert book(vehicle, jan(12), jan(14)).status == 'pending'

    def test_booking_from_the_return_day_of_a_same_day_booking(self, vehicle, book, jan):
        book(vehicle, jan(10), jan(10))
        assert book(vehicle, jan(10), jan(12)).status == 'pending'

    def test_same_day_booking_inside_a_reservation_is_refused(self, vehicle, book, jan):
        book(vehicle, jan(10), jan(12))
        with pytest.raises(VehicleUnavailableError):
            book(vehicle, jan(11), jan(11))

    def test_cancellation_frees_the_window(self, vehicle, book, jan):
        first = book(vehicle, jan(10), jan(12))
        lifecycle.cancel(first.id)

        assert book(vehicle, jan(10), jan(12)).status == 'pending'
        assert book(vehicle, jan(12), jan(13)).status == 'pending'

    def test_cancelled_booking_then_shifted_window_succeeds(self, vehicle, book, jan):
        first = book(vehicle, jan(10), jan(12))
        lifecycle.transition(first.id, 'confirmed')
        lifecycle.cancel(first.id)

        assert book(vehicle, jan(11), jan(13)).status == 'pending'

    @pytest.mark.parametrize('status', ['pending', 'rented', 'maintenance', 'inactive'])
    def test_vehicle_must_be_available(self, make_vehicle, book, jan, status):
        with pytest.raises(VehicleUnavailableError):
            book(make_vehicle(status=status), jan(10), jan(12))

    def test_unknown_vehicle(self, driver):
        with pytest.raises(VehicleNotFoundError):
            lifecycle.create('vehicle_0_missing', driver, '2025-01-10', '2025-01-12', CONTACT)

    def test_inverted_range(self, vehicle, book, jan):
        with pytest.raises(InvalidRangeError):
            book(vehicle, jan(12), jan(10))
        assert not Reservation.objects.exists()

    def test_locations_default_to_platform_location(self, vehicle, book, jan, settings):
        assert book(vehicle, jan(10), jan(12)).pickup_location == settings.PLATFORM_LOCATION


@pytest.mark.django_db
def test_calendar_locks_are_dropped_once_released(vehicle):
    with calendar.vehicle_calendar(vehicle.id) as locked:
        assert locked.id in calendar._vehicle_locks

    gc.collect()
    assert vehicle.id not in calendar._vehicle_locks


@pytest.mark.django_db(transaction=True)
def test_concurrent_overlapping_creates_commit_once(vehicle, driver, other_driver):
    barrier = threading.Barrier(2)
    outcomes = []

    def attempt(who):
        try:
            barrier.wait()
            lifecycle.create(vehicle.id, who, '2025-03-01', '2025-03-05', CONTACT)
            outcomes.append('created')
        except VehicleUnavailableError:
            outcomes.append('refused')
        except Exception as exc:
            outcomes.append(repr(exc))
        finally:
            connection.close()

    threads = [threading.Thread(target=attempt, args=(who,)) for who in (driver, other_driver)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert sorted(outcomes) == ['created', 'refused']
    assert Reservation.objects.filter(vehicle_id=vehicle.id).count() == 1


@pytest.mark.django_db
class TestTransitions:
    @pytest.mark.parametrize('current', STATUSES)
    @pytest.mark.parametrize('target', STATUSES)
    def test_transition_table(self, vehicle, book, jan, current, target):
        reservation = book(vehicle, jan(10), jan(12))
        Reservation.objects.filter(pk=reservation.id).update(status=current)

        if (current, target) in LEGAL:
            assert lifecycle.transition(reservation.id, target).status == target
        else:
            with pytest.raises(InvalidTransitionError):
                lifecycle.transition(reservation.id, target)
            assert Reservation.objects.get(pk=reservation.id).status == current

    def test_unknown_status(self, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))
        with pytest.raises(InvalidTransitionError):
            lifecycle.transition(reservation.id, 'archived')

    def test_update_contact_fields_refreshes_updated_at(self, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))

        updated = lifecycle.update(reservation.id, {'notes': 'Child seat', 'driver_phone': '555-0100'})

        assert updated.notes == 'Child seat'
        assert updated.driver_phone == '555-0100'
        assert updated.updated_at >= reservation.updated_at

    def test_update_can_move_status(self, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))
        updated = lifecycle.update(reservation.id, {'status': 'confirmed', 'payment_status': 'paid'})
        assert (updated.status, updated.payment_status) == ('confirmed', 'paid')

    @pytest.mark.parametrize('field', ['vehicle_id', 'total_amount', 'daily_rate', 'pickup_date'])
    def test_booking_terms_are_immutable(self, vehicle, book, jan, field):
        reservation = book(vehicle, jan(10), jan(12))
        with pytest.raises(ValidationError):
            lifecycle.update(reservation.id, {field: '1'})

    def test_terminal_reservation_cannot_be_edited(self, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))
        lifecycle.cancel(reservation.id)

        with pytest.raises(InvalidTransitionError):
            lifecycle.update(reservation.id, {'notes': 'too late'})


@pytest.mark.django_db
class TestEvents:
    def test_confirmation_opens_a_trip(self, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))
        lifecycle.transition(reservation.id, 'confirmed')

        trip = Trip.objects.get(booking_id=reservation.id)
        assert trip.status == 'scheduled'
        assert (trip.driver_id, trip.vehicle_id, trip.host_id) == (
            reservation.driver_id, reservation.vehicle_id, reservation.host_id,
        )

    def test_full_rental_updates_vehicle_and_revenue(self, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))
        lifecycle.transition(reservation.id, 'confirmed')
        trip = Trip.objects.get(booking_id=reservation.id)

        trips.start(trip.id, mileage_start=1000, fuel_level_start=90)
        assert Reservation.objects.get(pk=reservation.id).status == 'active'
        assert Vehicle.objects.get(pk=vehicle.id).status == 'rented'

        trips.complete(trip.id, mileage_end=1200, fuel_level_end=60)
        assert Reservation.objects.get(pk=reservation.id).status == 'completed'
        assert Vehicle.objects.get(pk=vehicle.id).status == 'available'

        record = RevenueRecord.objects.get(reservation_id=reservation.id)
        assert record.booking_revenue == Decimal('100.00')
        assert record.net_revenue == Decimal('100.00')
        assert record.date == jan(12)

    def test_cancelling_does_not_cascade_to_the_trip(self, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))
        lifecycle.transition(reservation.id, 'confirmed')
        lifecycle.cancel(reservation.id)

        assert Trip.objects.get(booking_id=reservation.id).status == 'scheduled'


@pytest.mark.django_db
class TestReservationAPI:
    def payload(self, vehicle, **overrides):
        data = {
            'vehicleId': vehicle.id,
            'pickupDate': '2025-01-10',
            'returnDate': '2025-01-12',
            'driverName': 'Dana Driver',
            'driverEmail': 'driver@example.com',
        }
        data.update(overrides)
        return data

    def test_create(self, driver_client, driver, vehicle):
        response = driver_client.post('/api/reservations', self.payload(vehicle), format='json')

        assert response.status_code == 201
        body = response.json()
        assert body['id'].startswith('booking_')
        assert body['totalAmount'] == 100
        assert body['numberOfDays'] == 2
        assert body['status'] == 'pending'
        assert body['paymentStatus'] == 'pending'
        assert body['driverId'] == driver.id
        assert body['pickupDate'] == '2025-01-10'

    def test_required_fields(self, driver_client, vehicle):
        data = self.payload(vehicle)
        del data['driverEmail']

        response = driver_client.post('/api/reservations/', data, format='json')

        assert response.status_code == 400
        assert 'driverEmail' in response.json()

    def test_only_drivers_can_book(self, host_client, vehicle):
        response = host_client.post('/api/reservations', self.payload(vehicle), format='json')
        assert response.status_code == 403
        assert response.json()['code'] == 'access_denied'

    def test_conflict_and_missing_vehicle(self, driver_client, vehicle):
        assert driver_client.post('/api/reservations', self.payload(vehicle), format='json').status_code == 201

        conflict = driver_client.post(
            '/api/reservations', self.payload(vehicle, pickupDate='2025-01-11', returnDate='2025-01-13'), format='json',
        )
        assert conflict.status_code == 409
        assert conflict.json()['code'] == 'vehicle_unavailable'

        missing = driver_client.post('/api/reservations', self.payload(vehicle, vehicleId='vehicle_0_x'), format='json')
        assert missing.status_code == 404
        assert missing.json()['code'] == 'vehicle_not_found'

    def test_inverted_dates(self, driver_client, vehicle):
        response = driver_client.post(
            '/api/reservations', self.payload(vehicle, pickupDate='2025-01-12', returnDate='2025-01-10'), format='json',
        )
        assert response.status_code == 400
        assert response.json()['code'] == 'invalid_range'

    def test_owner_access(self, driver_client, host_client, client_for, vehicle, book, jan, other_driver):
        reservation = book(vehicle, jan(10), jan(12))

        assert driver_client.get(f'/api/reservations/{reservation.id}').status_code == 200
        assert host_client.get(f'/api/reservations/{reservation.id}/').status_code == 200

        stranger = client_for(other_driver.user)
        response = stranger.get(f'/api/reservations/{reservation.id}')
        assert response.status_code == 403
        assert response.json()['code'] == 'access_denied'
        assert stranger.delete(f'/api/reservations/{reservation.id}').status_code == 403

    def test_list_is_scoped_to_the_caller(self, driver_client, vehicle, book, jan, other_driver):
        mine = book(vehicle, jan(10), jan(12))
        book(vehicle, jan(20), jan(22), by=other_driver)

        response = driver_client.get('/api/reservations')

        assert [r['id'] for r in response.json()] == [mine.id]

    def test_put_updates_fields_and_transitions(self, host_client, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))

        response = host_client.put(
            f'/api/reservations/{reservation.id}', {'status': 'confirmed', 'notes': 'VIP'}, format='json',
        )

        assert response.status_code == 200
        assert response.json()['status'] == 'confirmed'
        assert response.json()['notes'] == 'VIP'
        assert Trip.objects.filter(booking_id=reservation.id).exists()

    def test_put_rejects_booking_terms(self, driver_client, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))

        response = driver_client.put(f'/api/reservations/{reservation.id}', {'totalAmount': 1}, format='json')

        assert response.status_code == 400
        assert 'totalAmount' in response.json()

    def test_put_illegal_transition(self, host_client, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))

        response = host_client.put(f'/api/reservations/{reservation.id}', {'status': 'completed'}, format='json')

        assert response.status_code == 409
        assert response.json()['code'] == 'invalid_transition'

    @pytest.mark.parametrize('target', ['confirmed', 'active', 'completed'])
    def test_drivers_cannot_advance_their_own_reservation(self, driver_client, vehicle, book, jan, target):
        reservation = book(vehicle, jan(10), jan(12))
        if target != 'confirmed':
            lifecycle.transition(reservation.id, 'confirmed')
        if target == 'completed':
            lifecycle.transition(reservation.id, 'active')

        response = driver_client.put(f'/api/reservations/{reservation.id}', {'status': target}, format='json')

        assert response.status_code == 403
        assert response.json()['code'] == 'access_denied'
        assert Reservation.objects.get(pk=reservation.id).status != target
        assert not RevenueRecord.objects.exists()

    def test_driver_can_cancel_and_edit_contact_details(self, driver_client, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))
        url = f'/api/reservations/{reservation.id}'

        assert driver_client.put(url, {'status': 'pending', 'driverPhone': '555-0100'}, format='json').status_code == 200
        response = driver_client.put(url, {'status': 'cancelled'}, format='json')

        assert response.status_code == 200
        assert response.json()['status'] == 'cancelled'

    def test_delete_cancels(self, driver_client, vehicle, book, jan):
        reservation = book(vehicle, jan(10), jan(12))

        response = driver_client.delete(f'/api/reservations/{reservation.id}')

        assert response.status_code == 200
        assert response.json()['status'] == 'cancelled'
        assert Reservation.objects.get(pk=reservation.id).status == 'cancelled'

    def test_unknown_reservation(self, driver_client):
        response = driver_client.get('/api/reservations/booking_0_missing')
        assert response.status_code == 404
        assert response.json()['code'] == 'not_found'


@pytest.mark.django_db
class TestAvailabilityAPI:
    def test_is_public_and_hides_owner_fields(self, api_client, make_vehicle):
        vehicle = make_vehicle(vin='1HGCM82633A004352')

        response = api_client.get('/api/bookings/available', {'startDate': '2025-02-01', 'endDate': '2025-02-03'})

        assert response.status_code == 200
        [item] = response.json()
        assert item['id'] == vehicle.id
        assert item['dailyRate'] == 50
        assert 'vin' not in item
        assert 'hostId' not in item

    def test_filters_booked_vehicles_and_location(self, api_client, make_vehicle, book, jan):
        booked = make_vehicle(location='Austin, TX')
        free = make_vehicle(location='Austin, TX')
        make_vehicle(location='Denver, CO')
        book(booked, jan(10), jan(12))

        response = api_client.get(
            '/api/bookings/available/', {'startDate': '2025-01-11', 'endDate': '2025-01-12', 'location': 'AUSTIN'},
        )

        assert [item['id'] for item in response.json()] == [free.id]

    def test_missing_dates(self, api_client):
        response = api_client.get('/api/bookings/available')
        assert response.status_code == 400
        assert response.json()['code'] == 'invalid_range'
