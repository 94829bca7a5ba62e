import logging

import pytest
from rest_framework.exceptions import ValidationError

from api.exceptions import DuplicateTripError, InvalidMileageError, InvalidTransitionError, NotFoundError
from bookings.models import Reservation
from bookings.services import lifecycle as reservations
from trips.models import Trip
from trips.services import lifecycle


@pytest.fixture
def reservation(vehicle, book, jan):
    return book(vehicle, jan(10), jan(12))


@pytest.fixture
def trip(reservation):
    reservations.transition(reservation.id, 'confirmed')
    return Trip.objects.get(booking_id=reservation.id)


@pytest.mark.django_db
class TestOpen:
    def test_open_requires_a_confirmed_reservation(self, reservation):
        with pytest.raises(InvalidTransitionError):
            lifecycle.open(reservation.id)
        assert not Trip.objects.exists()

    def test_open_copies_the_reservation(self, reservation):
        Reservation.objects.filter(pk=reservation.id).update(status='confirmed')

        trip = lifecycle.open(reservation.id)

        assert trip.id.startswith('trip_')
        assert trip.status == 'scheduled'
        assert trip.booking_id == reservation.id
        assert trip.pickup_location == reservation.pickup_location

    def test_one_trip_per_booking(self, trip):
        with pytest.raises(DuplicateTripError):
            lifecycle.open(trip.booking_id)
        assert Trip.objects.filter(booking_id=trip.booking_id).count() == 1

    def test_unknown_reservation(self, db):
        with pytest.raises(NotFoundError):
            lifecycle.open('booking_0_missing')


@pytest.mark.django_db
class TestStartAndComplete:
    def test_start_stamps_pickup(self, trip):
        started = lifecycle.start(trip.id, mileage_start=1000, fuel_level_start=80, condition_start='Clean')

        assert started.status == 'active'
        assert started.pickup_time is not None
        assert (started.mileage_start, started.fuel_level_start, started.condition_start) == (1000, 80, 'Clean')

    def test_start_twice_is_refused(self, trip):
        lifecycle.start(trip.id, mileage_start=1000)
        with pytest.raises(InvalidTransitionError):
            lifecycle.start(trip.id, mileage_start=1000)

    def test_mileage_cannot_go_backwards(self, trip):
        lifecycle.start(trip.id, mileage_start=1000)

        with pytest.raises(InvalidMileageError):
            lifecycle.complete(trip.id, mileage_end=950)

        stored = Trip.objects.get(pk=trip.id)
        assert stored.status == 'active'
        assert stored.mileage_end is None

    def test_complete_without_start_is_refused(self, trip):
        with pytest.raises(InvalidTransitionError):
            lifecycle.complete(trip.id, mileage_end=1200)

    def test_complete_records_return(self, trip):
        lifecycle.start(trip.id, mileage_start=1000)

        done = lifecycle.complete(trip.id, mileage_end=1000, fuel_level_end=50, issues=['Scratch on bumper'])

        assert done.status == 'completed'
        assert done.return_time is not None
        assert done.issues == ['Scratch on bumper']

    def test_issues_are_appended_in_order(self, trip):
        Trip.objects.filter(pk=trip.id).update(status='active', issues=['Low tire'])

        done = lifecycle.complete(trip.id, issues=['Scratch', 'Dent'])

        assert done.issues == ['Low tire', 'Scratch', 'Dent']

    @pytest.mark.parametrize('readings', [
        {'fuel_level_start': 101},
        {'fuel_level_start': -1},
        {'mileage_start': -5},
    ])
    def test_readings_are_validated_before_writing(self, trip, readings):
        with pytest.raises(ValidationError):
            lifecycle.start(trip.id, **readings)
        assert Trip.objects.get(pk=trip.id).status == 'scheduled'

    def test_completing_a_trip_of_a_cancelled_reservation_warns(self, trip, caplog):
        lifecycle.start(trip.id)
        Reservation.objects.filter(pk=trip.booking_id).update(status='cancelled')

        with caplog.at_level(logging.WARNING, logger='bookings.receivers'):
            lifecycle.complete(trip.id)

        assert Reservation.objects.get(pk=trip.booking_id).status == 'cancelled'
        assert 'reservation left unchanged' in caplog.text


@pytest.mark.django_db
class TestCancel:
    def test_cancel_scheduled_trip(self, trip):
        assert lifecycle.cancel(trip.id).status == 'cancelled'

    def test_active_trip_cannot_be_cancelled(self, trip):
        lifecycle.start(trip.id)
        with pytest.raises(InvalidTransitionError):
            lifecycle.cancel(trip.id)


@pytest.mark.django_db
def test_reads(trip, other_driver, make_vehicle, book, jan):
    other = book(make_vehicle(), jan(10), jan(12), by=other_driver)
    reservations.transition(other.id, 'confirmed')
    lifecycle.start(trip.id)

    assert [t.id for t in lifecycle.get_active()] == [trip.id]
    assert [t.id for t in lifecycle.get_by_driver(trip.driver_id)] == [trip.id]
    assert len(lifecycle.get_by_host(trip.host_id)) == 2
    assert lifecycle.filter(status='scheduled')[0].booking_id == other.id


@pytest.mark.django_db
class TestTripAPI:
    def test_list_filters(self, driver_client, host_client, trip):
        response = driver_client.get('/api/trips', {'status': 'scheduled'})
        assert [t['id'] for t in response.json()] == [trip.id]

        response = host_client.get('/api/trips/', {'hostId': trip.host_id})
        assert [t['bookingId'] for t in response.json()] == [trip.booking_id]

        assert driver_client.get('/api/trips', {'status': 'active'}).json() == []

    def test_start_and_complete(self, driver_client, trip):
        response = driver_client.post(
            f'/api/trips/{trip.id}/start', {'mileageStart': 1000, 'fuelLevelStart': 90}, format='json',
        )
        assert response.status_code == 200
        assert response.json()['status'] == 'active'
        assert response.json()['mileageStart'] == 1000

        assert [t['id'] for t in driver_client.get('/api/trips/active').json()] == [trip.id]

        again = driver_client.post(f'/api/trips/{trip.id}/start', {}, format='json')
        assert again.status_code == 409
        assert again.json()['code'] == 'invalid_transition'

        backwards = driver_client.post(f'/api/trips/{trip.id}/complete', {'mileageEnd': 950}, format='json')
        assert backwards.status_code == 400
        assert backwards.json()['code'] == 'invalid_mileage'

        done = driver_client.post(
            f'/api/trips/{trip.id}/complete/', {'mileageEnd': 1250, 'issues': ['Chip in windshield']}, format='json',
        )
        assert done.status_code == 200
        assert done.json()['status'] == 'completed'
        assert done.json()['issues'] == ['Chip in windshield']
        assert Reservation.objects.get(pk=trip.booking_id).status == 'completed'

    def test_fuel_level_out_of_range(self, driver_client, trip):
        response = driver_client.post(f'/api/trips/{trip.id}/start', {'fuelLevelStart': 150}, format='json')
        assert response.status_code == 400
        assert 'fuelLevelStart' in response.json()

    def test_open_duplicate(self, host_client, trip):
        response = host_client.post('/api/trips', {'reservationId': trip.booking_id}, format='json')
        assert response.status_code == 409
        assert response.json()['code'] == 'duplicate_trip'

    def test_strangers_cannot_touch_a_trip(self, client_for, other_driver, trip):
        stranger = client_for(other_driver.user)

        assert stranger.get(f'/api/trips/{trip.id}').status_code == 403
        assert stranger.post(f'/api/trips/{trip.id}/start', {}, format='json').status_code == 403
        assert stranger.get('/api/trips').json() == []

    def test_cancel(self, host_client, trip):
        response = host_client.post(f'/api/trips/{trip.id}/cancel')
        assert response.status_code == 200
        assert response.json()['status'] == 'cancelled'

    def test_unknown_trip(self, driver_client):
        assert driver_client.get('/api/trips/trip_0_missing').status_code == 404
