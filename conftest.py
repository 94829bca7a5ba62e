import datetime
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from bookings.services import lifecycle
from users.models import Driver, Host, User
from vehicles.models import Vehicle

PASSWORD = 'Fleet-Pass-2024'


def authenticated_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def host_user(db):
    return User.objects.create_user(username='hostuser', email='host@example.com', password=PASSWORD, role='host')


@pytest.fixture
def host(host_user):
    return Host.objects.create(user=host_user, company_name='Acme Fleet', location='Austin, TX')


@pytest.fixture
def other_host(db):
    user = User.objects.create_user(username='otherhost', email='other@example.com', password=PASSWORD, role='host')
    return Host.objects.create(user=user, company_name='Other Fleet', location='Denver, CO')


@pytest.fixture
def driver_user(db):
    return User.objects.create_user(
        username='driveruser', email='driver@example.com', password=PASSWORD, role='driver',
        first_name='Dana', last_name='Driver',
    )


@pytest.fixture
def driver(driver_user):
    return Driver.objects.create(user=driver_user, license_number='D1234567')


@pytest.fixture
def other_driver(db):
    user = User.objects.create_user(username='otherdriver', email='od@example.com', password=PASSWORD, role='driver')
    return Driver.objects.create(user=user, license_number='D7654321')


@pytest.fixture
def support_user(db):
    return User.objects.create_user(username='support', email='support@example.com', password=PASSWORD, role='support')


@pytest.fixture
def host_client(host):
    return authenticated_client(host.user)


@pytest.fixture
def driver_client(driver):
    return authenticated_client(driver.user)


@pytest.fixture
def support_client(support_user):
    return authenticated_client(support_user)


@pytest.fixture
def make_vehicle(host):
    def make(**fields):
        fields.setdefault('host', host)
        fields.setdefault('make', 'Toyota')
        fields.setdefault('model', 'Camry')
        fields.setdefault('year', 2022)
        fields.setdefault('daily_rate', Decimal('50.00'))
        fields.setdefault('location', 'Austin, TX')
        fields.setdefault('status', 'available')
        return Vehicle.objects.create(**fields)
    return make


@pytest.fixture
def vehicle(make_vehicle):
    return make_vehicle()


@pytest.fixture
def book(driver):
    """Create a reservation through the lifecycle; dates are ``date`` objects or ISO strings."""
    def create(vehicle, pickup, ret, by=None):
        return lifecycle.create(
            vehicle.id, by or driver, pickup, ret,
            contact_info={'driver_name': 'Dana Driver', 'driver_email': 'driver@example.com'},
        )
    return create


@pytest.fixture
def jan():
    return lambda day: datetime.date(2025, 1, day)


@pytest.fixture
def client_for(db):
    return authenticated_client
