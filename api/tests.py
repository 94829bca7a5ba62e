import logging
import re

import pytest
from django.db import DatabaseError
from django.dispatch import Signal
from rest_framework.authtoken.models import Token

from api.events import publish
from api.exceptions import StorageError
from api.ids import generate_id
from api.repository import Repository
from users.models import Lead
from vehicles.models import Vehicle

PASSWORD = 'Fleet-Pass-2024'
ID_PATTERN = re.compile(r'^booking_\d{13}_[a-z0-9]{9}$')


def broken_queryset():
    raise DatabaseError('disk I/O error')


def test_generate_id_format():
    ids = {generate_id('booking') for _ in range(200)}
    assert len(ids) == 200
    assert all(ID_PATTERN.match(value) for value in ids)


@pytest.mark.django_db
class TestRepository:
    def test_insert_generates_id_and_timestamps(self, host):
        lead = Repository(Lead).insert(email='fleet@example.com', type='host')
        assert lead.id.startswith('lead_')
        assert lead.created_at is not None
        assert lead.created_at.tzinfo is not None
        assert lead.updated_at >= lead.created_at

    def test_update_merges_and_refreshes_updated_at(self):
        leads = Repository(Lead)
        lead = leads.insert(email='fleet@example.com', name='Fleet')
        before = lead.updated_at

        merged = leads.update(lead.id, status='contacted')

        assert merged.status == 'contacted'
        assert merged.name == 'Fleet'
        assert merged.updated_at >= before
        assert Lead.objects.get(pk=lead.id).status == 'contacted'

    def test_update_unknown_id_returns_none(self):
        assert Repository(Lead).update('lead_0_missing', status='lost') is None

    def test_delete(self):
        leads = Repository(Lead)
        lead = leads.insert(email='fleet@example.com')
        assert leads.delete(lead.id) is True
        assert leads.delete(lead.id) is False
        assert leads.get_by_id(lead.id) is None

    def test_list_filters(self, make_vehicle):
        make_vehicle(status='available')
        make_vehicle(status='maintenance')
        assert [v.status for v in Repository(Vehicle).list(status='maintenance')] == ['maintenance']

    def test_list_degrades_to_empty_and_logs(self, monkeypatch, caplog, vehicle):
        repo = Repository(Vehicle)
        monkeypatch.setattr(repo, 'queryset', broken_queryset)

        with caplog.at_level(logging.ERROR, logger='api.repository'):
            assert repo.list() == []

        assert any(record.levelno == logging.ERROR for record in caplog.records)

    def test_other_operations_raise_storage_error(self, monkeypatch):
        repo = Repository(Vehicle)
        monkeypatch.setattr(repo, 'queryset', broken_queryset)

        with pytest.raises(StorageError):
            repo.get_by_id('vehicle_1_abc')
        with pytest.raises(StorageError):
            repo.delete('vehicle_1_abc')


def test_publish_isolates_failing_receivers(caplog):
    signal = Signal()
    received = []

    def failing(sender, **kwargs):
        raise RuntimeError('boom')

    def recording(sender, **kwargs):
        received.append(kwargs['value'])

    signal.connect(failing, weak=False)
    signal.connect(recording, weak=False)

    with caplog.at_level(logging.ERROR, logger='api.events'):
        publish(signal, Vehicle, value=42)

    assert received == [42]
    assert 'failing' in caplog.text


@pytest.mark.django_db
def test_domain_errors_render_error_and_code(api_client):
    response = api_client.get('/api/bookings/available', {'startDate': '2025-01-12', 'endDate': '2025-01-10'})

    assert response.status_code == 400
    assert response.json()['code'] == 'invalid_range'
    assert 'error' in response.json()


@pytest.mark.django_db
class TestAuth:
    def test_register_host_creates_profile_and_token(self, api_client):
        response = api_client.post('/api/register/', {
            'username': 'newhost',
            'email': 'newhost@example.com',
            'password': PASSWORD,
            'password2': PASSWORD,
            'role': 'host',
            'companyName': 'New Fleet',
        }, format='json')

        assert response.status_code == 201
        body = response.json()
        assert body['token']
        assert body['user']['role'] == 'host'
        assert body['user']['hostId'].startswith('host_')
        assert body['user']['driverId'] is None

    def test_register_driver_by_default(self, api_client):
        response = api_client.post('/api/register/', {
            'username': 'newdriver',
            'email': 'newdriver@example.com',
            'password': PASSWORD,
            'password2': PASSWORD,
        }, format='json')

        assert response.status_code == 201
        assert response.json()['user']['driverId'].startswith('driver_')

    def test_register_rejects_mismatched_passwords(self, api_client):
        response = api_client.post('/api/register/', {
            'username': 'newdriver',
            'email': 'newdriver@example.com',
            'password': PASSWORD,
            'password2': PASSWORD + 'x',
        }, format='json')

        assert response.status_code == 400
        assert 'password' in response.json()

    def test_login_and_logout(self, api_client, driver):
        response = api_client.post('/api/login/', {'username': 'driveruser', 'password': PASSWORD}, format='json')
        assert response.status_code == 200
        token = response.json()['token']

        api_client.credentials(HTTP_AUTHORIZATION=f'Token {token}')
        assert api_client.post('/api/logout/').status_code == 204
        assert not Token.objects.filter(key=token).exists()

    def test_login_with_bad_credentials(self, api_client, driver):
        response = api_client.post('/api/login/', {'username': 'driveruser', 'password': 'nope'}, format='json')
        assert response.status_code == 401

    def test_profile_includes_role_profile(self, host_client, host):
        response = host_client.get('/api/profile/')

        assert response.status_code == 200
        assert response.json()['host']['id'] == host.id
        assert response.json()['host']['companyName'] == 'Acme Fleet'

    def test_anonymous_requests_are_rejected(self, api_client):
        assert api_client.get('/api/profile/').status_code in (401, 403)


@pytest.mark.django_db
def test_driver_dashboard(driver_client, driver, vehicle, book, jan):
    book(vehicle, jan(10), jan(12))

    response = driver_client.get('/api/dashboard/')

    assert response.status_code == 200
    assert response.json()['driverId'] == driver.id
    assert len(response.json()['recent_reservations']) == 1


@pytest.mark.django_db
def test_host_dashboard(host_client, host, vehicle):
    response = host_client.get('/api/dashboard/')

    assert response.status_code == 200
    assert response.json()['hostId'] == host.id
    assert [v['id'] for v in response.json()['vehicles']] == [vehicle.id]
