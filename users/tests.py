import pytest

from users.models import Lead


@pytest.mark.django_db
class TestLeads:
    def test_public_capture(self, api_client):
        response = api_client.post('/api/leads/', {
            'email': 'prospect@example.com',
            'name': 'Pat Prospect',
            'type': 'host',
            'source': 'pricing_page',
        }, format='json')

        assert response.status_code == 201
        assert response.json()['id'].startswith('lead_')
        assert response.json()['status'] == 'new'

    def test_status_cannot_be_set_on_capture(self, api_client):
        response = api_client.post('/api/leads/', {'email': 'p@example.com', 'status': 'converted'}, format='json')
        assert Lead.objects.get(pk=response.json()['id']).status == 'new'

    def test_back_office_list_and_update(self, support_client):
        lead = Lead.objects.create(email='p@example.com', type='driver')
        Lead.objects.create(email='h@example.com', type='host')

        assert [item['id'] for item in support_client.get('/api/admin/leads/', {'type': 'driver'}).json()] == [lead.id]

        response = support_client.put(f'/api/admin/leads/{lead.id}/', {'status': 'contacted', 'notes': 'Called'}, format='json')
        assert response.status_code == 200
        assert Lead.objects.get(pk=lead.id).status == 'contacted'

    def test_hosts_cannot_list_leads(self, host_client):
        assert host_client.get('/api/admin/leads/').status_code == 403


@pytest.mark.django_db
class TestProfiles:
    def test_host_profile_billing_fields_are_read_only(self, host_client, host):
        response = host_client.put('/api/hosts/me/', {
            'companyName': 'Acme Rentals',
            'serviceTier': 'enterprise',
            'subscriptionStatus': 'active',
        }, format='json')

        assert response.status_code == 200
        host.refresh_from_db()
        assert host.company_name == 'Acme Rentals'
        assert (host.service_tier, host.subscription_status) == ('none', 'pending')
        assert host.has_active_subscription is False

    def test_driver_profile(self, driver_client, driver):
        response = driver_client.put('/api/drivers/me/', {'licenseNumber': 'X9'}, format='json')

        assert response.json()['licenseNumber'] == 'X9'
        assert response.json()['verificationStatus'] == 'pending'

    def test_profiles_are_role_specific(self, driver_client):
        assert driver_client.get('/api/hosts/me/').status_code == 403


@pytest.mark.django_db
def test_admin_user_list(support_client, host, driver):
    response = support_client.get('/api/admin/users/', {'role': 'host'})
    assert [u['username'] for u in response.json()] == ['hostuser']

    response = support_client.patch(f'/api/admin/users/{driver.user.id}/', {'is_suspended': True}, format='json')
    assert response.status_code == 200
    assert response.json()['is_suspended'] is True
