import pytest
from channels.db import database_sync_to_async
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator

from support.models import Ticket
from support.routing import websocket_urlpatterns


@pytest.fixture
def ticket(host, vehicle):
    return Ticket.objects.create(host=host, vehicle=vehicle, title='Interior cleaning', type='cleaning_request')


@pytest.mark.django_db
class TestTicketAPI:
    def test_create(self, host_client, host, vehicle):
        response = host_client.post('/api/tickets/', {
            'title': 'Rear bumper damage',
            'type': 'accident_report',
            'priority': 'urgent',
            'vehicleId': vehicle.id,
        }, format='json')

        assert response.status_code == 201
        body = response.json()
        assert body['id'].startswith('ticket_')
        assert body['hostId'] == host.id
        assert body['status'] == 'open'
        assert body['vehicleId'] == vehicle.id
        assert body['completedAt'] is None

    def test_foreign_vehicle_is_rejected(self, host_client, make_vehicle, other_host):
        foreign = make_vehicle(host=other_host)
        response = host_client.post('/api/tickets/', {'title': 'x', 'vehicleId': foreign.id}, format='json')
        assert response.status_code == 400
        assert 'vehicleId' in response.json()

    def test_completion_is_stamped_once(self, host_client, ticket):
        url = f'/api/tickets/{ticket.id}/'

        first = host_client.patch(url, {'status': 'completed'}, format='json').json()['completedAt']
        assert first

        host_client.patch(url, {'status': 'in_progress'}, format='json')
        again = host_client.patch(url, {'status': 'completed'}, format='json').json()

        assert again['status'] == 'completed'
        assert again['completedAt'] == first

    def test_filters(self, host_client, host, ticket):
        Ticket.objects.create(host=host, title='Check tires', type='vehicle_inspection', status='assigned')

        response = host_client.get('/api/tickets/', {'status': 'open'})

        assert [t['id'] for t in response.json()] == [ticket.id]
        assert len(host_client.get('/api/tickets/', {'type': 'vehicle_inspection'}).json()) == 1

    def test_replies(self, host_client, support_client, ticket):
        response = host_client.post(f'/api/tickets/{ticket.id}/reply/', {'message': 'Needs a deep clean'}, format='json')
        assert response.status_code == 201
        assert response.json()['sender'] == 'hostuser'

        assert support_client.post(f'/api/tickets/{ticket.id}/reply/', {'message': 'Booked'}, format='json').status_code == 201

        replies = host_client.get(f'/api/tickets/{ticket.id}/reply/').json()
        assert [r['message'] for r in replies] == ['Needs a deep clean', 'Booked']
        assert len(host_client.get(f'/api/tickets/{ticket.id}/').json()['replies']) == 2

    def test_other_hosts_cannot_see_the_ticket(self, client_for, other_host, ticket):
        stranger = client_for(other_host.user)
        assert stranger.get(f'/api/tickets/{ticket.id}/').status_code == 404
        assert stranger.get('/api/tickets/').json() == []

    def test_types(self, host_client):
        body = host_client.get('/api/tickets/types/').json()
        assert 'guest_checkout' in [t['value'] for t in body['types']]
        assert [p['value'] for p in body['priorities']] == ['low', 'medium', 'high', 'urgent']


def connect(user, ticket_id):
    communicator = WebsocketCommunicator(URLRouter(websocket_urlpatterns), f'/ws/tickets/{ticket_id}/')
    communicator.scope['user'] = user
    return communicator


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
async def test_reply_feed(host, ticket):
    communicator = connect(host.user, ticket.id)
    connected, _ = await communicator.connect()
    assert connected

    await communicator.send_json_to({'message': 'Car is ready'})
    event = await communicator.receive_json_from()

    assert event['message'] == 'Car is ready'
    assert event['author'] == 'hostuser'
    await communicator.disconnect()
    assert await database_sync_to_async(ticket.replies.count)() == 1


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
async def test_reply_feed_refuses_other_hosts(other_host, ticket):
    communicator = connect(other_host.user, ticket.id)
    connected, _ = await communicator.connect()
    assert not connected


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
async def test_reply_feed_rejects_payloads_that_are_not_objects(host, ticket):
    communicator = connect(host.user, ticket.id)
    await communicator.connect()

    await communicator.send_json_to([1])
    assert 'error' in await communicator.receive_json_from()
    await communicator.send_to(text_data='not json')
    assert 'error' in await communicator.receive_json_from()

    await communicator.disconnect()
    assert await database_sync_to_async(ticket.replies.count)() == 0


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
async def test_reply_feed_reports_a_deleted_ticket(host, ticket):
    communicator = connect(host.user, ticket.id)
    await communicator.connect()
    await database_sync_to_async(ticket.delete)()

    await communicator.send_json_to({'message': 'Anyone there?'})

    assert (await communicator.receive_json_from())['error'] == 'Ticket not found.'
    await communicator.disconnect()
