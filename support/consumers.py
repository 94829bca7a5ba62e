import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from . import services
from .models import Ticket

logger = logging.getLogger(__name__)


class TicketConsumer(AsyncWebsocketConsumer):
    """Live reply feed of one ticket, open to its host and the back office."""

    async def connect(self):
        self.ticket_id = self.scope['url_route']['kwargs']['ticket_id']
        self.room_group_name = services.ticket_group(self.ticket_id)

        user = self.scope.get("user")
        if user is None or user.is_anonymous or not await self.has_access(user):
            await self.close()
            return

        await self.channel_layer.group_add(self.room_group_name, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.room_group_name, self.channel_name)

    async def receive(self, text_data):
        try:
            data = json.loads(text_data)
        except ValueError:
            data = None
        if not isinstance(data, dict):
            await self.send(text_data=json.dumps({'error': 'Expected a JSON object.'}))
            return

        message = str(data.get('message') or '').strip()
        if not message:
            return

        user = self.scope["user"]
        reply = await self.save_reply(user, message)
        if reply is None:
            await self.send(text_data=json.dumps({'error': 'Ticket not found.'}))
            await self.close()
            return
        await self.channel_layer.group_send(
            self.room_group_name,
            {
                'type': 'ticket_message',
                'message': reply.message,
                'author': user.username,
                'created_at': reply.created_at.isoformat(),
            }
        )

    async def ticket_message(self, event):
        await self.send(text_data=json.dumps({
            'message': event['message'],
            'author': event['author'],
            'created_at': event['created_at'],
        }))

    async def ticket_status(self, event):
        await self.send(text_data=json.dumps({
            'status': event['status'],
            'updated_at': event['updated_at'],
        }))

    @database_sync_to_async
    def has_access(self, user):
        ticket = Ticket.objects.filter(id=self.ticket_id).first()
        if ticket is None:
            return False
        allowed = services.can_access(user, ticket)
        if not allowed:
            logger.warning('User %s refused on ticket %s feed', user.username, self.ticket_id)
        return allowed

    @database_sync_to_async
    def save_reply(self, user, message):
        ticket = Ticket.objects.filter(id=self.ticket_id).first()
        if ticket is None:
            logger.warning('Reply from %s dropped: ticket %s no longer exists', user.username, self.ticket_id)
            return None
        return services.add_reply(ticket, user, message)
