import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

from api.repository import Repository

from .models import Ticket, TicketReply

logger = logging.getLogger(__name__)

tickets = Repository(Ticket)


def ticket_group(ticket_id):
    return f'ticket_{ticket_id}'


def broadcast(ticket_id, event):
    layer = get_channel_layer()
    if layer is not None:
        async_to_sync(layer.group_send)(ticket_group(ticket_id), event)


def update_ticket(ticket, changes):
    """Apply ``changes``; the first move to ``completed`` stamps ``completed_at``."""
    changes = dict(changes)
    previous = ticket.status
    if changes.get('status') == 'completed' and not ticket.completed_at:
        changes['completed_at'] = timezone.now()
    tickets.save(ticket, **changes)
    if ticket.status != previous:
        logger.info('Ticket %s: %s -> %s', ticket.id, previous, ticket.status)
        broadcast(ticket.id, {
            'type': 'ticket_status',
            'status': ticket.status,
            'updated_at': ticket.updated_at.isoformat(),
        })
    return ticket


def add_reply(ticket, sender, message):
    reply = TicketReply.objects.create(ticket=ticket, sender=sender, message=message)
    logger.info('Reply %s on ticket %s by %s', reply.id, ticket.id, sender.username)
    return reply


def can_access(user, ticket):
    if user.is_back_office:
        return True
    host = user.host
    return host is not None and ticket.host_id == host.id
