from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from api.views import HostOwnedViewSet

from . import services
from .models import Ticket
from .serializers import TicketReplySerializer, TicketSerializer


class TicketViewSet(HostOwnedViewSet):
    """Operational tickets; support staff see every host's tickets."""
    queryset = Ticket.objects.select_related('host').prefetch_related('replies__sender')
    serializer_class = TicketSerializer
    filter_params = {'status': 'status', 'type': 'type', 'priority': 'priority', 'vehicleId': 'vehicle_id'}

    def perform_create(self, serializer):
        ticket = serializer.save(host=self.get_host(), opened_by=self.request.user)
        services.logger.info('Ticket %s opened: %s (%s)', ticket.id, ticket.title, ticket.type)

    def perform_update(self, serializer):
        serializer.instance = services.update_ticket(serializer.instance, serializer.validated_data)

    @action(detail=True, methods=['get', 'post'])
    def reply(self, request, pk=None):
        ticket = self.get_object()
        if request.method == 'GET':
            return Response(TicketReplySerializer(ticket.replies.all(), many=True).data)
        serializer = TicketReplySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reply = services.add_reply(ticket, request.user, serializer.validated_data['message'])
        data = TicketReplySerializer(reply).data
        services.broadcast(ticket.id, {
            'type': 'ticket_message',
            'message': reply.message,
            'author': reply.author,
            'created_at': reply.created_at.isoformat(),
        })
        return Response(data, status=status.HTTP_201_CREATED)


class TicketTypesView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({
            'types': [{'value': value, 'label': label} for value, label in Ticket.TYPE_CHOICES],
            'statuses': [{'value': value, 'label': label} for value, label in Ticket.STATUS_CHOICES],
            'priorities': [{'value': value, 'label': label} for value, label in Ticket.PRIORITY_CHOICES],
        })
