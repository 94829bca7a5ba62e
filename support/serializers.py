from rest_framework import serializers

from .models import Ticket, TicketReply


class TicketReplySerializer(serializers.ModelSerializer):
    sender = serializers.StringRelatedField(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = TicketReply
        fields = ['id', 'sender', 'message', 'createdAt']


class TicketSerializer(serializers.ModelSerializer):
    hostId = serializers.CharField(source='host_id', read_only=True)
    vehicleId = serializers.CharField(source='vehicle_id', required=False, allow_null=True)
    reservationId = serializers.CharField(source='reservation_id', required=False, allow_null=True)
    assignedTo = serializers.CharField(source='assigned_to', required=False, allow_blank=True)
    dueDate = serializers.DateField(source='due_date', required=False, allow_null=True)
    completedAt = serializers.DateTimeField(source='completed_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)
    replies = TicketReplySerializer(many=True, read_only=True)

    class Meta:
        model = Ticket
        fields = [
            'id', 'hostId', 'vehicleId', 'reservationId', 'type', 'status', 'priority',
            'title', 'description', 'assignedTo', 'dueDate', 'completedAt',
            'createdAt', 'updatedAt', 'replies',
        ]

    def validate(self, attrs):
        host = self.context.get('host')
        vehicle_id = attrs.get('vehicle_id')
        if host is not None and vehicle_id and not host.vehicles.filter(pk=vehicle_id).exists():
            raise serializers.ValidationError({'vehicleId': 'Unknown vehicle.'})
        reservation_id = attrs.get('reservation_id')
        if host is not None and reservation_id and not host.reservations.filter(pk=reservation_id).exists():
            raise serializers.ValidationError({'reservationId': 'Unknown reservation.'})
        return attrs
