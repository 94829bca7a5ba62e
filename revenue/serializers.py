from rest_framework import serializers

from .models import RevenueRecord


class RevenueRecordSerializer(serializers.ModelSerializer):
    hostId = serializers.CharField(source='host_id', read_only=True)
    vehicleId = serializers.CharField(source='vehicle_id', read_only=True)
    reservationId = serializers.CharField(source='reservation_id', read_only=True)
    bookingRevenue = serializers.DecimalField(source='booking_revenue', max_digits=12, decimal_places=2)
    maintenanceCost = serializers.DecimalField(source='maintenance_cost', max_digits=12, decimal_places=2)
    cleaningCost = serializers.DecimalField(source='cleaning_cost', max_digits=12, decimal_places=2)
    subscriptionFee = serializers.DecimalField(source='subscription_fee', max_digits=12, decimal_places=2)
    netRevenue = serializers.DecimalField(source='net_revenue', max_digits=12, decimal_places=2)

    class Meta:
        model = RevenueRecord
        fields = [
            'id', 'hostId', 'vehicleId', 'reservationId', 'date', 'bookingRevenue',
            'maintenanceCost', 'cleaningCost', 'subscriptionFee', 'netRevenue', 'source',
        ]
        read_only_fields = fields
