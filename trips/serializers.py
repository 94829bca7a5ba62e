from rest_framework import serializers

from .models import Trip


class TripSerializer(serializers.ModelSerializer):
    bookingId = serializers.CharField(source='booking_id', read_only=True)
    driverId = serializers.CharField(source='driver_id', read_only=True)
    vehicleId = serializers.CharField(source='vehicle_id', read_only=True)
    hostId = serializers.CharField(source='host_id', read_only=True)
    pickupLocation = serializers.CharField(source='pickup_location', read_only=True)
    returnLocation = serializers.CharField(source='return_location', read_only=True)
    pickupTime = serializers.DateTimeField(source='pickup_time', read_only=True)
    returnTime = serializers.DateTimeField(source='return_time', read_only=True)
    mileageStart = serializers.IntegerField(source='mileage_start', read_only=True)
    mileageEnd = serializers.IntegerField(source='mileage_end', read_only=True)
    fuelLevelStart = serializers.IntegerField(source='fuel_level_start', read_only=True)
    fuelLevelEnd = serializers.IntegerField(source='fuel_level_end', read_only=True)
    conditionStart = serializers.CharField(source='condition_start', read_only=True)
    conditionEnd = serializers.CharField(source='condition_end', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Trip
        fields = [
            'id', 'bookingId', 'driverId', 'vehicleId', 'hostId', 'status',
            'pickupLocation', 'returnLocation', 'pickupTime', 'returnTime',
            'mileageStart', 'mileageEnd', 'fuelLevelStart', 'fuelLevelEnd',
            'conditionStart', 'conditionEnd', 'issues', 'createdAt', 'updatedAt',
        ]
        read_only_fields = fields


class TripOpenSerializer(serializers.Serializer):
    reservationId = serializers.CharField()


# Range checks on readings happen in the lifecycle, before any write.
class TripStartSerializer(serializers.Serializer):
    mileageStart = serializers.IntegerField(required=False, allow_null=True)
    fuelLevelStart = serializers.IntegerField(required=False, allow_null=True)
    conditionStart = serializers.CharField(required=False, allow_blank=True)


class TripCompleteSerializer(serializers.Serializer):
    mileageEnd = serializers.IntegerField(required=False, allow_null=True)
    fuelLevelEnd = serializers.IntegerField(required=False, allow_null=True)
    conditionEnd = serializers.CharField(required=False, allow_blank=True)
    issues = serializers.ListField(child=serializers.CharField(), required=False)
