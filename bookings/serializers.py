from rest_framework import serializers

from .models import Reservation

# Booking terms fixed at creation, as the API names them.
IMMUTABLE_FIELDS = (
    'vehicleId', 'driverId', 'hostId', 'pickupDate', 'returnDate',
    'dailyRate', 'numberOfDays', 'totalAmount',
)


class ContactInfoSerializer(serializers.Serializer):
    driverPhone = serializers.CharField(source='driver_phone', required=False, allow_blank=True)
    driverLicense = serializers.CharField(source='driver_license', required=False, allow_blank=True)
    specialRequests = serializers.CharField(source='special_requests', required=False, allow_blank=True)
    pickupLocation = serializers.CharField(source='pickup_location', required=False, allow_blank=True)
    returnLocation = serializers.CharField(source='return_location', required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class ReservationCreateSerializer(ContactInfoSerializer):
    # Dates stay raw strings; the lifecycle parses them and reports range errors.
    vehicleId = serializers.CharField(source='vehicle_id')
    pickupDate = serializers.CharField(source='pickup_date')
    returnDate = serializers.CharField(source='return_date')
    driverName = serializers.CharField(source='driver_name')
    driverEmail = serializers.EmailField(source='driver_email')


class ReservationUpdateSerializer(ContactInfoSerializer):
    status = serializers.ChoiceField(choices=Reservation.STATUS_CHOICES, required=False)
    driverName = serializers.CharField(source='driver_name', required=False)
    driverEmail = serializers.EmailField(source='driver_email', required=False)
    paymentStatus = serializers.ChoiceField(
        source='payment_status', choices=Reservation.PAYMENT_STATUS_CHOICES, required=False,
    )
    paymentReference = serializers.CharField(source='payment_reference', required=False, allow_blank=True)

    def validate(self, attrs):
        frozen = [key for key in IMMUTABLE_FIELDS if key in self.initial_data]
        if frozen:
            raise serializers.ValidationError(
                {key: 'Cannot be changed after the reservation is created.' for key in frozen}
            )
        return attrs


class ReservationSerializer(serializers.ModelSerializer):
    vehicleId = serializers.CharField(source='vehicle_id', read_only=True)
    vehicleName = serializers.CharField(source='vehicle.name', read_only=True)
    driverId = serializers.CharField(source='driver_id', read_only=True)
    hostId = serializers.CharField(source='host_id', read_only=True)
    pickupDate = serializers.DateField(source='pickup_date', read_only=True)
    returnDate = serializers.DateField(source='return_date', read_only=True)
    dailyRate = serializers.DecimalField(source='daily_rate', max_digits=10, decimal_places=2, read_only=True)
    numberOfDays = serializers.IntegerField(source='number_of_days', read_only=True)
    totalAmount = serializers.DecimalField(source='total_amount', max_digits=12, decimal_places=2, read_only=True)
    paymentStatus = serializers.CharField(source='payment_status', read_only=True)
    paymentReference = serializers.CharField(source='payment_reference', read_only=True)
    driverName = serializers.CharField(source='driver_name', read_only=True)
    driverEmail = serializers.CharField(source='driver_email', read_only=True)
    driverPhone = serializers.CharField(source='driver_phone', read_only=True)
    driverLicense = serializers.CharField(source='driver_license', read_only=True)
    specialRequests = serializers.CharField(source='special_requests', read_only=True)
    pickupLocation = serializers.CharField(source='pickup_location', read_only=True)
    returnLocation = serializers.CharField(source='return_location', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Reservation
        fields = [
            'id', 'vehicleId', 'vehicleName', 'driverId', 'hostId', 'pickupDate', 'returnDate',
            'dailyRate', 'numberOfDays', 'totalAmount', 'status', 'paymentStatus', 'paymentReference',
            'driverName', 'driverEmail', 'driverPhone', 'driverLicense', 'specialRequests',
            'pickupLocation', 'returnLocation', 'notes', 'createdAt', 'updatedAt',
        ]
        read_only_fields = fields
