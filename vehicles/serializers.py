from rest_framework import serializers

from .models import Fleet, MaintenanceCycle, Vehicle
from .services import fleet_metrics


class VehicleSerializer(serializers.ModelSerializer):
    """Owner-facing vehicle, VIN included."""
    hostId = serializers.CharField(source='host_id', read_only=True)
    licensePlate = serializers.CharField(source='license_plate', required=False, allow_blank=True)
    dailyRate = serializers.DecimalField(source='daily_rate', max_digits=10, decimal_places=2, min_value=0)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Vehicle
        fields = [
            'id', 'hostId', 'make', 'model', 'year', 'vin', 'licensePlate', 'color',
            'mileage', 'dailyRate', 'location', 'status', 'createdAt', 'updatedAt',
        ]
        read_only_fields = ['status']


class PublicVehicleSerializer(serializers.ModelSerializer):
    dailyRate = serializers.DecimalField(source='daily_rate', max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Vehicle
        fields = ['id', 'name', 'make', 'model', 'year', 'color', 'dailyRate', 'location']


class AdminVehicleUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Vehicle.STATUS_CHOICES)
    reason = serializers.CharField(required=False, allow_blank=True)


def check_owned_vehicles(host, vehicles):
    if host is None:
        return
    foreign = [vehicle.id for vehicle in vehicles if vehicle.host_id != host.id]
    if foreign:
        raise serializers.ValidationError(f"Unknown vehicle(s): {', '.join(foreign)}.")


class FleetSerializer(serializers.ModelSerializer):
    hostId = serializers.CharField(source='host_id', read_only=True)
    vehicleIds = serializers.PrimaryKeyRelatedField(
        source='vehicles', many=True, required=False, queryset=Vehicle.objects.all(),
    )
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Fleet
        fields = ['id', 'hostId', 'name', 'description', 'location', 'status', 'vehicleIds', 'createdAt']

    def validate_vehicleIds(self, value):
        check_owned_vehicles(self.context.get('host'), value)
        return value


class FleetVehicleSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vehicle
        fields = ['id', 'make', 'model', 'year', 'status']


class FleetDetailSerializer(FleetSerializer):
    vehicles = FleetVehicleSerializer(many=True, read_only=True)
    metrics = serializers.SerializerMethodField()

    class Meta(FleetSerializer.Meta):
        fields = FleetSerializer.Meta.fields + ['vehicles', 'metrics']

    def get_metrics(self, obj):
        return fleet_metrics(obj)


class MaintenanceCycleSerializer(serializers.ModelSerializer):
    hostId = serializers.CharField(source='host_id', read_only=True)
    vehicleId = serializers.PrimaryKeyRelatedField(source='vehicle', queryset=Vehicle.objects.all())
    reservationId = serializers.CharField(source='reservation_id', required=False, allow_null=True, allow_blank=True)
    cycleDate = serializers.DateTimeField(source='cycle_date', required=False, allow_null=True)
    reportUrl = serializers.URLField(source='report_url', required=False, allow_blank=True)
    performedBy = serializers.CharField(source='performed_by', required=False, allow_blank=True)
    completedAt = serializers.DateTimeField(source='completed_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = MaintenanceCycle
        fields = [
            'id', 'hostId', 'vehicleId', 'reservationId', 'cycleDate', 'inspection', 'cleaning',
            'fluids', 'tires', 'reportUrl', 'performedBy', 'cost', 'status', 'completedAt', 'createdAt',
        ]
        read_only_fields = ['status']

    def validate_vehicleId(self, value):
        check_owned_vehicles(self.context.get('host'), [value])
        return value
