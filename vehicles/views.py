from django.db import models
from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from api.permissions import IsAdminOrSupport
from api.views import HostOwnedViewSet
from bookings.serializers import ReservationSerializer

from . import services
from .models import Fleet, MaintenanceCycle, Vehicle
from .serializers import (
    AdminVehicleUpdateSerializer, FleetDetailSerializer, FleetSerializer,
    MaintenanceCycleSerializer, VehicleSerializer,
)


class VehicleViewSet(HostOwnedViewSet):
    queryset = Vehicle.objects.all()
    serializer_class = VehicleSerializer
    filter_params = {'status': 'status', 'location': 'location__icontains'}

    def perform_create(self, serializer):
        vehicle = serializer.save(host=self.get_host())
        services.logger.info('Vehicle %s listed by host %s, awaiting approval', vehicle.id, vehicle.host_id)

    def destroy(self, request, *args, **kwargs):
        vehicle = self.get_object()
        if services.delete_vehicle(vehicle):
            return Response(status=status.HTTP_204_NO_CONTENT)
        return Response({
            'message': 'Vehicle has booking history and was retired instead of deleted.',
            'status': 'inactive',
        })

    @action(detail=True, methods=['get'])
    def reservations(self, request, pk=None):
        vehicle = self.get_object()
        queryset = vehicle.reservations.select_related('vehicle').order_by('pickup_date')
        return Response(ReservationSerializer(queryset, many=True).data)


class FleetViewSet(HostOwnedViewSet):
    queryset = Fleet.objects.prefetch_related('vehicles')
    serializer_class = FleetSerializer
    filter_params = {'status': 'status'}

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return FleetDetailSerializer
        return FleetSerializer


class MaintenanceCycleViewSet(HostOwnedViewSet):
    queryset = MaintenanceCycle.objects.select_related('vehicle')
    serializer_class = MaintenanceCycleSerializer
    filter_params = {'status': 'status', 'vehicleId': 'vehicle_id'}

    @action(detail=True, methods=['post'])
    def start(self, request, pk=None):
        cycle = services.start_maintenance(self.get_object().id)
        return Response(self.get_serializer(cycle).data)

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        cycle = services.complete_maintenance(self.get_object().id)
        return Response(self.get_serializer(cycle).data)


class AdminVehicleListAPIView(generics.ListAPIView):
    serializer_class = VehicleSerializer
    permission_classes = [IsAuthenticated, IsAdminOrSupport]

    def get_queryset(self):
        qs = Vehicle.objects.all()
        vehicle_status = self.request.query_params.get('status')
        host_id = self.request.query_params.get('hostId')
        search = self.request.query_params.get('search')

        if vehicle_status:
            qs = qs.filter(status=vehicle_status)
        if host_id:
            qs = qs.filter(host_id=host_id)
        if search:
            qs = qs.filter(
                models.Q(make__icontains=search) |
                models.Q(model__icontains=search) |
                models.Q(license_plate__icontains=search) |
                models.Q(host__company_name__icontains=search)
            )
        return qs


class AdminVehicleUpdateAPIView(APIView):
    permission_classes = [IsAuthenticated, IsAdminOrSupport]

    def get(self, request, vehicle_id):
        vehicle = get_object_or_404(Vehicle, id=vehicle_id)
        return Response(VehicleSerializer(vehicle).data)

    def put(self, request, vehicle_id):
        get_object_or_404(Vehicle, id=vehicle_id)
        serializer = AdminVehicleUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        vehicle = services.change_status(
            vehicle_id,
            serializer.validated_data['status'],
            serializer.validated_data.get('reason') or f'(by {request.user.username})',
        )
        return Response(VehicleSerializer(vehicle).data)
