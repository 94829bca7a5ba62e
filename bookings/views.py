from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from api.exceptions import AccessDeniedError, NotFoundError
from api.permissions import check_host, check_party
from vehicles.serializers import PublicVehicleSerializer

from .availability import find_available
from .models import Reservation
from .serializers import ReservationCreateSerializer, ReservationSerializer, ReservationUpdateSerializer
from .services import lifecycle

# Status changes a driver may request on their own reservation.
DRIVER_STATUSES = ('cancelled',)


class AvailableVehiclesAPIView(APIView):
    authentication_classes = []  # Public access
    permission_classes = []      # Public access

    def get(self, request):
        vehicles = find_available(
            request.query_params.get('startDate'),
            request.query_params.get('endDate'),
            request.query_params.get('location'),
        )
        return Response(PublicVehicleSerializer(vehicles, many=True).data)


class ReservationListCreateAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user = request.user
        if user.is_back_office:
            reservations = lifecycle.reservations.queryset()
        elif user.host:
            reservations = Reservation.objects.filter(host=user.host)
        elif user.driver:
            reservations = Reservation.objects.filter(driver=user.driver)
        else:
            reservations = Reservation.objects.none()

        reservation_status = request.query_params.get('status')
        if reservation_status:
            reservations = reservations.filter(status=reservation_status)
        return Response(ReservationSerializer(reservations.select_related('vehicle'), many=True).data)

    def post(self, request):
        driver = request.user.driver
        if driver is None:
            raise AccessDeniedError('Only drivers can book vehicles.')

        serializer = ReservationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        reservation = lifecycle.create(
            data.pop('vehicle_id'),
            driver,
            data.pop('pickup_date'),
            data.pop('return_date'),
            contact_info=data,
        )
        return Response(ReservationSerializer(reservation).data, status=status.HTTP_201_CREATED)


class ReservationDetailAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get_object(self, request, reservation_id):
        reservation = lifecycle.reservations.get_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError('Reservation not found.')
        check_party(request.user, reservation)
        return reservation

    def get(self, request, reservation_id):
        return Response(ReservationSerializer(self.get_object(request, reservation_id)).data)

    def put(self, request, reservation_id):
        reservation = self.get_object(request, reservation_id)
        serializer = ReservationUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        requested = serializer.validated_data.get('status')
        if requested not in (None, reservation.status, *DRIVER_STATUSES):
            # Confirming, pickup and return belong to the vehicle's host.
            check_host(request.user, reservation)
        reservation = lifecycle.update(reservation_id, serializer.validated_data)
        return Response(ReservationSerializer(reservation).data)

    def delete(self, request, reservation_id):
        self.get_object(request, reservation_id)
        reservation = lifecycle.cancel(reservation_id)
        return Response(ReservationSerializer(reservation).data)
