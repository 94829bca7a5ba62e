from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from api.exceptions import NotFoundError
from api.permissions import check_party
from bookings.services import lifecycle as reservations

from .serializers import TripCompleteSerializer, TripOpenSerializer, TripSerializer, TripStartSerializer
from .services import lifecycle


def scoped_filters(user, driver_id=None, host_id=None):
    """Narrow a trip query to what ``user`` may read."""
    if user.is_back_office:
        return driver_id, host_id
    if user.driver:
        return user.driver.id, host_id
    if user.host:
        return driver_id, user.host.id
    return None, None


class TripListCreateAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user = request.user
        if not (user.is_back_office or user.driver or user.host):
            return Response([])
        driver_id, host_id = scoped_filters(
            user, request.query_params.get('driverId'), request.query_params.get('hostId'),
        )
        trips = lifecycle.filter(driver_id=driver_id, host_id=host_id, status=request.query_params.get('status'))
        return Response(TripSerializer(trips, many=True).data)

    def post(self, request):
        serializer = TripOpenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reservation_id = serializer.validated_data['reservationId']
        reservation = reservations.reservations.get_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError('Reservation not found.')
        check_party(request.user, reservation)
        trip = lifecycle.open(reservation_id)
        return Response(TripSerializer(trip).data, status=status.HTTP_201_CREATED)


class ActiveTripsAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user = request.user
        if user.is_back_office:
            trips = lifecycle.get_active()
        elif user.driver:
            trips = lifecycle.filter(driver_id=user.driver.id, status='active')
        elif user.host:
            trips = lifecycle.filter(host_id=user.host.id, status='active')
        else:
            trips = []
        return Response(TripSerializer(trips, many=True).data)


class TripDetailAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, trip_id):
        trip = lifecycle.get(trip_id)
        check_party(request.user, trip)
        return Response(TripSerializer(trip).data)


class TripStartAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, trip_id):
        check_party(request.user, lifecycle.get(trip_id))
        serializer = TripStartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        trip = lifecycle.start(
            trip_id,
            mileage_start=data.get('mileageStart'),
            fuel_level_start=data.get('fuelLevelStart'),
            condition_start=data.get('conditionStart'),
        )
        return Response(TripSerializer(trip).data)


class TripCompleteAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, trip_id):
        check_party(request.user, lifecycle.get(trip_id))
        serializer = TripCompleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        trip = lifecycle.complete(
            trip_id,
            mileage_end=data.get('mileageEnd'),
            fuel_level_end=data.get('fuelLevelEnd'),
            condition_end=data.get('conditionEnd'),
            issues=data.get('issues'),
        )
        return Response(TripSerializer(trip).data)


class TripCancelAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, trip_id):
        check_party(request.user, lifecycle.get(trip_id))
        return Response(TripSerializer(lifecycle.cancel(trip_id)).data)
