import logging

from django.contrib.auth import authenticate
from django.utils import timezone
from rest_framework import generics, permissions, status, viewsets
from rest_framework.authtoken.models import Token
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from bookings.models import Reservation
from bookings.serializers import ReservationSerializer
from revenue.services import host_performance
from trips.models import Trip
from users.models import User
from vehicles.models import Vehicle
from vehicles.serializers import VehicleSerializer

from .exceptions import AccessDeniedError
from .serializers import LoginSerializer, ProfileSerializer, RegisterSerializer, UserSerializer

logger = logging.getLogger(__name__)


class HostOwnedViewSet(viewsets.ModelViewSet):
    """
    CRUD over one host-owned record type.

    Hosts read and write their own rows; admin and support staff read every
    host's rows. ``filter_params`` maps query parameters to model fields.
    """
    permission_classes = [IsAuthenticated]
    filter_params = {}

    def get_host(self):
        host = self.request.user.host
        if host is None:
            raise AccessDeniedError('A host account is required.')
        return host

    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user
        if not user.is_back_office:
            host = user.host
            if host is None:
                return queryset.none()
            queryset = queryset.filter(host=host)
        for param, field in self.filter_params.items():
            value = self.request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{field: value})
        return queryset

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['host'] = getattr(self.request.user, 'host', None)
        return context

    def perform_create(self, serializer):
        serializer.save(host=self.get_host())


class RegisterView(generics.CreateAPIView):
    queryset = User.objects.all()
    serializer_class = RegisterSerializer
    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        token, created = Token.objects.get_or_create(user=user)
        logger.info('Registered %s as %s', user.username, user.role)
        return Response({
            "user": UserSerializer(user, context=self.get_serializer_context()).data,
            "token": token.key
        }, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        username = serializer.validated_data['username']
        password = serializer.validated_data['password']

        user = authenticate(username=username, password=password)

        if user is None:
            return Response({"error": "Invalid credentials"}, status=status.HTTP_401_UNAUTHORIZED)
        if user.is_suspended:
            return Response({"error": "Account suspended"}, status=status.HTTP_403_FORBIDDEN)

        token, created = Token.objects.get_or_create(user=user)
        return Response({
            "user": UserSerializer(user).data,
            "token": token.key
        })


class LogoutView(APIView):
    def post(self, request):
        Token.objects.filter(user=request.user).delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProfileView(APIView):
    def get(self, request):
        serializer = ProfileSerializer(request.user)
        return Response(serializer.data)

    def put(self, request):
        serializer = UserSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(ProfileSerializer(request.user).data)


class DashboardView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user = request.user
        today = timezone.localdate()

        if user.is_back_office:
            return Response({
                'role': user.role,
                'total_users': User.objects.count(),
                'total_vehicles': Vehicle.objects.count(),
                'total_reservations': Reservation.objects.count(),
                'active_trips': Trip.objects.filter(status='active').count(),
                'pending_vehicles': Vehicle.objects.filter(status='pending').count(),
                'pending_reservations': Reservation.objects.filter(status='pending').count(),
            })

        if user.host:
            host = user.host
            reservations = Reservation.objects.filter(host=host)
            performance = host_performance(host, today)
            return Response({
                'role': user.role,
                'hostId': host.id,
                'vehicles': VehicleSerializer(Vehicle.objects.filter(host=host), many=True).data,
                'upcoming_reservations': reservations.filter(status='confirmed', pickup_date__gte=today).count(),
                'pending_reservations': reservations.filter(status='pending').count(),
                'active_trips': Trip.objects.filter(host=host, status='active').count(),
                'total_revenue': float(performance['totalRevenue']),
                'net_revenue': float(performance['netRevenue']),
                'recent_reservations': ReservationSerializer(reservations[:5], many=True).data,
            })

        driver = user.driver
        reservations = Reservation.objects.filter(driver=driver) if driver else Reservation.objects.none()
        return Response({
            'role': user.role,
            'driverId': driver.id if driver else None,
            'upcoming_reservations': reservations.filter(
                status__in=('pending', 'confirmed'), pickup_date__gte=today,
            ).count(),
            'past_reservations': reservations.filter(status='completed').count(),
            'active_trips': Trip.objects.filter(driver=driver, status='active').count() if driver else 0,
            'recent_reservations': ReservationSerializer(reservations[:5], many=True).data,
        })
