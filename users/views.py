import logging

from django.db.models import Q
from rest_framework import generics, permissions, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from api.permissions import IsAdminOrSupport, IsDriver, IsHost
from users.models import Lead, User

from .serializers import AdminUserSerializer, DriverSerializer, HostSerializer, LeadSerializer, LeadUpdateSerializer

logger = logging.getLogger(__name__)


class HostProfileView(APIView):
    permission_classes = [IsAuthenticated, IsHost]

    def get(self, request):
        return Response(HostSerializer(request.user.host).data)

    def put(self, request):
        serializer = HostSerializer(request.user.host, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class DriverProfileView(APIView):
    permission_classes = [IsAuthenticated, IsDriver]

    def get(self, request):
        return Response(DriverSerializer(request.user.driver).data)

    def put(self, request):
        serializer = DriverSerializer(request.user.driver, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class LeadCreateAPIView(generics.CreateAPIView):
    authentication_classes = []  # Public access
    permission_classes = [permissions.AllowAny]
    serializer_class = LeadSerializer

    def perform_create(self, serializer):
        lead = serializer.save()
        logger.info('Lead %s captured from %s (%s)', lead.id, lead.source, lead.type)


class AdminLeadListAPIView(generics.ListAPIView):
    serializer_class = LeadSerializer
    permission_classes = [IsAuthenticated, IsAdminOrSupport]

    def get_queryset(self):
        queryset = Lead.objects.all()
        lead_type = self.request.query_params.get('type')
        lead_status = self.request.query_params.get('status')
        if lead_type:
            queryset = queryset.filter(type=lead_type)
        if lead_status:
            queryset = queryset.filter(status=lead_status)
        return queryset


class AdminLeadUpdateAPIView(generics.RetrieveUpdateAPIView):
    queryset = Lead.objects.all()
    permission_classes = [IsAuthenticated, IsAdminOrSupport]

    def get_serializer_class(self):
        if self.request.method == 'GET':
            return LeadSerializer
        return LeadUpdateSerializer


class AdminUserListAPIView(APIView):
    permission_classes = [IsAuthenticated, IsAdminOrSupport]

    def get(self, request):
        queryset = User.objects.all()

        role = request.query_params.get('role')
        is_verified = request.query_params.get('is_verified')
        is_suspended = request.query_params.get('is_suspended')
        search = request.query_params.get('search')

        if role:
            queryset = queryset.filter(role=role)
        if is_verified in ['true', 'false']:
            queryset = queryset.filter(is_verified=(is_verified == 'true'))
        if is_suspended in ['true', 'false']:
            queryset = queryset.filter(is_suspended=(is_suspended == 'true'))
        if search:
            queryset = queryset.filter(
                Q(username__icontains=search) |
                Q(email__icontains=search) |
                Q(first_name__icontains=search) |
                Q(last_name__icontains=search)
            )

        serializer = AdminUserSerializer(queryset, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)


class AdminUserDetailAPIView(generics.RetrieveUpdateAPIView):
    queryset = User.objects.all()
    serializer_class = AdminUserSerializer
    permission_classes = [IsAuthenticated, IsAdminOrSupport]
    lookup_url_kwarg = 'user_id'
