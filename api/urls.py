from django.urls import include, path, re_path
from rest_framework.routers import DefaultRouter

from bookings.views import AvailableVehiclesAPIView, ReservationDetailAPIView, ReservationListCreateAPIView
from revenue.views import AdminRevenueReportAPIView, PerformanceDashboardView, RevenueSummaryView
from support.views import TicketTypesView, TicketViewSet
from trips.views import (
    ActiveTripsAPIView, TripCancelAPIView, TripCompleteAPIView, TripDetailAPIView,
    TripListCreateAPIView, TripStartAPIView,
)
from users.views import (
    AdminLeadListAPIView, AdminLeadUpdateAPIView, AdminUserDetailAPIView, AdminUserListAPIView,
    DriverProfileView, HostProfileView, LeadCreateAPIView,
)
from vehicles.views import (
    AdminVehicleListAPIView, AdminVehicleUpdateAPIView, FleetViewSet, MaintenanceCycleViewSet,
    VehicleViewSet,
)

from .views import DashboardView, LoginView, LogoutView, ProfileView, RegisterView

router = DefaultRouter()
router.register(r'vehicles', VehicleViewSet, basename='vehicle')
router.register(r'fleets', FleetViewSet, basename='fleet')
router.register(r'maintenance', MaintenanceCycleViewSet, basename='maintenance')
router.register(r'tickets', TicketViewSet, basename='ticket')

urlpatterns = [
    # Authentication endpoints
    path('register/', RegisterView.as_view(), name='register'),
    path('login/', LoginView.as_view(), name='login'),
    path('logout/', LogoutView.as_view(), name='logout'),
    path('profile/', ProfileView.as_view(), name='profile'),
    path('dashboard/', DashboardView.as_view(), name='dashboard'),
    path('hosts/me/', HostProfileView.as_view(), name='host-profile'),
    path('drivers/me/', DriverProfileView.as_view(), name='driver-profile'),

    # Booking calendar
    re_path(r'^bookings/available/?$', AvailableVehiclesAPIView.as_view(), name='available-vehicles'),
    re_path(r'^reservations/?$', ReservationListCreateAPIView.as_view(), name='reservations'),
    re_path(r'^reservations/(?P<reservation_id>[\w-]+)/?$', ReservationDetailAPIView.as_view(),
            name='reservation-detail'),

    # Trips
    re_path(r'^trips/?$', TripListCreateAPIView.as_view(), name='trips'),
    re_path(r'^trips/active/?$', ActiveTripsAPIView.as_view(), name='active-trips'),
    re_path(r'^trips/(?P<trip_id>[\w-]+)/start/?$', TripStartAPIView.as_view(), name='trip-start'),
    re_path(r'^trips/(?P<trip_id>[\w-]+)/complete/?$', TripCompleteAPIView.as_view(), name='trip-complete'),
    re_path(r'^trips/(?P<trip_id>[\w-]+)/cancel/?$', TripCancelAPIView.as_view(), name='trip-cancel'),
    re_path(r'^trips/(?P<trip_id>[\w-]+)/?$', TripDetailAPIView.as_view(), name='trip-detail'),

    # Performance
    path('performance/dashboard/', PerformanceDashboardView.as_view(), name='performance-dashboard'),
    path('performance/revenue/', RevenueSummaryView.as_view(), name='performance-revenue'),

    path('tickets/types/', TicketTypesView.as_view(), name='ticket-types'),
    path('leads/', LeadCreateAPIView.as_view(), name='lead-create'),

    # Back office
    path('admin/users/', AdminUserListAPIView.as_view(), name='admin-user-list'),
    path('admin/users/<int:user_id>/', AdminUserDetailAPIView.as_view(), name='admin-user-detail'),
    path('admin/vehicles/', AdminVehicleListAPIView.as_view(), name='admin-vehicle-list'),
    path('admin/vehicles/<str:vehicle_id>/', AdminVehicleUpdateAPIView.as_view(), name='admin-vehicle-update'),
    path('admin/leads/', AdminLeadListAPIView.as_view(), name='admin-lead-list'),
    path('admin/leads/<str:pk>/', AdminLeadUpdateAPIView.as_view(), name='admin-lead-update'),
    path('admin/revenue-report/', AdminRevenueReportAPIView.as_view(), name='admin-revenue-report'),

    path('', include(router.urls)),
]
