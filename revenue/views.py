from decimal import Decimal

from django.db.models import Sum
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from api.permissions import IsAdminOrSupport, IsHost
from bookings.availability import parse_day, parse_range

from . import services
from .models import RevenueRecord
from .serializers import RevenueRecordSerializer


def as_json(value):
    """Decimals to floats, recursively, for JSON responses."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {key: as_json(item) for key, item in value.items()}
    if isinstance(value, list):
        return [as_json(item) for item in value]
    return value


class PerformanceDashboardView(APIView):
    permission_classes = [IsAuthenticated, IsHost]

    def get(self, request):
        return Response(as_json(services.host_performance(request.user.host)))


class RevenueSummaryView(APIView):
    permission_classes = [IsAuthenticated, IsHost]

    def get(self, request):
        start = request.query_params.get('startDate')
        end = request.query_params.get('endDate')
        if start or end:
            start, end = parse_range(start, end)
        report = services.revenue_summary(request.user.host, start, end)
        report['records'] = RevenueRecordSerializer(report['records'], many=True).data
        return Response(as_json(report))


class AdminRevenueReportAPIView(APIView):
    permission_classes = [IsAuthenticated, IsAdminOrSupport]

    def get(self, request):
        report_type = request.GET.get('type', 'monthly')
        start_date = request.GET.get('start_date')
        end_date = request.GET.get('end_date')

        records = RevenueRecord.objects.all()

        if start_date:
            records = records.filter(date__gte=parse_day(start_date, 'start_date'))
        if end_date:
            records = records.filter(date__lte=parse_day(end_date, 'end_date'))

        totals = records.aggregate(
            revenue=Sum('booking_revenue'),
            net=Sum('net_revenue'),
            maintenance=Sum('maintenance_cost'),
            cleaning=Sum('cleaning_cost'),
        )

        return Response({
            "report_type": report_type,
            "total_booking_revenue": float(totals['revenue'] or 0),
            "total_net_revenue": float(totals['net'] or 0),
            "total_maintenance_cost": float(totals['maintenance'] or 0),
            "total_cleaning_cost": float(totals['cleaning'] or 0),
            "start_date": start_date,
            "end_date": end_date,
            "total_records": records.count(),
            "total_reservations": records.exclude(reservation=None).count(),
        })
