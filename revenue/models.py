from django.db import models

from api.models import RecordModel
from bookings.models import Reservation
from users.models import Host
from vehicles.models import MaintenanceCycle, Vehicle


class RevenueRecord(RecordModel):
    id_prefix = 'rev'

    SOURCE_CHOICES = (
        ('direct', 'Direct'),
        ('turo', 'Turo'),
        ('booking.com', 'Booking.com'),
    )

    host = models.ForeignKey(Host, on_delete=models.CASCADE, related_name='revenue_records')
    vehicle = models.ForeignKey(Vehicle, on_delete=models.SET_NULL, blank=True, null=True, related_name='revenue_records')
    reservation = models.OneToOneField(
        Reservation, on_delete=models.SET_NULL, blank=True, null=True, related_name='revenue_record',
    )
    maintenance_cycle = models.OneToOneField(
        MaintenanceCycle, on_delete=models.SET_NULL, blank=True, null=True, related_name='revenue_record',
    )
    date = models.DateField()
    booking_revenue = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    maintenance_cost = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    cleaning_cost = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    subscription_fee = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    net_revenue = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default='direct')

    class Meta:
        ordering = ('-date', '-created_at')

    def __str__(self):
        return f"{self.host} {self.date}: {self.net_revenue}"

    @property
    def costs(self):
        return self.maintenance_cost + self.cleaning_cost + self.subscription_fee
