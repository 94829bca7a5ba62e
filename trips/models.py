from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from api.models import RecordModel
from bookings.models import Reservation
from users.models import Driver, Host
from vehicles.models import Vehicle

fuel_level_validators = [MinValueValidator(0), MaxValueValidator(100)]


class Trip(RecordModel):
    id_prefix = 'trip'

    STATUS_CHOICES = (
        ('scheduled', 'Scheduled'),
        ('active', 'Active'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    )

    # One trip per booking, enforced by the database as well.
    booking = models.OneToOneField(Reservation, on_delete=models.CASCADE, related_name='trip')
    driver = models.ForeignKey(Driver, on_delete=models.CASCADE, related_name='trips')
    vehicle = models.ForeignKey(Vehicle, on_delete=models.CASCADE, related_name='trips')
    host = models.ForeignKey(Host, on_delete=models.CASCADE, related_name='trips')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='scheduled')
    pickup_location = models.CharField(max_length=255, blank=True)
    return_location = models.CharField(max_length=255, blank=True)
    pickup_time = models.DateTimeField(blank=True, null=True)
    return_time = models.DateTimeField(blank=True, null=True)
    mileage_start = models.PositiveIntegerField(blank=True, null=True)
    mileage_end = models.PositiveIntegerField(blank=True, null=True)
    fuel_level_start = models.PositiveSmallIntegerField(blank=True, null=True, validators=fuel_level_validators)
    fuel_level_end = models.PositiveSmallIntegerField(blank=True, null=True, validators=fuel_level_validators)
    condition_start = models.TextField(blank=True)
    condition_end = models.TextField(blank=True)
    issues = models.JSONField(default=list, blank=True)

    class Meta:
        ordering = ('-created_at',)

    def __str__(self):
        return f"Trip {self.id} for {self.booking_id} ({self.status})"
