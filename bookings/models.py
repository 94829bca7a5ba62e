from django.db import models

from api.models import RecordModel
from users.models import Driver, Host
from vehicles.models import Vehicle

# Statuses that hold a vehicle's calendar slot.
HOLDING_STATUSES = ('pending', 'confirmed', 'active')
# Statuses considered by the overlap check.
BLOCKING_STATUSES = HOLDING_STATUSES + ('completed',)
TERMINAL_STATUSES = ('completed', 'cancelled')

TRANSITIONS = {
    'pending': ('confirmed', 'cancelled'),
    'confirmed': ('active', 'cancelled'),
    'active': ('completed',),
    'completed': (),
    'cancelled': (),
}


class Reservation(RecordModel):
    id_prefix = 'booking'

    STATUS_CHOICES = (
        ('pending', 'Pending'),
        ('confirmed', 'Confirmed'),
        ('active', 'Active'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    )
    PAYMENT_STATUS_CHOICES = (
        ('pending', 'Pending'),
        ('paid', 'Paid'),
        ('refunded', 'Refunded'),
    )

    vehicle = models.ForeignKey(Vehicle, on_delete=models.PROTECT, related_name='reservations')
    driver = models.ForeignKey(Driver, on_delete=models.CASCADE, related_name='reservations')
    host = models.ForeignKey(Host, on_delete=models.CASCADE, related_name='reservations')
    pickup_date = models.DateField()
    return_date = models.DateField()
    daily_rate = models.DecimalField(max_digits=10, decimal_places=2)
    number_of_days = models.PositiveIntegerField()
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default='pending')
    payment_reference = models.CharField(max_length=120, blank=True)

    driver_name = models.CharField(max_length=255)
    driver_email = models.EmailField()
    driver_phone = models.CharField(max_length=20, blank=True)
    driver_license = models.CharField(max_length=50, blank=True)
    special_requests = models.TextField(blank=True)
    pickup_location = models.CharField(max_length=255, blank=True)
    return_location = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ('-created_at',)
        indexes = [
            models.Index(fields=['vehicle', 'pickup_date', 'return_date']),
            models.Index(fields=['driver', 'status']),
            models.Index(fields=['host', 'status']),
        ]

    def __str__(self):
        return f"{self.driver_name} - {self.vehicle} ({self.pickup_date} to {self.return_date})"

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES

    def can_transition_to(self, status):
        return status in TRANSITIONS.get(self.status, ())
