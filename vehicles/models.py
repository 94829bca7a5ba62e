from django.core.validators import MinValueValidator, RegexValidator
from django.db import models

from api.models import RecordModel
from users.models import Host

vin_validator = RegexValidator(
    r'^[A-HJ-NPR-Z0-9]{17}$',
    'VIN must be 17 characters, letters and digits only, without I, O or Q.',
)


class Vehicle(RecordModel):
    id_prefix = 'vehicle'

    STATUS_CHOICES = (
        ('pending', 'Pending Approval'),
        ('available', 'Available'),
        ('rented', 'Rented'),
        ('maintenance', 'Under Maintenance'),
        ('inactive', 'Inactive'),
    )

    host = models.ForeignKey(Host, on_delete=models.CASCADE, related_name='vehicles')
    make = models.CharField(max_length=100)
    model = models.CharField(max_length=100)
    year = models.PositiveIntegerField()
    vin = models.CharField(max_length=17, blank=True, validators=[vin_validator])
    license_plate = models.CharField(max_length=20, blank=True)
    color = models.CharField(max_length=50, blank=True)
    mileage = models.PositiveIntegerField(default=0)
    daily_rate = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    location = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')

    class Meta:
        ordering = ('-created_at',)

    def __str__(self):
        return f"{self.year} {self.make} {self.model}"

    @property
    def name(self):
        return f"{self.make} {self.model}"


class Fleet(RecordModel):
    id_prefix = 'fleet'

    STATUS_CHOICES = (
        ('active', 'Active'),
        ('inactive', 'Inactive'),
    )

    host = models.ForeignKey(Host, on_delete=models.CASCADE, related_name='fleets')
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    vehicles = models.ManyToManyField(Vehicle, blank=True, related_name='fleets')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')

    class Meta:
        ordering = ('-created_at',)

    def __str__(self):
        return self.name


def default_inspection():
    return {'completed': False, 'notes': '', 'issues': []}


def default_cleaning():
    return {'completed': False, 'notes': '', 'cost': 0}


def default_fluids():
    return {'checked': False, 'oilLevel': 'good', 'coolantLevel': 'good', 'brakeFluid': 'good'}


def default_tires():
    return {'checked': False, 'condition': 'good', 'pressure': 'normal', 'notes': ''}


class MaintenanceCycle(RecordModel):
    id_prefix = 'maint'

    STATUS_CHOICES = (
        ('pending', 'Pending'),
        ('in_progress', 'In Progress'),
        ('completed', 'Completed'),
    )

    host = models.ForeignKey(Host, on_delete=models.CASCADE, related_name='maintenance_cycles')
    vehicle = models.ForeignKey(Vehicle, on_delete=models.CASCADE, related_name='maintenance_cycles')
    reservation_id = models.CharField(max_length=40, blank=True, null=True)
    cycle_date = models.DateTimeField(blank=True, null=True)
    inspection = models.JSONField(default=default_inspection)
    cleaning = models.JSONField(default=default_cleaning)
    fluids = models.JSONField(default=default_fluids)
    tires = models.JSONField(default=default_tires)
    report_url = models.URLField(blank=True)
    performed_by = models.CharField(max_length=255, blank=True)
    cost = models.DecimalField(max_digits=10, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    completed_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ('-created_at',)

    def __str__(self):
        return f"Maintenance for {self.vehicle} ({self.status})"

    @property
    def cleaning_cost(self):
        return (self.cleaning or {}).get('cost') or 0
