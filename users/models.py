from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models

from api.models import RecordModel


class User(AbstractUser):
    ROLE_CHOICES = (
        ('host', 'Fleet Host'),
        ('driver', 'Driver'),
        ('admin', 'Admin'),
        ('support', 'Support'),
    )

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='driver')
    phone_number = models.CharField(max_length=20, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    is_verified = models.BooleanField(default=False)
    is_suspended = models.BooleanField(default=False)

    def __str__(self):
        return self.username

    @property
    def host(self):
        return getattr(self, 'host_profile', None)

    @property
    def driver(self):
        return getattr(self, 'driver_profile', None)

    @property
    def is_back_office(self):
        return self.is_staff or self.role in ('admin', 'support')


class Host(RecordModel):
    id_prefix = 'host'

    SERVICE_TIER_CHOICES = (
        ('none', 'None'),
        ('basic', 'Basic'),
        ('pro', 'Pro'),
        ('enterprise', 'Enterprise'),
    )
    SUBSCRIPTION_STATUS_CHOICES = (
        ('pending', 'Pending'),
        ('active', 'Active'),
        ('inactive', 'Inactive'),
        ('cancelled', 'Cancelled'),
    )
    ONBOARDING_STATUS_CHOICES = (
        ('pending', 'Pending'),
        ('completed', 'Completed'),
    )

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='host_profile')
    company_name = models.CharField(max_length=255, blank=True)
    location = models.CharField(max_length=255, blank=True)
    # Written by the billing provider only.
    service_tier = models.CharField(max_length=20, choices=SERVICE_TIER_CHOICES, default='none')
    subscription_status = models.CharField(max_length=20, choices=SUBSCRIPTION_STATUS_CHOICES, default='pending')
    monthly_subscription_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    billing_customer_id = models.CharField(max_length=120, blank=True)
    onboarding_status = models.CharField(max_length=20, choices=ONBOARDING_STATUS_CHOICES, default='pending')

    def __str__(self):
        return self.company_name or self.user.username

    @property
    def has_active_subscription(self):
        return self.subscription_status == 'active' and self.service_tier != 'none'


class Driver(RecordModel):
    id_prefix = 'driver'

    VERIFICATION_STATUS_CHOICES = (
        ('pending', 'Pending'),
        ('verified', 'Verified'),
        ('rejected', 'Rejected'),
    )

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='driver_profile')
    license_number = models.CharField(max_length=50, blank=True)
    license_expiry = models.DateField(blank=True, null=True)
    phone_number = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    verification_status = models.CharField(max_length=20, choices=VERIFICATION_STATUS_CHOICES, default='pending')

    def __str__(self):
        return self.user.get_full_name() or self.user.username


class Lead(RecordModel):
    id_prefix = 'lead'

    TYPE_CHOICES = (
        ('host', 'Host'),
        ('driver', 'Driver'),
    )
    STATUS_CHOICES = (
        ('new', 'New'),
        ('contacted', 'Contacted'),
        ('converted', 'Converted'),
        ('lost', 'Lost'),
    )

    email = models.EmailField()
    name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default='host')
    source = models.CharField(max_length=50, default='website')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='new')
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ('-created_at',)

    def __str__(self):
        return f"{self.email} ({self.type})"
