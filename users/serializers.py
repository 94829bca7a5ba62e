from rest_framework import serializers

from users.models import Driver, Host, Lead, User


class HostSerializer(serializers.ModelSerializer):
    userId = serializers.IntegerField(source='user_id', read_only=True)
    companyName = serializers.CharField(source='company_name', required=False, allow_blank=True)
    serviceTier = serializers.CharField(source='service_tier', read_only=True)
    subscriptionStatus = serializers.CharField(source='subscription_status', read_only=True)
    monthlySubscriptionFee = serializers.DecimalField(
        source='monthly_subscription_fee', max_digits=10, decimal_places=2, read_only=True,
    )
    onboardingStatus = serializers.ChoiceField(
        source='onboarding_status', choices=Host.ONBOARDING_STATUS_CHOICES, required=False,
    )
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Host
        fields = [
            'id', 'userId', 'companyName', 'location', 'serviceTier', 'subscriptionStatus',
            'monthlySubscriptionFee', 'onboardingStatus', 'createdAt',
        ]


class DriverSerializer(serializers.ModelSerializer):
    userId = serializers.IntegerField(source='user_id', read_only=True)
    licenseNumber = serializers.CharField(source='license_number', required=False, allow_blank=True)
    licenseExpiry = serializers.DateField(source='license_expiry', required=False, allow_null=True)
    phoneNumber = serializers.CharField(source='phone_number', required=False, allow_blank=True)
    verificationStatus = serializers.CharField(source='verification_status', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Driver
        fields = [
            'id', 'userId', 'licenseNumber', 'licenseExpiry', 'phoneNumber', 'address',
            'verificationStatus', 'createdAt',
        ]


class AdminUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'role', 'is_verified', 'is_suspended']
        # Only verification and suspension are edited from the back office.
        read_only_fields = ['id', 'username', 'email', 'first_name', 'last_name', 'role']


class LeadSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Lead
        fields = ['id', 'email', 'name', 'phone', 'type', 'source', 'status', 'notes', 'createdAt']
        read_only_fields = ['status', 'notes']


class LeadUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Lead
        fields = ['status', 'notes']
