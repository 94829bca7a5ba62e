from django.contrib.auth.password_validation import validate_password
from django.db import transaction
from rest_framework import serializers

from users.models import Driver, Host, User
from users.serializers import DriverSerializer, HostSerializer


class UserSerializer(serializers.ModelSerializer):
    hostId = serializers.SerializerMethodField()
    driverId = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'role',
                  'phone_number', 'address', 'is_verified', 'hostId', 'driverId']
        read_only_fields = ['role', 'is_verified']

    def get_hostId(self, obj):
        return obj.host.id if obj.host else None

    def get_driverId(self, obj):
        return obj.driver.id if obj.driver else None


class RegisterSerializer(serializers.ModelSerializer):
    ROLE_CHOICES = (('host', 'Fleet Host'), ('driver', 'Driver'))

    password = serializers.CharField(write_only=True, required=True, validators=[validate_password])
    password2 = serializers.CharField(write_only=True, required=True)
    role = serializers.ChoiceField(choices=ROLE_CHOICES, default='driver')
    companyName = serializers.CharField(write_only=True, required=False, allow_blank=True)
    location = serializers.CharField(write_only=True, required=False, allow_blank=True)
    licenseNumber = serializers.CharField(write_only=True, required=False, allow_blank=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password2', 'first_name', 'last_name', 'role',
                  'phone_number', 'companyName', 'location', 'licenseNumber']

    def validate(self, attrs):
        if attrs['password'] != attrs['password2']:
            raise serializers.ValidationError({"password": "Password fields didn't match."})
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        validated_data.pop('password2')
        company_name = validated_data.pop('companyName', '')
        location = validated_data.pop('location', '')
        license_number = validated_data.pop('licenseNumber', '')

        user = User.objects.create_user(**validated_data)
        if user.role == 'host':
            Host.objects.create(user=user, company_name=company_name, location=location)
        else:
            Driver.objects.create(
                user=user, license_number=license_number, phone_number=user.phone_number or '',
            )
        return user


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField(required=True)
    password = serializers.CharField(required=True, write_only=True)


class ProfileSerializer(UserSerializer):
    host = HostSerializer(read_only=True)
    driver = DriverSerializer(read_only=True)

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['host', 'driver']
