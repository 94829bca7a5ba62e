from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import Driver, Host, Lead, User


class CustomUserAdmin(UserAdmin):
    list_display = ('username', 'email', 'first_name', 'last_name', 'role', 'is_verified', 'is_suspended')
    list_filter = ('role', 'is_verified', 'is_suspended', 'is_staff')
    fieldsets = UserAdmin.fieldsets + (
        ('Additional Info', {'fields': ('role', 'phone_number', 'address', 'is_verified', 'is_suspended')}),
    )


@admin.register(Host)
class HostAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'company_name', 'service_tier', 'subscription_status', 'onboarding_status')
    list_filter = ('service_tier', 'subscription_status', 'onboarding_status')
    search_fields = ('id', 'company_name', 'user__username', 'user__email')


@admin.register(Driver)
class DriverAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'license_number', 'verification_status')
    list_filter = ('verification_status',)
    search_fields = ('id', 'license_number', 'user__username', 'user__email')


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    list_display = ('email', 'name', 'type', 'source', 'status', 'created_at')
    list_filter = ('type', 'status', 'source')
    search_fields = ('email', 'name')


admin.site.register(User, CustomUserAdmin)
