from rest_framework import permissions

from .exceptions import AccessDeniedError


class IsHost(permissions.BasePermission):
    message = 'A host account is required.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.host)


class IsDriver(permissions.BasePermission):
    message = 'A driver account is required.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.driver)


class IsAdminOrSupport(permissions.BasePermission):
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_back_office)


def is_party(user, record):
    """True when ``user`` is the driver or the host on ``record``."""
    if user.is_back_office:
        return True
    driver, host = user.driver, user.host
    if driver is not None and getattr(record, 'driver_id', None) == driver.id:
        return True
    return host is not None and getattr(record, 'host_id', None) == host.id


def check_party(user, record):
    if not is_party(user, record):
        raise AccessDeniedError()


def check_host(user, record):
    if user.is_back_office:
        return
    host = user.host
    if host is None or record.host_id != host.id:
        raise AccessDeniedError()
