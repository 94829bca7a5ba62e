import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class HostPilotError(APIException):
    """Base for the typed failures the booking core reports to callers."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be completed.'
    default_code = 'error'


class InvalidRangeError(HostPilotError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'startDate and endDate must be valid dates with startDate on or before endDate.'
    default_code = 'invalid_range'


class NotFoundError(HostPilotError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class VehicleNotFoundError(NotFoundError):
    default_detail = 'Vehicle not found.'
    default_code = 'vehicle_not_found'


class VehicleUnavailableError(HostPilotError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Vehicle is not available for the selected dates.'
    default_code = 'vehicle_unavailable'


class InvalidTransitionError(HostPilotError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Illegal status transition.'
    default_code = 'invalid_transition'


class DuplicateTripError(HostPilotError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'A trip already exists for this booking.'
    default_code = 'duplicate_trip'


class InvalidMileageError(HostPilotError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'mileageEnd cannot be lower than mileageStart.'
    default_code = 'invalid_mileage'


class AccessDeniedError(HostPilotError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Access denied.'
    default_code = 'access_denied'


class StorageError(HostPilotError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Storage is unavailable, try again later.'
    default_code = 'storage_error'


def exception_handler(exc, context):
    response = drf_exception_handler(exc, context)
    if response is not None and isinstance(exc, HostPilotError):
        response.data = {
            'error': str(exc.detail),
            'code': exc.get_codes(),
        }
        if isinstance(exc, StorageError):
            logger.error('Storage failure in %s: %s', context.get('view').__class__.__name__, exc.detail)
    return response
