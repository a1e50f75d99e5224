from rest_framework import status
from rest_framework.exceptions import APIException


class LocatesError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Locates operation failed.'
    default_code = 'locates_error'


class ValidationError(LocatesError):
    """Malformed input. Nothing was changed."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input.'
    default_code = 'invalid'


class NotFoundError(LocatesError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class ConflictError(LocatesError):
    """The operation is not allowed in the record's current state."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Operation not allowed in the current state.'
    default_code = 'conflict'


class UpstreamError(LocatesError):
    """The scraper or storage failed; the detail carries the underlying message."""
    default_detail = 'Upstream failure.'
    default_code = 'upstream_error'
