import datetime
import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

EMERGENCY_WINDOW = datetime.timedelta(hours=4)
STANDARD_BUSINESS_DAYS = 2


def add_business_days(start_date, business_days):
    """
    Step forward one calendar day at a time, counting only Monday-Friday,
    until ``business_days`` have been counted. Weekdays and time of day are
    taken in the configured local time zone.
    """
    completion_date = timezone.localtime(start_date) if timezone.is_aware(start_date) else start_date

    while business_days > 0:
        completion_date += datetime.timedelta(days=1)
        # Python weekday: Mon=0, Sun=6. So Sat=5, Sun=6
        if completion_date.weekday() != 5 and completion_date.weekday() != 6:
            business_days -= 1

    return completion_date


def calculate_completion_date(start_date, call_type='STANDARD'):
    if call_type == 'EMERGENCY':
        return start_date + EMERGENCY_WINDOW
    return add_business_days(start_date, STANDARD_BUSINESS_DAYS)


def format_response(success=True, message=None, data=None, **kwargs):
    response = {
        "success": success
    }
    if message:
        response["message"] = message
    if data is not None:
        response["data"] = data

    response.update(kwargs)
    return response


def locates_exception_handler(exc, context):
    """
    DRF exception handler that wraps every error in the
    ``{"success": false, "message": ...}`` envelope. Anything DRF does not
    recognise is logged and reported as a 500 with the error text.
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.exception("Unhandled error in %s", view.__class__.__name__ if view else 'view')
        return Response(
            format_response(False, message=str(exc) or exc.__class__.__name__),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    data = response.data
    if isinstance(data, dict) and set(data) == {'detail'}:
        message = data['detail']
    else:
        message = data

    response.data = format_response(False, message=message)
    return response
