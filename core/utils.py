from rest_framework.response import Response
from rest_framework import status as http_status


def success_response(message, data=None, status_code=http_status.HTTP_200_OK):
    payload = {"status": "success", "message": message}
    if data is not None:
        payload["data"] = data
    return Response(payload, status=status_code)


def error_response(message, errors=None, status_code=http_status.HTTP_400_BAD_REQUEST):
    payload = {"status": "error", "message": message}
    if errors is not None:
        payload["errors"] = errors
    return Response(payload, status=status_code)


def domain_error_response(exc):
    """Translate a core.exceptions.BloodBankError into an error response"""
    return error_response(exc.message, errors=exc.errors, status_code=exc.status_code)


def parse_bool(value, default=False):
    """Parse a query-string flag such as ?eligible_only=true"""
    if value is None or value == '':
        return default
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')
