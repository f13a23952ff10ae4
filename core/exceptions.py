from rest_framework import status as http_status


class BloodBankError(Exception):
    """Base class for domain errors raised by the matching engine"""
    status_code = http_status.HTTP_400_BAD_REQUEST
    default_message = "Blood bank operation failed"

    def __init__(self, message=None, errors=None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(BloodBankError):
    """Malformed, missing or out-of-range input"""
    default_message = "Invalid data provided"


class NotFoundError(BloodBankError):
    status_code = http_status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidStateTransition(BloodBankError):
    """Status change requested on a request that is no longer pending"""
    status_code = http_status.HTTP_409_CONFLICT
    default_message = "Only pending requests can be approved or declined"


class InsufficientInventory(BloodBankError):
    status_code = http_status.HTTP_409_CONFLICT
    default_message = "Insufficient inventory"

    def __init__(self, message=None, errors=None, requested=0, available=0):
        self.requested = requested
        self.available = available
        if message is None:
            message = f"Insufficient inventory. Requested: {requested}, available: {available}"
        super().__init__(message, errors)
