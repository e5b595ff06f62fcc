# services/errors.py
"""
Business outcomes raised by the registration and check-in services.

Every error carries a stable ``code`` that the HTTP and CLI surfaces render;
the services themselves do no formatting.
"""


class ErrorCode:
    """Outcome codes shared by the services and their callers."""
    INVALID_INPUT = 'INVALID_INPUT'
    NOT_FOUND = 'NOT_FOUND'
    ALREADY_CHECKED_IN = 'ALREADY_CHECKED_IN'
    DUPLICATE_IDENTIFIER = 'DUPLICATE_IDENTIFIER'
    DUPLICATE_EMAIL = 'DUPLICATE_EMAIL'
    CAPACITY_EXCEEDED = 'CAPACITY_EXCEEDED'
    REGISTRATIONS_CLOSED = 'REGISTRATIONS_CLOSED'
    STORE_ERROR = 'STORE_ERROR'


class ServiceError(Exception):
    code = ErrorCode.STORE_ERROR
    status_code = 500
    default_message = 'Request could not be completed'

    def __init__(self, message=None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self):
        result = {
            'success': False,
            'message': self.message,
            'error_code': self.code
        }
        if self.details:
            result['details'] = self.details
        return result


class ValidationError(ServiceError):
    code = ErrorCode.INVALID_INPUT
    status_code = 400
    default_message = 'Invalid input'


class MemberNotFoundError(ServiceError):
    code = ErrorCode.NOT_FOUND
    status_code = 404
    default_message = 'Registration number not found in registrations'


class AlreadyCheckedInError(ServiceError):
    code = ErrorCode.ALREADY_CHECKED_IN
    status_code = 409
    default_message = 'Already checked in'


class DuplicateIdentifierError(ServiceError):
    code = ErrorCode.DUPLICATE_IDENTIFIER
    status_code = 409
    default_message = 'A member with this registration number is already registered'


class DuplicateEmailError(ServiceError):
    code = ErrorCode.DUPLICATE_EMAIL
    status_code = 409
    default_message = 'A member with this email address is already registered'


class CapacityExceededError(ServiceError):
    code = ErrorCode.CAPACITY_EXCEEDED
    status_code = 409
    default_message = 'Registration limit reached'


class RegistrationsClosedError(ServiceError):
    code = ErrorCode.REGISTRATIONS_CLOSED
    status_code = 403
    default_message = 'Registrations are currently closed'
