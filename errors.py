"""
Error taxonomy for the API.

Every error carries the HTTP status it maps to, so the app factory can
render any of them as ``{"error": message}`` with one handler.
"""


class ApiError(Exception):
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'error': self.message}


class ValidationError(ApiError):
    status_code = 400
    default_message = 'Invalid request'


class Unauthenticated(ApiError):
    status_code = 401
    default_message = 'Unauthorized'


class InvalidCredentials(Unauthenticated):
    default_message = 'Invalid credentials or role'


class Forbidden(ApiError):
    status_code = 403
    default_message = 'Access denied'


class NotFound(ApiError):
    status_code = 404
    default_message = 'Not found'


# Sent as 400 on the wire, although these are conflicts in the 409 sense.
class Conflict(ApiError):
    status_code = 400
    default_message = 'Conflict'


class DuplicateEmail(Conflict):
    default_message = 'User already exists with this email'


class AlreadyCollected(Conflict):
    default_message = 'Donation already collected'


class InvalidToken(Exception):
    """Raised by token codecs; never reaches the client directly."""
