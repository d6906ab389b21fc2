"""Exceptions rendered as JSON errors by the API."""


class AppException(Exception):
    """Base for errors that carry their own HTTP status."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        """Use the class default message when none is given."""
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestException(AppException):
    """The request was understood but cannot be applied, e.g. nothing to save."""

    status_code = 400
    default_message = "Bad request"


class UnauthorizedException(AppException):
    """Wrong username or password."""

    status_code = 401
    default_message = "Unauthorized"


class ForbiddenException(AppException):
    """Authenticated, but the staff account may not act."""

    status_code = 403
    default_message = "Forbidden"


class NotFoundException(AppException):
    """Missing staff member or login."""

    status_code = 404
    default_message = "Resource not found"


class ConflictException(AppException):
    """Raised when a write collides with an existing username or email."""

    status_code = 409
    default_message = "Conflict"
