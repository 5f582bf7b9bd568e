"""Domain-specific exceptions for accounts services."""

from apps.core.exceptions import ForbiddenError, InvalidInputError, ServiceError


class UserRegistrationError(InvalidInputError):
    """Raised when user registration fails."""

    default_code = 'REGISTRATION_FAILED'


class InvalidCredentialsError(ServiceError):
    """Raised when authentication credentials are invalid."""

    status_code = 401
    default_code = 'INVALID_CREDENTIALS'
    default_detail = 'Invalid email or password'


class InactiveAccountError(ForbiddenError):
    """Raised when account is deactivated."""

    default_detail = 'Account is deactivated'
