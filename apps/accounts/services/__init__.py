"""Services for accounts business logic."""

from .exceptions import (
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
)
from .user_registration import register_user
from .user_authentication import authenticate_user
from .profile import update_profile, get_user_memberships

__all__ = [
    # Exceptions
    'UserRegistrationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    # Services
    'register_user',
    'authenticate_user',
    'update_profile',
    'get_user_memberships',
]
