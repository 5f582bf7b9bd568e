"""User registration service."""

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from .exceptions import UserRegistrationError

User = get_user_model()


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    display_name: str = ""
) -> User:
    """
    Register a new user.

    Args:
        email: User's email address
        password: User's password (will be hashed)
        display_name: Optional display name

    Returns:
        Created User instance

    Raises:
        UserRegistrationError: If the email is already registered
    """
    if User.objects.filter(email__iexact=email).exists():
        raise UserRegistrationError("A user with this email already exists")

    try:
        return User.objects.create_user(
            email=email,
            password=password,
            display_name=display_name
        )
    except IntegrityError:
        raise UserRegistrationError("A user with this email already exists")
