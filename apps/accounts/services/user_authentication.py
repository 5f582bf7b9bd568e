"""Email and password login."""

from django.contrib.auth import get_user_model
from django.contrib.auth.models import update_last_login

from .exceptions import InvalidCredentialsError, InactiveAccountError

User = get_user_model()


def authenticate_user(*, email: str, password: str) -> User:
    """
    Check a member's credentials and stamp ``last_login``.

    Emails match case-insensitively. An unknown email still pays for one
    password hash, so it answers as slowly as a wrong password.

    Raises:
        InvalidCredentialsError: If no account matches the email and password
        InactiveAccountError: If the password is right but the account was
            deactivated
    """
    user = User.objects.filter(email__iexact=(email or '').strip()).first()
    if user is None:
        User().set_password(password)
        raise InvalidCredentialsError()

    if not user.check_password(password):
        raise InvalidCredentialsError()
    if not user.is_active:
        raise InactiveAccountError()

    update_last_login(None, user)
    return user
