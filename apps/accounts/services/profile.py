"""Profile service."""

from django.db import transaction

from apps.core.exceptions import InvalidInputError
from apps.teams.models import TeamMembership

from ..models import User


@transaction.atomic
def update_profile(*, user: User, display_name: str) -> User:
    """
    Change the name shown to teammates.

    Raises:
        InvalidInputError: If the name is blank
    """
    display_name = (display_name or '').strip()
    if not display_name:
        raise InvalidInputError("Display name cannot be blank")

    user.display_name = display_name
    user.save(update_fields=['display_name'])
    return user


def get_user_memberships(*, user: User):
    """Active team memberships of ``user``, newest team first."""
    return (
        TeamMembership.active
        .filter(user=user)
        .select_related('team')
        .order_by('-team__created_at')
    )
