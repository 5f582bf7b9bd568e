"""
Domain-specific exceptions for teams app.

These subclass the shared error taxonomy in ``apps.core.exceptions`` and are
rendered by the API exception handler, so views never catch them.
"""

from apps.core.exceptions import (
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)


class TeamNotFoundError(NotFoundError):
    """Raised when a team does not exist."""

    default_detail = 'Team not found.'


class NotMemberError(NotFoundError):
    """Raised when the target user has no membership in the team."""

    default_detail = 'User is not a member of this team.'


class NotTeamMemberError(ForbiddenError):
    """Raised when the acting user is not an active member of the team."""

    default_detail = 'You are not a member of this team.'


class AlreadyMemberError(InvalidStateError):
    """Raised when a user tries to join a team they're already in."""

    default_code = 'ALREADY_MEMBER'
    default_detail = 'You are already a member of this team.'


class InvalidInviteCodeError(NotFoundError):
    """Raised when an invite code matches no team."""

    default_code = 'INVALID_CODE'
    default_detail = 'Invalid invite code.'


class LastAdminError(InvalidStateError):
    """Raised when the only admin tries to leave or be demoted."""

    default_detail = 'A team must keep at least one admin.'


class InvalidRoleError(InvalidInputError):
    """Raised when a role value is not one of the team roles."""
