"""
Permission gate.

The module-level predicates are pure functions of (team configuration,
actor role) and are what the services consult. The DRF permission classes
below wrap them for the API layer; they look up the actor's active
membership for the ``team_id`` URL kwarg.
"""

from rest_framework import permissions

from .models import FinePermission, TeamMembership, TeamRole

LEDGER_ROLES = frozenset({TeamRole.ADMIN, TeamRole.TREASURER})


def can_create_fine(team, role):
    """
    Return True if a member with ``role`` may issue fines in ``team``.

    ``team`` may be a Team instance or a bare fine permission value.
    Unknown roles and unknown permission levels are denied.
    """
    if role not in TeamRole.values:
        return False

    level = getattr(team, 'fine_permission', team)
    if level == FinePermission.ADMIN_ONLY:
        return role == TeamRole.ADMIN
    if level == FinePermission.TREASURER:
        return role in LEDGER_ROLES
    if level == FinePermission.EVERYONE:
        return True
    return False


def can_manage_ledger(role):
    """Record payments and expenses."""
    return role in LEDGER_ROLES


def can_resolve_dispute(role):
    return role in LEDGER_ROLES


def can_manage_team(role):
    """Settings, rules, member roles and fine deletion."""
    return role == TeamRole.ADMIN


def _team_role(request, view):
    team_id = view.kwargs.get('team_id')
    if team_id is None or not request.user.is_authenticated:
        return None

    cache = getattr(request, '_team_roles', None)
    if cache is None:
        cache = request._team_roles = {}
    if team_id not in cache:
        cache[team_id] = (
            TeamMembership.active
            .filter(team_id=team_id, user=request.user)
            .values_list('role', flat=True)
            .first()
        )
    return cache[team_id]


class IsTeamMember(permissions.BasePermission):
    """
    Permission: User must be an active member of the team in the URL.
    """

    message = 'You are not a member of this team.'

    def has_permission(self, request, view):
        return _team_role(request, view) is not None


class IsTeamAdmin(permissions.BasePermission):
    """
    Permission: User must be an admin of the team in the URL.
    """

    message = 'Only team admins can perform this action.'

    def has_permission(self, request, view):
        return can_manage_team(_team_role(request, view))


class IsTeamTreasurer(permissions.BasePermission):
    """
    Permission: User must be an admin or treasurer of the team in the URL.
    """

    message = 'Only team admins and treasurers can perform this action.'

    def has_permission(self, request, view):
        return can_manage_ledger(_team_role(request, view))
