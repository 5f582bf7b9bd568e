"""
Tests for the permission gate.

The predicates are pure functions of team configuration and role, so most
cases need no database.
"""

import pytest
from types import SimpleNamespace

from apps.teams.models import FinePermission, Team, TeamRole
from apps.teams.permissions import (
    IsTeamAdmin,
    IsTeamMember,
    IsTeamTreasurer,
    can_create_fine,
    can_manage_ledger,
    can_manage_team,
    can_resolve_dispute,
)


class TestCanCreateFine:
    """Fine permission level x role."""

    @pytest.mark.parametrize('level, role, expected', [
        (FinePermission.ADMIN_ONLY, TeamRole.ADMIN, True),
        (FinePermission.ADMIN_ONLY, TeamRole.TREASURER, False),
        (FinePermission.ADMIN_ONLY, TeamRole.MEMBER, False),
        (FinePermission.TREASURER, TeamRole.ADMIN, True),
        (FinePermission.TREASURER, TeamRole.TREASURER, True),
        (FinePermission.TREASURER, TeamRole.MEMBER, False),
        (FinePermission.EVERYONE, TeamRole.ADMIN, True),
        (FinePermission.EVERYONE, TeamRole.TREASURER, True),
        (FinePermission.EVERYONE, TeamRole.MEMBER, True),
    ])
    def test_matrix(self, level, role, expected):
        assert can_create_fine(level, role) is expected

    def test_accepts_team_instance(self):
        team = Team(fine_permission=FinePermission.ADMIN_ONLY)

        assert can_create_fine(team, TeamRole.ADMIN) is True
        assert can_create_fine(team, TeamRole.MEMBER) is False

    def test_unknown_role_denied(self):
        assert can_create_fine(FinePermission.EVERYONE, 'owner') is False
        assert can_create_fine(FinePermission.EVERYONE, None) is False

    def test_unknown_level_denied(self):
        assert can_create_fine('captains', TeamRole.ADMIN) is False


class TestRolePredicates:

    def test_ledger_roles(self):
        assert can_manage_ledger(TeamRole.ADMIN)
        assert can_manage_ledger(TeamRole.TREASURER)
        assert not can_manage_ledger(TeamRole.MEMBER)

    def test_dispute_resolvers(self):
        assert can_resolve_dispute(TeamRole.TREASURER)
        assert not can_resolve_dispute(TeamRole.MEMBER)
        assert not can_resolve_dispute(None)

    def test_team_management_is_admin_only(self):
        assert can_manage_team(TeamRole.ADMIN)
        assert not can_manage_team(TeamRole.TREASURER)


@pytest.mark.django_db
class TestPermissionClasses:
    """DRF permission classes read the team_id URL kwarg."""

    def _check(self, permission, user, team):
        request = SimpleNamespace(user=user)
        view = SimpleNamespace(kwargs={'team_id': team.id})
        return permission().has_permission(request, view)

    def test_member_permissions(self, team_with_members, member_user):
        assert self._check(IsTeamMember, member_user, team_with_members)
        assert not self._check(IsTeamTreasurer, member_user, team_with_members)
        assert not self._check(IsTeamAdmin, member_user, team_with_members)

    def test_treasurer_permissions(self, team_with_members, treasurer_user):
        assert self._check(IsTeamTreasurer, treasurer_user, team_with_members)
        assert not self._check(IsTeamAdmin, treasurer_user, team_with_members)

    def test_admin_permissions(self, team_with_members, admin_user):
        assert self._check(IsTeamAdmin, admin_user, team_with_members)
        assert self._check(IsTeamTreasurer, admin_user, team_with_members)

    def test_non_member_denied(self, team, other_user):
        assert not self._check(IsTeamMember, other_user, team)
