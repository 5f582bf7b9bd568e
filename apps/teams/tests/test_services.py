"""
Service layer unit tests for teams app.

Tests cover:
- Team creation and configuration
- Joining, leaving and role changes
- Soft vs hard member removal
- Balances, stats and leaderboard
"""

import pytest
from decimal import Decimal
from uuid import uuid4
from unittest.mock import patch

from apps.core.exceptions import ForbiddenError
from apps.fines.models import Expense, Fine, Payment
from apps.teams.models import ActivityLog, ActivityType, DisputeMode, TeamMembership, TeamRole
from apps.teams.services import (
    create_team,
    update_team,
    delete_team,
    regenerate_invite_code,
    get_user_teams,
    join_team,
    remove_member,
    update_member_role,
    get_team_members,
    get_member_balance,
    get_team_stats,
    get_team_leaderboard,
    list_activity,
    record_activity,
)
from apps.teams.services.exceptions import (
    AlreadyMemberError,
    InvalidInviteCodeError,
    InvalidRoleError,
    LastAdminError,
    NotMemberError,
    NotTeamMemberError,
    TeamNotFoundError,
)


def _fine(team, offender, issuer, amount, paid='0.00'):
    fine = Fine(
        team=team,
        offender=offender,
        issued_by=issuer,
        custom_label='Late',
        amount=Decimal(amount),
    )
    fine.apply_amount(Decimal(paid))
    fine.save()
    return fine


# =============================================================================
# Team Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestTeamManagement:
    """Tests for team_management.py service functions."""

    def test_create_team_success(self, admin_user):
        """Creating a team also creates the admin membership."""
        team = create_team(name='Tuesday Five-a-side', creator=admin_user, sport='football')

        assert team.name == 'Tuesday Five-a-side'
        assert team.created_by == admin_user
        assert len(team.invite_code) == 16

        membership = TeamMembership.objects.get(team=team, user=admin_user)
        assert membership.role == TeamRole.ADMIN
        assert membership.credit == Decimal('0.00')

    def test_create_team_logs_activity(self, admin_user):
        team = create_team(name='Logged Team', creator=admin_user)

        entry = ActivityLog.objects.get(team=team)
        assert entry.activity_type == ActivityType.TEAM_CREATED
        assert entry.actor == admin_user

    def test_create_team_rejects_unknown_fields(self, admin_user):
        with pytest.raises(TypeError):
            create_team(name='Bad', creator=admin_user, owner=admin_user)

    def test_create_team_enabling_disputes_defaults_to_simple(self, admin_user):
        """Disputes enabled without a mode fall back to simple mode."""
        team = create_team(name='Disputes', creator=admin_user, dispute_enabled=True)

        assert team.dispute_mode == DisputeMode.SIMPLE

    def test_community_mode_gets_default_threshold(self, admin_user, settings):
        settings.FINE_POT = {'DEFAULT_DISPUTE_VOTES_REQUIRED': 4}

        team = create_team(
            name='Voters',
            creator=admin_user,
            dispute_enabled=True,
            dispute_mode=DisputeMode.COMMUNITY,
        )

        assert team.dispute_votes_required == 4

    def test_create_team_fails_after_repeated_code_collisions(self, team, admin_user):
        """Gives up when every generated invite code is taken."""
        with patch(
            'apps.teams.services.team_management.generate_invite_code',
            return_value=team.invite_code,
        ):
            with pytest.raises(RuntimeError, match='Failed to generate unique invite code'):
                create_team(name='Clash', creator=admin_user, max_retries=2)

    def test_update_team_by_admin(self, team, admin_user):
        updated = update_team(
            team_id=team.id,
            actor=admin_user,
            name='Renamed',
            fine_permission='admin_only',
        )

        assert updated.name == 'Renamed'
        assert updated.fine_permission == 'admin_only'

    def test_update_team_by_non_admin_forbidden(self, team_with_members, treasurer_user):
        with pytest.raises(ForbiddenError):
            update_team(team_id=team_with_members.id, actor=treasurer_user, name='Nope')

    def test_update_team_by_non_member_forbidden(self, team, other_user):
        with pytest.raises(NotTeamMemberError):
            update_team(team_id=team.id, actor=other_user, name='Nope')

    def test_update_team_not_found(self, admin_user):
        with pytest.raises(TeamNotFoundError):
            update_team(team_id=uuid4(), actor=admin_user, name='Nope')

    def test_regenerate_invite_code(self, team, admin_user):
        old_code = team.invite_code

        new_code = regenerate_invite_code(team_id=team.id, actor=admin_user)

        team.refresh_from_db()
        assert new_code != old_code
        assert team.invite_code == new_code

    def test_delete_team_removes_ledger(self, team_with_members, admin_user, member_user):
        team = team_with_members
        fine = _fine(team, member_user, admin_user, '10.00')
        Payment.objects.create(
            team=team, fine=fine, payer=member_user, amount=Decimal('5.00'), recorded_by=admin_user
        )

        delete_team(team_id=team.id, actor=admin_user)

        assert not Fine.objects.filter(team_id=team.id).exists()
        assert not Payment.objects.filter(team_id=team.id).exists()
        assert not TeamMembership.objects.filter(team_id=team.id).exists()

    def test_get_user_teams_excludes_left_teams(self, team_with_members, member_user):
        TeamMembership.objects.filter(team=team_with_members, user=member_user).update(is_deleted=True)

        assert list(get_user_teams(user=member_user)) == []

    def test_get_user_teams_can_skip_closed(self, team, admin_user):
        team.is_closed = True
        team.save()

        assert list(get_user_teams(user=admin_user)) == [team]
        assert list(get_user_teams(user=admin_user, include_closed=False)) == []


# =============================================================================
# Membership Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestMembershipManagement:
    """Tests for membership_management.py service functions."""

    def test_join_team_success(self, team, other_user):
        membership = join_team(user=other_user, invite_code=team.invite_code)

        assert membership.team == team
        assert membership.role == TeamRole.MEMBER
        assert ActivityLog.objects.filter(
            team=team, activity_type=ActivityType.MEMBER_JOINED, actor=other_user
        ).exists()

    def test_join_team_invalid_code(self, other_user):
        with pytest.raises(InvalidInviteCodeError) as exc_info:
            join_team(user=other_user, invite_code='doesnotexist')

        assert exc_info.value.code == 'INVALID_CODE'

    def test_join_team_twice(self, team, admin_user):
        with pytest.raises(AlreadyMemberError) as exc_info:
            join_team(user=admin_user, invite_code=team.invite_code)

        assert exc_info.value.code == 'ALREADY_MEMBER'

    def test_rejoin_reactivates_soft_deleted_membership(self, team, admin_user, other_user):
        """Rejoining keeps the same membership row and its credit."""
        membership = TeamMembership.objects.create(
            team=team, user=other_user, role=TeamRole.TREASURER,
            credit=Decimal('7.50'), is_deleted=True,
        )

        rejoined = join_team(user=other_user, invite_code=team.invite_code)

        assert rejoined.id == membership.id
        assert rejoined.is_deleted is False
        assert rejoined.role == TeamRole.MEMBER
        assert rejoined.credit == Decimal('7.50')

    def test_member_without_history_is_hard_deleted(self, team_with_members, member_user):
        soft = remove_member(team_id=team_with_members.id, user_id=member_user.id, actor=member_user)

        assert soft is False
        assert not TeamMembership.objects.filter(team=team_with_members, user=member_user).exists()

    def test_member_with_fines_is_soft_deleted(self, team_with_members, admin_user, member_user):
        _fine(team_with_members, member_user, admin_user, '5.00')

        soft = remove_member(team_id=team_with_members.id, user_id=member_user.id, actor=admin_user)

        assert soft is True
        membership = TeamMembership.objects.get(team=team_with_members, user=member_user)
        assert membership.is_deleted is True

    def test_issuer_is_soft_deleted(self, team_with_members, treasurer_user, member_user):
        """Having issued a fine counts as ledger history."""
        _fine(team_with_members, member_user, treasurer_user, '5.00')

        soft = remove_member(
            team_id=team_with_members.id, user_id=treasurer_user.id, actor=treasurer_user
        )

        assert soft is True

    def test_member_cannot_remove_others(self, team_with_members, member_user, treasurer_user):
        with pytest.raises(ForbiddenError):
            remove_member(team_id=team_with_members.id, user_id=treasurer_user.id, actor=member_user)

    def test_remove_unknown_member(self, team, admin_user, other_user):
        with pytest.raises(NotMemberError):
            remove_member(team_id=team.id, user_id=other_user.id, actor=admin_user)

    def test_last_admin_cannot_leave(self, team_with_members, admin_user):
        with pytest.raises(LastAdminError):
            remove_member(team_id=team_with_members.id, user_id=admin_user.id, actor=admin_user)

    def test_admin_can_leave_when_another_admin_exists(self, team_with_members, admin_user, treasurer_user):
        update_member_role(
            team_id=team_with_members.id, user_id=treasurer_user.id,
            role=TeamRole.ADMIN, actor=admin_user,
        )

        remove_member(team_id=team_with_members.id, user_id=admin_user.id, actor=admin_user)

        assert not TeamMembership.active.filter(team=team_with_members, user=admin_user).exists()

    def test_update_member_role(self, team_with_members, admin_user, member_user):
        membership = update_member_role(
            team_id=team_with_members.id, user_id=member_user.id,
            role=TeamRole.TREASURER, actor=admin_user,
        )

        assert membership.role == TeamRole.TREASURER

    def test_update_member_role_invalid(self, team_with_members, admin_user, member_user):
        with pytest.raises(InvalidRoleError):
            update_member_role(
                team_id=team_with_members.id, user_id=member_user.id,
                role='owner', actor=admin_user,
            )

    def test_cannot_demote_last_admin(self, team, admin_user):
        with pytest.raises(LastAdminError):
            update_member_role(
                team_id=team.id, user_id=admin_user.id,
                role=TeamRole.MEMBER, actor=admin_user,
            )

    def test_get_team_members_skips_soft_deleted(self, team_with_members, member_user):
        TeamMembership.objects.filter(team=team_with_members, user=member_user).update(is_deleted=True)

        members = get_team_members(team_id=team_with_members.id)

        assert member_user not in [m.user for m in members]
        assert len(members) == 2


# =============================================================================
# Balance Service Tests
# =============================================================================

@pytest.mark.django_db
class TestBalances:
    """Tests for balances.py aggregates."""

    def test_member_balance(self, team_with_members, admin_user, member_user):
        team = team_with_members
        _fine(team, member_user, admin_user, '10.00', paid='4.00')
        _fine(team, member_user, admin_user, '5.00', paid='5.00')
        TeamMembership.objects.filter(team=team, user=member_user).update(credit=Decimal('2.00'))

        balance = get_member_balance(team_id=team.id, user_id=member_user.id)

        assert balance['total_fines'] == Decimal('15.00')
        assert balance['total_paid'] == Decimal('9.00')
        assert balance['outstanding'] == Decimal('6.00')
        assert balance['credit'] == Decimal('2.00')
        assert balance['fine_count'] == 2
        assert balance['unpaid_count'] == 1

    def test_member_balance_of_soft_deleted_member(self, team_with_members, admin_user, member_user):
        _fine(team_with_members, member_user, admin_user, '3.00')
        TeamMembership.objects.filter(team=team_with_members, user=member_user).update(is_deleted=True)

        balance = get_member_balance(team_id=team_with_members.id, user_id=member_user.id)

        assert balance['outstanding'] == Decimal('3.00')

    def test_member_balance_of_stranger(self, team, other_user):
        with pytest.raises(NotMemberError):
            get_member_balance(team_id=team.id, user_id=other_user.id)

    def test_team_stats(self, team_with_members, admin_user, member_user, treasurer_user):
        team = team_with_members
        fine = _fine(team, member_user, admin_user, '10.00', paid='10.00')
        _fine(team, treasurer_user, admin_user, '6.00')
        Payment.objects.create(
            team=team, fine=fine, payer=member_user, amount=Decimal('10.00'), recorded_by=admin_user
        )
        Payment.objects.create(
            team=team, payer=member_user, amount=Decimal('2.00'), recorded_by=admin_user
        )
        Expense.objects.create(
            team=team, amount=Decimal('5.00'), description='Drinks', recorded_by=admin_user
        )

        stats = get_team_stats(team_id=team.id)

        assert stats['total_fined'] == Decimal('16.00')
        assert stats['total_paid'] == Decimal('10.00')
        assert stats['total_outstanding'] == Decimal('6.00')
        assert stats['total_collected'] == Decimal('12.00')
        assert stats['total_expenses'] == Decimal('5.00')
        assert stats['pot_balance'] == Decimal('7.00')
        assert stats['fine_count'] == 2
        assert stats['paid_fine_count'] == 1
        assert stats['member_count'] == 3

    def test_empty_team_stats(self, team):
        stats = get_team_stats(team_id=team.id)

        assert stats['total_fined'] == Decimal('0.00')
        assert stats['pot_balance'] == Decimal('0.00')
        assert stats['member_count'] == 1

    def test_leaderboard_ranks_by_total_fined(self, team_with_members, admin_user, member_user, treasurer_user):
        team = team_with_members
        _fine(team, member_user, admin_user, '10.00')
        _fine(team, member_user, admin_user, '5.00', paid='5.00')
        _fine(team, treasurer_user, admin_user, '8.00')

        board = get_team_leaderboard(team_id=team.id)

        assert [entry['user'] for entry in board] == [member_user, treasurer_user, admin_user]
        assert board[0]['rank'] == 1
        assert board[0]['total_fined'] == Decimal('15.00')
        assert board[0]['outstanding'] == Decimal('10.00')
        assert board[0]['fine_count'] == 2
        assert board[2]['total_fined'] == Decimal('0.00')

    def test_leaderboard_ignores_other_teams(self, team_with_members, admin_user, member_user):
        other_team = create_team(name='Other', creator=admin_user)
        TeamMembership.objects.create(team=other_team, user=member_user)
        _fine(other_team, member_user, admin_user, '50.00')

        board = get_team_leaderboard(team_id=team_with_members.id)

        member_entry = next(e for e in board if e['user'] == member_user)
        assert member_entry['total_fined'] == Decimal('0.00')

    def test_list_activity(self, team, other_user):
        join_team(user=other_user, invite_code=team.invite_code)
        remove_member(team_id=team.id, user_id=other_user.id, actor=other_user)

        entries = list(list_activity(team_id=team.id))

        assert {e.activity_type for e in entries} == {
            ActivityType.MEMBER_JOINED,
            ActivityType.MEMBER_LEFT,
        }
        assert len(list_activity(team_id=team.id, limit=1)) == 1

    def test_activity_metadata_keeps_money_and_ids_as_strings(self, team, admin_user):
        fine_id = uuid4()
        record_activity(
            team=team,
            activity_type=ActivityType.FINE_ISSUED,
            actor=admin_user,
            metadata={'fine_id': fine_id, 'amount': Decimal('7.50'), 'ids': [fine_id]},
        )

        entry = ActivityLog.objects.get(team=team, activity_type=ActivityType.FINE_ISSUED)
        assert entry.metadata == {
            'fine_id': str(fine_id),
            'amount': '7.50',
            'ids': [str(fine_id)],
        }

    def test_list_activity_on_explicit_alias(self, team, other_user):
        join_team(user=other_user, invite_code=team.invite_code)

        entries = list(list_activity(team_id=team.id, using='default'))

        assert [e.activity_type for e in entries] == [ActivityType.MEMBER_JOINED]
