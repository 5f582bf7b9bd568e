"""
Membership management service.

Handles team membership operations with concurrency protection.
"""

from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.core.exceptions import ForbiddenError
from apps.fines.models import Fine, Payment
from apps.notifications.models import NotificationType
from apps.notifications.services.inbox import notify_members
from apps.teams.models import ActivityType, Team, TeamMembership, TeamRole
from apps.teams.permissions import can_manage_team

from .activity import record_activity
from .exceptions import (
    AlreadyMemberError,
    InvalidInviteCodeError,
    InvalidRoleError,
    LastAdminError,
    NotMemberError,
)
from .team_management import get_team, require_admin, require_membership


def _has_ledger_history(team: Team, user_id) -> bool:
    return (
        Fine.objects.filter(team=team, offender_id=user_id).exists()
        or Fine.objects.filter(team=team, issued_by_id=user_id).exists()
        or Payment.objects.filter(team=team, payer_id=user_id).exists()
    )


def _is_last_admin(membership: TeamMembership) -> bool:
    if membership.role != TeamRole.ADMIN:
        return False
    return not (
        TeamMembership.active
        .filter(team_id=membership.team_id, role=TeamRole.ADMIN)
        .exclude(id=membership.id)
        .exists()
    )


@transaction.atomic
def join_team(*, user: User, invite_code: str) -> TeamMembership:
    """
    Join a team using an invite code.

    A soft-deleted membership is reactivated as a plain member; its credit
    and history are kept.

    Args:
        user: User joining the team
        invite_code: Invite code of the team

    Returns:
        Created or reactivated TeamMembership instance

    Raises:
        InvalidInviteCodeError: If no team has this invite code
        AlreadyMemberError: If user is already an active member
    """
    # Lock the team to prevent concurrent joins
    try:
        team = (
            Team.objects
            .select_for_update()
            .get(invite_code=invite_code)
        )
    except Team.DoesNotExist:
        raise InvalidInviteCodeError("Invalid invite code")

    membership = (
        TeamMembership.objects
        .select_for_update()
        .filter(team=team, user=user)
        .first()
    )

    if membership is not None:
        if not membership.is_deleted:
            raise AlreadyMemberError(f"You are already a member of {team.name}")
        membership.is_deleted = False
        membership.role = TeamRole.MEMBER
        membership.save(update_fields=['is_deleted', 'role'])
    else:
        try:
            membership = TeamMembership.objects.create(
                team=team,
                user=user,
                role=TeamRole.MEMBER
            )
        except IntegrityError:
            raise AlreadyMemberError(f"You are already a member of {team.name}")

    record_activity(
        team=team,
        activity_type=ActivityType.MEMBER_JOINED,
        actor=user,
        target_user=user,
    )
    notify_members(
        team=team,
        notification_type=NotificationType.MEMBER_JOINED,
        title=f"{user.get_display_name()} joined {team.name}",
        body="A new member joined the team.",
        roles=(TeamRole.ADMIN,),
        exclude=(user,),
        data={'user_id': user.id},
    )
    return membership


@transaction.atomic
def remove_member(*, team_id: UUID, user_id: UUID, actor: User) -> bool:
    """
    Remove a member from a team, or leave it when ``user_id`` is the actor.

    Members with fine or payment history are soft-deleted so the ledger stays
    intact; everyone else is removed outright. The last admin cannot leave.

    Returns:
        True if the membership was soft-deleted, False if it was deleted

    Raises:
        TeamNotFoundError: If team doesn't exist
        ForbiddenError: If actor is neither the member nor an admin
        NotMemberError: If target user is not an active member
        LastAdminError: If target is the only admin
    """
    team = get_team(team_id=team_id)
    actor_membership = require_membership(team=team, user=actor)

    is_self = str(actor.id) == str(user_id)
    if not is_self and not can_manage_team(actor_membership.role):
        raise ForbiddenError("Only team admins can remove other members")

    try:
        membership = (
            TeamMembership.active
            .select_for_update()
            .select_related('user')
            .get(team=team, user_id=user_id)
        )
    except TeamMembership.DoesNotExist:
        raise NotMemberError("User is not a member of this team")

    if _is_last_admin(membership):
        raise LastAdminError("The last admin cannot leave the team")

    soft = _has_ledger_history(team, user_id)
    if soft:
        membership.is_deleted = True
        membership.save(update_fields=['is_deleted'])
    else:
        membership.delete()

    record_activity(
        team=team,
        activity_type=ActivityType.MEMBER_LEFT,
        actor=actor,
        target_user=membership.user,
        metadata={'removed_by_admin': not is_self, 'soft_deleted': soft},
    )
    notify_members(
        team=team,
        notification_type=NotificationType.MEMBER_LEFT,
        title=f"{membership.user.get_display_name()} left {team.name}",
        body="A member left the team." if is_self else "A member was removed from the team.",
        roles=(TeamRole.ADMIN,),
        exclude=(actor, membership.user),
        data={'user_id': membership.user_id},
    )
    return soft


@transaction.atomic
def update_member_role(
    *,
    team_id: UUID,
    user_id: UUID,
    role: str,
    actor: User
) -> TeamMembership:
    """
    Update a member's role (admin only).

    Uses select_for_update to prevent concurrent role changes.

    Raises:
        InvalidRoleError: If role is not a team role
        TeamNotFoundError: If team doesn't exist
        ForbiddenError: If actor is not an admin
        NotMemberError: If target user is not an active member
        LastAdminError: If demoting the only admin
    """
    if role not in TeamRole.values:
        raise InvalidRoleError(f"Invalid role. Must be one of: {', '.join(TeamRole.values)}")

    team = get_team(team_id=team_id)
    require_admin(team=team, user=actor)

    try:
        membership = (
            TeamMembership.active
            .select_for_update()
            .select_related('user')
            .get(team=team, user_id=user_id)
        )
    except TeamMembership.DoesNotExist:
        raise NotMemberError("User is not a member of this team")

    if role != TeamRole.ADMIN and _is_last_admin(membership):
        raise LastAdminError("Cannot demote the last admin")

    membership.role = role
    membership.save(update_fields=['role'])
    return membership


def get_team_members(*, team_id: UUID) -> QuerySet[TeamMembership]:
    """
    Get active members of a team, admins first.

    Raises:
        TeamNotFoundError: If team doesn't exist
    """
    get_team(team_id=team_id)

    return (
        TeamMembership.active
        .filter(team_id=team_id)
        .select_related('user')
        .order_by('role', 'joined_at')
    )
