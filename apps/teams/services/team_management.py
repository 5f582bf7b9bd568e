"""
Team management service.

Handles team CRUD and configuration with proper transaction safety.
"""

from uuid import UUID

from django.db import DEFAULT_DB_ALIAS, transaction, IntegrityError

from apps.accounts.models import User
from apps.core.conf import fine_pot_setting
from apps.core.exceptions import ForbiddenError
from apps.teams.models import (
    ActivityType,
    DisputeMode,
    Team,
    TeamMembership,
    TeamRole,
    generate_invite_code,
)
from apps.notifications.models import NotificationType
from apps.notifications.services.inbox import notify_members
from apps.teams.permissions import can_manage_team

from .activity import record_activity
from .exceptions import NotTeamMemberError, TeamNotFoundError

UPDATABLE_FIELDS = (
    'name',
    'description',
    'sport',
    'fine_permission',
    'allow_custom_fines',
    'dispute_enabled',
    'dispute_mode',
    'dispute_votes_required',
    'is_closed',
)


def get_team(*, team_id: UUID, using: str = DEFAULT_DB_ALIAS, lock: bool = False) -> Team:
    """
    Fetch a team by ID.

    Args:
        team_id: UUID of the team
        using: Database alias
        lock: Take a row lock (caller must be inside a transaction)

    Raises:
        TeamNotFoundError: If team doesn't exist
    """
    queryset = Team.objects.using(using)
    if lock:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(id=team_id)
    except Team.DoesNotExist:
        raise TeamNotFoundError(f"Team with ID {team_id} not found")


def require_membership(
    *,
    team: Team,
    user: User,
    using: str = DEFAULT_DB_ALIAS,
    lock: bool = False
) -> TeamMembership:
    """
    Return the active membership of ``user`` in ``team``.

    Raises:
        NotTeamMemberError: If user is not an active member
    """
    queryset = TeamMembership.active.using(using)
    if lock:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(team=team, user=user)
    except TeamMembership.DoesNotExist:
        raise NotTeamMemberError(f"You are not a member of {team.name}")


def require_admin(*, team: Team, user: User, using: str = DEFAULT_DB_ALIAS) -> TeamMembership:
    membership = require_membership(team=team, user=user, using=using)
    if not can_manage_team(membership.role):
        raise ForbiddenError("Only team admins can perform this action")
    return membership


def _apply_dispute_defaults(team: Team) -> None:
    if not team.dispute_enabled:
        return
    if not team.dispute_mode:
        team.dispute_mode = DisputeMode.SIMPLE
    if team.dispute_mode == DisputeMode.COMMUNITY and not team.dispute_votes_required:
        team.dispute_votes_required = fine_pot_setting('DEFAULT_DISPUTE_VOTES_REQUIRED')


def create_team(
    *,
    name: str,
    creator: User,
    max_retries: int = 5,
    **settings
) -> Team:
    """
    Create a new team and add the creator as admin.

    This is a multi-step operation wrapped in a transaction:
    1. Generate unique invite code
    2. Create the team
    3. Create admin membership
    4. Log team_created

    Args:
        name: Team name
        creator: User who becomes the first admin
        max_retries: Maximum attempts to generate unique invite code
        **settings: Any of the updatable team fields

    Returns:
        Created Team instance

    Raises:
        RuntimeError: If cannot generate unique invite code after retries
    """
    unknown = set(settings) - set(UPDATABLE_FIELDS)
    if unknown:
        raise TypeError(f"Unknown team fields: {', '.join(sorted(unknown))}")

    for attempt in range(max_retries):
        try:
            # Each attempt is a separate transaction
            with transaction.atomic():
                team = Team(
                    name=name,
                    created_by=creator,
                    invite_code=generate_invite_code(),
                    **settings
                )
                _apply_dispute_defaults(team)
                team.save()

                TeamMembership.objects.create(
                    team=team,
                    user=creator,
                    role=TeamRole.ADMIN
                )
                record_activity(
                    team=team,
                    activity_type=ActivityType.TEAM_CREATED,
                    actor=creator,
                    metadata={'name': name},
                )
                return team

        except IntegrityError:
            # Invite code collision (very rare)
            if attempt == max_retries - 1:
                raise RuntimeError(
                    f"Failed to generate unique invite code after {max_retries} attempts"
                )
            continue

    raise RuntimeError("Unexpected error in team creation")


def _announce_closing(team: Team, actor: User) -> None:
    if team.is_closed:
        notification_type = NotificationType.TEAM_CLOSED
        title = f"{team.name} is closed"
        body = "No new fines or expenses can be recorded."
    else:
        notification_type = NotificationType.TEAM_REOPENED
        title = f"{team.name} is open again"
        body = "Fines and expenses can be recorded again."
    notify_members(
        team=team,
        notification_type=notification_type,
        title=title,
        body=body,
        exclude=(actor,),
    )


@transaction.atomic
def update_team(*, team_id: UUID, actor: User, **changes) -> Team:
    """
    Update team details and fine/dispute configuration (admin only).

    Enabling disputes without a mode selects simple mode; community mode
    without a vote threshold gets the configured default.

    Raises:
        TeamNotFoundError: If team doesn't exist
        ForbiddenError: If actor is not an admin
    """
    team = get_team(team_id=team_id, lock=True)
    require_admin(team=team, user=actor)
    was_closed = team.is_closed

    update_fields = ['updated_at']
    for field in UPDATABLE_FIELDS:
        if field in changes:
            setattr(team, field, changes[field])
            update_fields.append(field)

    _apply_dispute_defaults(team)
    for field in ('dispute_mode', 'dispute_votes_required'):
        if field not in update_fields:
            update_fields.append(field)

    team.save(update_fields=update_fields)

    if team.is_closed != was_closed:
        _announce_closing(team, actor)
    return team


@transaction.atomic
def delete_team(*, team_id: UUID, actor: User) -> None:
    """
    Delete a team (admin only).

    Cascading deletes remove memberships, rules, fines, payments, expenses,
    disputes and the activity log.
    """
    team = get_team(team_id=team_id, lock=True)
    require_admin(team=team, user=actor)
    team.delete()


@transaction.atomic
def regenerate_invite_code(*, team_id: UUID, actor: User) -> str:
    """Replace the invite code (admin only) and return the new one."""
    team = get_team(team_id=team_id, lock=True)
    require_admin(team=team, user=actor)
    return team.regenerate_invite_code()


def get_user_teams(*, user: User, include_closed: bool = True):
    teams = Team.objects.filter(
        memberships__user=user,
        memberships__is_deleted=False,
    )
    if not include_closed:
        teams = teams.filter(is_closed=False)
    return teams.select_related('created_by').distinct()
