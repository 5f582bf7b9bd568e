"""Per-team notification settings of a member."""

from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.notifications.models import TeamNotificationSettings
from apps.teams.models import Team, TeamMembership
from apps.teams.services.exceptions import NotTeamMemberError, TeamNotFoundError

SETTING_FIELDS = (
    'notifications_enabled',
    'notify_fine_received',
    'notify_fine_paid',
    'notify_payment_recorded',
    'notify_member_joined',
    'notify_member_left',
    'notify_team_closed',
    'notify_team_reopened',
    'notify_reminder_unpaid',
    'notify_dispute_created',
    'notify_dispute_resolved',
)


def _require_active_member(team_id: UUID, user: User) -> Team:
    try:
        team = Team.objects.get(id=team_id)
    except Team.DoesNotExist:
        raise TeamNotFoundError(f"Team with ID {team_id} not found")
    if not TeamMembership.active.filter(team=team, user=user).exists():
        raise NotTeamMemberError("You are not a member of this team")
    return team


def get_team_settings(*, team_id: UUID, user: User) -> TeamNotificationSettings:
    """
    Settings of ``user`` for the team, all switched on until changed.

    Raises:
        TeamNotFoundError: If team doesn't exist
        NotTeamMemberError: If user is not an active member
    """
    team = _require_active_member(team_id, user)
    settings = TeamNotificationSettings.objects.filter(team=team, user=user).first()
    return settings or TeamNotificationSettings(team=team, user=user)


@transaction.atomic
def update_team_settings(*, team_id: UUID, user: User, **changes) -> TeamNotificationSettings:
    """
    Switch notification types on or off for one team.

    Raises:
        TeamNotFoundError: If team doesn't exist
        NotTeamMemberError: If user is not an active member
        TypeError: If ``changes`` names an unknown setting
    """
    unknown = set(changes) - set(SETTING_FIELDS)
    if unknown:
        raise TypeError(f"Unknown notification settings: {', '.join(sorted(unknown))}")

    team = _require_active_member(team_id, user)
    settings, _ = (
        TeamNotificationSettings.objects
        .select_for_update()
        .get_or_create(team=team, user=user)
    )
    for field, value in changes.items():
        setattr(settings, field, value)
    settings.save()
    return settings
