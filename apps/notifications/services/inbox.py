"""
Notification inbox.

Ledger, dispute and membership services write notifications inside their own
unit of work, so a rolled-back operation never leaves one behind. Members
who switched a notification type off for a team get no entry for it.
"""

from uuid import UUID

from django.db import DEFAULT_DB_ALIAS, transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.notifications.models import Notification, TeamNotificationSettings
from apps.teams.models import Team, TeamMembership

from .exceptions import NotificationNotFoundError


def _wants(user: User, team: Team, notification_type: str, using: str) -> bool:
    if team is None:
        return True
    settings = (
        TeamNotificationSettings.objects
        .using(using)
        .filter(user=user, team=team)
        .first()
    )
    return settings is None or settings.allows(notification_type)


def notify(
    *,
    user: User,
    notification_type: str,
    title: str,
    body: str,
    team: Team = None,
    data: dict = None,
    respect_settings: bool = True,
    using: str = DEFAULT_DB_ALIAS
):
    """
    Put a notification in ``user``'s inbox.

    Returns:
        The created Notification, or None if the user turned this type off
        for ``team``
    """
    if respect_settings and not _wants(user, team, notification_type, using):
        return None
    return Notification.objects.using(using).create(
        user=user,
        team=team,
        notification_type=notification_type,
        title=title,
        body=body,
        data=data or {},
    )


def notify_members(
    *,
    team: Team,
    notification_type: str,
    title: str,
    body: str,
    roles=None,
    exclude=(),
    data: dict = None,
    using: str = DEFAULT_DB_ALIAS
) -> list:
    """Notify the team's active members, optionally only those in ``roles``."""
    memberships = (
        TeamMembership.active
        .using(using)
        .filter(team=team)
        .select_related('user')
    )
    if roles:
        memberships = memberships.filter(role__in=roles)
    skipped = {str(user.pk) for user in exclude if user is not None}

    notifications = []
    for membership in memberships:
        if str(membership.user_id) in skipped:
            continue
        notification = notify(
            user=membership.user,
            notification_type=notification_type,
            title=title,
            body=body,
            team=team,
            data=data,
            using=using,
        )
        if notification is not None:
            notifications.append(notification)
    return notifications


def list_notifications(
    *,
    user: User,
    limit: int = 50,
    unread_only: bool = False
) -> QuerySet[Notification]:
    """Newest first."""
    notifications = Notification.objects.filter(user=user).select_related('team')
    if unread_only:
        notifications = notifications.filter(is_read=False)
    return notifications.order_by('-created_at')[:limit]


def unread_count(*, user: User) -> int:
    return Notification.objects.filter(user=user, is_read=False).count()


@transaction.atomic
def mark_read(*, notification_id: UUID, user: User) -> Notification:
    """
    Mark one of the user's notifications as read.

    Raises:
        NotificationNotFoundError: If the notification is not the user's
    """
    try:
        notification = (
            Notification.objects
            .select_for_update()
            .get(id=notification_id, user=user)
        )
    except Notification.DoesNotExist:
        raise NotificationNotFoundError(f"Notification with ID {notification_id} not found")

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = timezone.now()
        notification.save(update_fields=['is_read', 'read_at'])
    return notification


@transaction.atomic
def mark_all_read(*, user: User) -> int:
    """Returns the number of notifications that were unread."""
    return (
        Notification.objects
        .filter(user=user, is_read=False)
        .update(is_read=True, read_at=timezone.now())
    )
