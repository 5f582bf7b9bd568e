"""
Activity log service.

Entries are written by the mutating services inside their own transaction,
so a rolled-back operation never leaves an entry behind.
"""

from uuid import UUID

from django.db import DEFAULT_DB_ALIAS
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.teams.models import ActivityLog, Team


def record_activity(
    *,
    team: Team,
    activity_type: str,
    actor: User = None,
    target_user: User = None,
    metadata: dict = None,
    using: str = DEFAULT_DB_ALIAS
) -> ActivityLog:
    """
    Append an activity entry for ``team``.

    Decimal and UUID values in ``metadata`` are stored as strings by the
    field's ``DjangoJSONEncoder``.
    """
    return ActivityLog.objects.using(using).create(
        team=team,
        actor=actor,
        activity_type=activity_type,
        target_user=target_user,
        metadata=metadata or {},
    )


def list_activity(
    *,
    team_id: UUID,
    limit: int = 50,
    using: str = DEFAULT_DB_ALIAS
) -> QuerySet[ActivityLog]:
    """Newest entries first."""
    return (
        ActivityLog.objects
        .using(using)
        .filter(team_id=team_id)
        .select_related('actor', 'target_user')
        .order_by('-created_at')[:limit]
    )
