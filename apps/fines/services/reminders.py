"""
Payment reminders sent by admins and treasurers.

A reminder is a direct request from the ledger keepers, so it reaches the
member even when they switched automatic notifications off.
"""

from uuid import UUID

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from apps.accounts.models import User
from apps.core.conf import fine_pot_setting
from apps.core.exceptions import ForbiddenError
from apps.fines.models import Fine, FineStatus
from apps.notifications.models import Notification, NotificationType
from apps.notifications.services.inbox import notify
from apps.teams.models import Team, TeamMembership
from apps.teams.permissions import can_manage_ledger
from apps.teams.services import NotMemberError, get_team, require_membership

from .exceptions import AlreadyPaidError, FineNotFoundError, NoUnpaidFinesError


def _require_ledger_keeper(team: Team, actor: User) -> None:
    membership = require_membership(team=team, user=actor)
    if not can_manage_ledger(membership.role):
        raise ForbiddenError("Only admins and treasurers can send reminders")


def _with_message(body: str, message: str) -> str:
    message = (message or '').strip()
    return f"{body}\n\n{message}" if message else body


@transaction.atomic
def send_fine_reminder(*, team_id: UUID, fine_id: UUID, actor: User, message: str = '') -> Notification:
    """
    Remind the offender of one open fine.

    Raises:
        TeamNotFoundError: If team doesn't exist
        ForbiddenError: If actor is not an admin or treasurer
        FineNotFoundError: If the fine is not in this team
        AlreadyPaidError: If the fine is fully paid
    """
    team = get_team(team_id=team_id)
    _require_ledger_keeper(team, actor)

    try:
        fine = (
            Fine.objects
            .select_for_update()
            .select_related('offender', 'rule')
            .get(id=fine_id, team=team)
        )
    except Fine.DoesNotExist:
        raise FineNotFoundError(f"Fine with ID {fine_id} not found")
    if fine.is_paid:
        raise AlreadyPaidError(f"Fine {fine_id} is already fully paid")

    notification = notify(
        user=fine.offender,
        team=team,
        notification_type=NotificationType.REMINDER_UNPAID,
        title=f"Reminder: {fine.label}",
        body=_with_message(
            f"You still owe {fine.outstanding} {fine_pot_setting('CURRENCY')} for this fine.",
            message,
        ),
        data={'fine_id': fine.id, 'outstanding': fine.outstanding},
        respect_settings=False,
    )

    fine.last_reminder_sent = timezone.now()
    fine.save(update_fields=['last_reminder_sent', 'updated_at'])
    return notification


@transaction.atomic
def send_member_reminder(*, team_id: UUID, user_id: UUID, actor: User, message: str = '') -> tuple:
    """
    Remind a member of all their open fines in one notification.

    Returns:
        tuple: (notification, number of open fines reminded of)

    Raises:
        TeamNotFoundError: If team doesn't exist
        ForbiddenError: If actor is not an admin or treasurer
        NotMemberError: If the user is not an active member
        NoUnpaidFinesError: If the member has no open fines
    """
    team = get_team(team_id=team_id)
    _require_ledger_keeper(team, actor)

    try:
        member = TeamMembership.active.select_related('user').get(team=team, user_id=user_id).user
    except TeamMembership.DoesNotExist:
        raise NotMemberError("User is not a member of this team")

    open_fines = (
        Fine.objects
        .select_for_update()
        .filter(team=team, offender=member)
        .exclude(status=FineStatus.PAID)
    )
    fine_ids = list(open_fines.values_list('id', flat=True))
    if not fine_ids:
        raise NoUnpaidFinesError(f"{member.get_display_name()} has no unpaid fines")

    totals = Fine.objects.filter(id__in=fine_ids).aggregate(
        amount=Sum('amount'),
        paid=Sum('amount_paid'),
    )
    outstanding = totals['amount'] - totals['paid']

    notification = notify(
        user=member,
        team=team,
        notification_type=NotificationType.REMINDER_UNPAID,
        title=f"Reminder: {len(fine_ids)} unpaid fine(s) in {team.name}",
        body=_with_message(
            f"You still owe {outstanding} {fine_pot_setting('CURRENCY')} in total.",
            message,
        ),
        data={'fine_ids': fine_ids, 'outstanding': outstanding},
        respect_settings=False,
    )

    Fine.objects.filter(id__in=fine_ids).update(last_reminder_sent=timezone.now())
    return notification, len(fine_ids)
