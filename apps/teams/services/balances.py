"""
Team balances and statistics.

Read-only aggregates over the ledger. Forgiven fines are stored as fully
paid and are counted as paid here.
"""

from decimal import Decimal
from uuid import UUID

from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce

from apps.fines.models import Expense, Fine, FineStatus, Payment
from apps.teams.models import TeamMembership

from .exceptions import NotMemberError
from .team_management import get_team

ZERO = Decimal('0.00')


def _sum(expression, **kwargs):
    return Coalesce(
        Sum(expression, **kwargs),
        Value(ZERO),
        output_field=DecimalField(max_digits=12, decimal_places=2),
    )


def get_member_balance(*, team_id: UUID, user_id: UUID) -> dict:
    """
    Fine totals and banked credit for one member.

    Soft-deleted members still have a balance.

    Raises:
        TeamNotFoundError: If team doesn't exist
        NotMemberError: If the user never belonged to the team
    """
    team = get_team(team_id=team_id)

    try:
        membership = TeamMembership.objects.get(team=team, user_id=user_id)
    except TeamMembership.DoesNotExist:
        raise NotMemberError("User is not a member of this team")

    totals = Fine.objects.filter(team=team, offender_id=user_id).aggregate(
        total_fines=_sum('amount'),
        total_paid=_sum('amount_paid'),
        fine_count=Count('id'),
        unpaid_count=Count('id', filter=~Q(status=FineStatus.PAID)),
    )

    return {
        'user_id': membership.user_id,
        'total_fines': totals['total_fines'],
        'total_paid': totals['total_paid'],
        'outstanding': totals['total_fines'] - totals['total_paid'],
        'credit': membership.credit,
        'fine_count': totals['fine_count'],
        'unpaid_count': totals['unpaid_count'],
    }


def get_team_stats(*, team_id: UUID) -> dict:
    """
    Team-wide totals.

    ``collected`` is the sum of all payments, credit included, and the pot
    balance is what was collected minus recorded expenses.
    """
    team = get_team(team_id=team_id)

    fines = Fine.objects.filter(team=team).aggregate(
        total_fined=_sum('amount'),
        total_paid=_sum('amount_paid'),
        fine_count=Count('id'),
        paid_count=Count('id', filter=Q(status=FineStatus.PAID)),
    )
    collected = Payment.objects.filter(team=team).aggregate(total=_sum('amount'))['total']
    expenses = Expense.objects.filter(team=team).aggregate(total=_sum('amount'))['total']

    return {
        'total_fined': fines['total_fined'],
        'total_paid': fines['total_paid'],
        'total_outstanding': fines['total_fined'] - fines['total_paid'],
        'total_collected': collected,
        'total_expenses': expenses,
        'pot_balance': collected - expenses,
        'fine_count': fines['fine_count'],
        'paid_fine_count': fines['paid_count'],
        'member_count': TeamMembership.active.filter(team=team).count(),
    }


def get_team_leaderboard(*, team_id: UUID, limit: int = 10) -> list:
    """Active members ranked by the total amount they were fined."""
    team = get_team(team_id=team_id)
    in_team = Q(user__fines_received__team=team)

    memberships = (
        TeamMembership.active
        .filter(team=team)
        .select_related('user')
        .annotate(
            total_fined=_sum('user__fines_received__amount', filter=in_team),
            total_paid=_sum('user__fines_received__amount_paid', filter=in_team),
            fine_count=Count('user__fines_received', filter=in_team),
        )
        .order_by('-total_fined', 'joined_at')[:limit]
    )

    return [
        {
            'rank': rank,
            'user': membership.user,
            'total_fined': membership.total_fined,
            'total_paid': membership.total_paid,
            'outstanding': membership.total_fined - membership.total_paid,
            'fine_count': membership.fine_count,
        }
        for rank, membership in enumerate(memberships, start=1)
    ]
