"""
Expense management service.

Expenses are money spent out of the pot. They are recorded by admins and
treasurers and are blocked once the team is closed.
"""

from decimal import Decimal
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.core.exceptions import ForbiddenError, InvalidInputError
from apps.fines.models import Expense, ExpenseCategory
from apps.teams.models import ActivityType
from apps.teams.permissions import can_manage_ledger
from apps.teams.services import get_team, record_activity, require_admin, require_membership

from .exceptions import ExpenseNotFoundError, TeamClosedError


@transaction.atomic
def record_expense(
    *,
    team_id: UUID,
    actor: User,
    amount: Decimal,
    description: str,
    category: str = ExpenseCategory.OTHER
) -> Expense:
    """
    Record an expense paid from the pot (admin or treasurer).

    Raises:
        InvalidInputError: If amount is not positive or category is unknown
        TeamNotFoundError: If team doesn't exist
        ForbiddenError: If actor is not an admin or treasurer
        TeamClosedError: If the team is closed
    """
    if amount <= 0:
        raise InvalidInputError("Expense amount must be positive")
    if category not in ExpenseCategory.values:
        raise InvalidInputError(f"Unknown expense category: {category}")

    team = get_team(team_id=team_id)
    membership = require_membership(team=team, user=actor)
    if not can_manage_ledger(membership.role):
        raise ForbiddenError("Only admins and treasurers can record expenses")
    if team.is_closed:
        raise TeamClosedError(f"{team.name} is closed for new expenses")

    expense = Expense.objects.create(
        team=team,
        amount=amount,
        description=description,
        category=category,
        recorded_by=actor,
    )
    record_activity(
        team=team,
        activity_type=ActivityType.EXPENSE_RECORDED,
        actor=actor,
        metadata={'expense_id': expense.id, 'amount': amount, 'description': description},
    )
    return expense


@transaction.atomic
def delete_expense(*, team_id: UUID, expense_id: UUID, actor: User) -> None:
    """Delete an expense (admin only)."""
    team = get_team(team_id=team_id)
    require_admin(team=team, user=actor)

    deleted, _ = Expense.objects.filter(id=expense_id, team=team).delete()
    if not deleted:
        raise ExpenseNotFoundError(f"Expense with ID {expense_id} not found")


def list_team_expenses(*, team_id: UUID) -> QuerySet[Expense]:
    return (
        Expense.objects
        .filter(team_id=team_id)
        .select_related('recorded_by')
        .order_by('-created_at')
    )
