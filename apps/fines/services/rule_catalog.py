"""
Rule catalog service.

Rules are named (label, amount, category) templates. They are deactivated
rather than deleted because fines keep referencing them.
"""

from decimal import Decimal
from uuid import UUID

from django.db import DEFAULT_DB_ALIAS, transaction
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.core.exceptions import InvalidInputError
from apps.fines.models import FineRule, RuleCategory
from apps.teams.models import ActivityType, Team
from apps.teams.services import get_team, record_activity, require_admin

from .exceptions import InvalidRuleError, RuleNotFoundError

RULE_FIELDS = ('label', 'amount', 'category', 'is_active')


def _validate_rule_values(values: dict) -> None:
    if 'amount' in values and values['amount'] <= 0:
        raise InvalidInputError("Rule amount must be positive")
    if 'category' in values and values['category'] not in RuleCategory.values:
        raise InvalidInputError(f"Unknown rule category: {values['category']}")


def _get_team_rule(team: Team, rule_id: UUID, lock: bool = False) -> FineRule:
    queryset = FineRule.objects.all()
    if lock:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(id=rule_id, team=team)
    except FineRule.DoesNotExist:
        raise RuleNotFoundError(f"Rule with ID {rule_id} not found")


@transaction.atomic
def create_rule(
    *,
    team_id: UUID,
    actor: User,
    label: str,
    amount: Decimal,
    category: str = RuleCategory.OTHER
) -> FineRule:
    """
    Add a rule to the team catalog (admin only).

    Raises:
        TeamNotFoundError: If team doesn't exist
        ForbiddenError: If actor is not an admin
        InvalidInputError: If amount is not positive or category is unknown
    """
    _validate_rule_values({'amount': amount, 'category': category})

    team = get_team(team_id=team_id)
    require_admin(team=team, user=actor)

    rule = FineRule.objects.create(
        team=team,
        label=label,
        amount=amount,
        category=category,
        created_by=actor,
    )
    record_activity(
        team=team,
        activity_type=ActivityType.RULE_CREATED,
        actor=actor,
        metadata={'rule_id': rule.id, 'label': label, 'amount': amount},
    )
    return rule


@transaction.atomic
def update_rule(*, team_id: UUID, rule_id: UUID, actor: User, **changes) -> FineRule:
    """
    Change label, amount, category or is_active of a rule (admin only).

    Existing fines keep the amount they were issued with.
    """
    _validate_rule_values(changes)

    team = get_team(team_id=team_id)
    require_admin(team=team, user=actor)
    rule = _get_team_rule(team, rule_id, lock=True)

    update_fields = ['updated_at']
    for field in RULE_FIELDS:
        if field in changes:
            setattr(rule, field, changes[field])
            update_fields.append(field)
    rule.save(update_fields=update_fields)

    record_activity(
        team=team,
        activity_type=ActivityType.RULE_UPDATED,
        actor=actor,
        metadata={
            'rule_id': rule.id,
            'changes': {field: changes[field] for field in RULE_FIELDS if field in changes},
        },
    )
    return rule


def deactivate_rule(*, team_id: UUID, rule_id: UUID, actor: User) -> FineRule:
    """Soft delete: the rule disappears from the catalog, fines keep it."""
    return update_rule(team_id=team_id, rule_id=rule_id, actor=actor, is_active=False)


def list_rules(*, team_id: UUID, include_inactive: bool = False) -> QuerySet[FineRule]:
    rules = FineRule.objects.filter(team_id=team_id)
    if not include_inactive:
        rules = rules.filter(is_active=True)
    return rules


def resolve_rule(*, team: Team, rule_id: UUID, using: str = DEFAULT_DB_ALIAS) -> FineRule:
    """
    Return the active rule ``rule_id`` of ``team``.

    Raises:
        InvalidRuleError: If the rule is missing, inactive or foreign
    """
    try:
        return FineRule.objects.using(using).get(id=rule_id, team=team, is_active=True)
    except FineRule.DoesNotExist:
        raise InvalidRuleError(f"Rule {rule_id} is not an active rule of {team.name}")
