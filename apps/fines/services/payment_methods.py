"""
Payment methods a team accepts.

A team without any configured method accepts every known method. Once an
admin configures methods, recorded payments must use an enabled one.
"""

from uuid import UUID

from django.db import DEFAULT_DB_ALIAS, transaction
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.fines.models import PaymentMethodType, TeamPaymentMethod
from apps.teams.models import Team
from apps.teams.services import get_team, require_admin

from .exceptions import InvalidPaymentMethodError, PaymentMethodNotFoundError

METHOD_FIELDS = ('is_enabled', 'display_name', 'instructions', 'config')


def _check_method_type(method_type: str) -> None:
    if method_type not in PaymentMethodType.values:
        raise InvalidPaymentMethodError(
            f"Unknown payment method: {method_type}. "
            f"Must be one of: {', '.join(PaymentMethodType.values)}"
        )


def list_payment_methods(*, team_id: UUID, enabled_only: bool = False) -> QuerySet[TeamPaymentMethod]:
    methods = TeamPaymentMethod.objects.filter(team_id=team_id)
    if enabled_only:
        methods = methods.filter(is_enabled=True)
    return methods.order_by('method_type')


@transaction.atomic
def upsert_payment_method(
    *,
    team_id: UUID,
    actor: User,
    method_type: str,
    **values
) -> TeamPaymentMethod:
    """
    Create or update the team's configuration of one method (admin only).

    Raises:
        InvalidPaymentMethodError: If method_type is unknown
        TeamNotFoundError: If team doesn't exist
        ForbiddenError: If actor is not an admin
    """
    _check_method_type(method_type)

    team = get_team(team_id=team_id, lock=True)
    require_admin(team=team, user=actor)

    defaults = {field: values[field] for field in METHOD_FIELDS if field in values}
    if 'config' in defaults and defaults['config'] is None:
        defaults['config'] = {}

    method, created = TeamPaymentMethod.objects.update_or_create(
        team=team,
        method_type=method_type,
        defaults=defaults,
    )
    if created:
        method.created_by = actor
        method.save(update_fields=['created_by'])
    return method


@transaction.atomic
def delete_payment_method(*, team_id: UUID, method_type: str, actor: User) -> None:
    """
    Remove a method from the team (admin only).

    Payments already recorded with it keep their method.
    """
    team = get_team(team_id=team_id)
    require_admin(team=team, user=actor)

    deleted, _ = TeamPaymentMethod.objects.filter(team=team, method_type=method_type).delete()
    if not deleted:
        raise PaymentMethodNotFoundError(f"{team.name} has no {method_type} payment method")


def resolve_payment_method(*, team: Team, method: str, using: str = DEFAULT_DB_ALIAS) -> str:
    """
    Validate the method of a payment about to be recorded.

    Blank means unspecified and is always accepted.

    Raises:
        InvalidPaymentMethodError: If the method is unknown, or the team
            configured methods and this one is not enabled among them
    """
    method = (method or '').strip()
    if not method:
        return ''
    _check_method_type(method)

    configured = TeamPaymentMethod.objects.using(using).filter(team=team)
    if configured.exists() and not configured.filter(method_type=method, is_enabled=True).exists():
        raise InvalidPaymentMethodError(f"{team.name} does not accept {method} payments")
    return method
