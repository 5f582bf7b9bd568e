"""
Ledger Engine
=============

Creates fines, records payments and keeps every member's credit balance.

Money rules:
    * A fine's ``amount`` never changes after creation.
    * ``amount_paid`` only grows and never exceeds ``amount``: every increment
      goes through ``Fine.apply_amount``, which clamps it to the outstanding
      balance.
    * ``status`` is derived with ``compute_fine_status`` after every change.
    * A payment is zero-sum: whatever a fine cannot absorb is banked as
      credit, so the recorded payments always add up to the amount received.

Every mutating method runs in exactly one ``unit_of_work`` on the database
alias the service was built with. Rows whose values are read and rewritten
are locked with ``select_for_update`` in a fixed order: the payer's
membership first, then fines oldest first.

Example::

    ledger = LedgerService()
    fine = ledger.create_fine(
        team_id=team.id,
        issuer=captain,
        offender_id=player.id,
        rule_id=late_rule.id,
    )
    result = ledger.record_payment(
        team_id=team.id,
        amount=Decimal('25.00'),
        recorded_by=treasurer,
        payer_id=player.id,
    )
    result['credit_added']  # whatever the open fines could not absorb
"""

from decimal import Decimal, InvalidOperation
from uuid import UUID

from django.db import DEFAULT_DB_ALIAS
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.core.conf import fine_pot_setting
from apps.core.exceptions import ForbiddenError, InvalidInputError, ServiceError
from apps.core.transactions import unit_of_work
from apps.fines.models import Fine, FineStatus, Payment, compute_fine_status
from apps.notifications.models import NotificationType
from apps.notifications.services.inbox import notify
from apps.teams.models import ActivityType, TeamMembership
from apps.teams.permissions import can_create_fine, can_manage_ledger
from apps.teams.services import get_team, record_activity, require_admin, require_membership

from .exceptions import (
    AlreadyPaidError,
    FineNotFoundError,
    InvalidOffenderError,
    NoUnpaidFinesError,
    PayerNotFoundError,
    TeamClosedError,
)
from .payment_methods import resolve_payment_method
from .rule_catalog import resolve_rule

CENT = Decimal('0.01')
ZERO = Decimal('0.00')


def to_money(value) -> Decimal:
    """Coerce ``value`` to a two-place Decimal."""
    try:
        return Decimal(str(value)).quantize(CENT)
    except (InvalidOperation, ValueError):
        raise InvalidInputError(f"Invalid amount: {value}")


class LedgerService:
    """
    Fines and payments of a team.

    Args:
        using: Database alias every query and transaction runs on.
    """

    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    # ------------------------------------------------------------------
    # Fines
    # ------------------------------------------------------------------

    def create_fine(
        self,
        *,
        team_id: UUID,
        issuer: User,
        offender_id: UUID,
        rule_id: UUID = None,
        custom_label: str = None,
        amount=None,
        note: str = ''
    ) -> Fine:
        """
        Issue a fine against an active member.

        Exactly one of ``rule_id`` or ``custom_label`` + ``amount`` is
        required. With a rule, an explicit ``amount`` overrides the rule's.

        Raises:
            TeamNotFoundError: If team doesn't exist
            ForbiddenError: If issuer may not fine in this team, or custom
                fines are disabled
            TeamClosedError: If the team is closed
            InvalidOffenderError: If offender is not an active member
            InvalidInputError: If the rule/custom label combination is wrong
                or the amount is not positive
            InvalidRuleError: If the rule is inactive or foreign
        """
        if rule_id is not None and custom_label:
            raise InvalidInputError("Provide either a rule or a custom label, not both")
        if rule_id is None and (not custom_label or amount is None):
            raise InvalidInputError("Either a rule or a custom label with an amount is required")
        if amount is not None:
            amount = to_money(amount)
            if amount <= ZERO:
                raise InvalidInputError("Fine amount must be positive")

        with unit_of_work(self.using):
            team = get_team(team_id=team_id, using=self.using)
            membership = require_membership(team=team, user=issuer, using=self.using)
            if not can_create_fine(team, membership.role):
                raise ForbiddenError("You are not allowed to issue fines in this team")
            if team.is_closed:
                raise TeamClosedError(f"{team.name} is closed for new fines")

            try:
                offender = (
                    TeamMembership.active
                    .using(self.using)
                    .select_related('user')
                    .get(team=team, user_id=offender_id)
                    .user
                )
            except TeamMembership.DoesNotExist:
                raise InvalidOffenderError(f"User {offender_id} is not an active member of {team.name}")

            rule = None
            if rule_id is not None:
                rule = resolve_rule(team=team, rule_id=rule_id, using=self.using)
                if amount is None:
                    amount = rule.amount
                custom_label = ''
            elif not team.allow_custom_fines:
                raise ForbiddenError(f"{team.name} only allows fines from its rule catalog")

            fine = Fine.objects.using(self.using).create(
                team=team,
                offender=offender,
                issued_by=issuer,
                rule=rule,
                custom_label=custom_label,
                amount=amount,
                amount_paid=ZERO,
                status=compute_fine_status(amount, ZERO),
                note=note or '',
            )
            record_activity(
                team=team,
                activity_type=ActivityType.FINE_ISSUED,
                actor=issuer,
                target_user=offender,
                metadata={'fine_id': fine.id, 'label': fine.label, 'amount': amount},
                using=self.using,
            )
            if offender.pk != issuer.pk:
                notify(
                    user=offender,
                    team=team,
                    notification_type=NotificationType.FINE_RECEIVED,
                    title=f"New fine: {fine.label}",
                    body=f"{issuer.get_display_name()} fined you {amount} {fine_pot_setting('CURRENCY')}.",
                    data={'fine_id': fine.id, 'amount': amount},
                    using=self.using,
                )
        return fine

    def create_fines(self, *, team_id: UUID, issuer: User, offender_ids, **fine_kwargs):
        """
        Issue the same fine to several members.

        Each fine is created in its own transaction. A failure for one
        offender is collected and does not undo the others.

        Returns:
            tuple: (created fines, failures) where each failure is a dict
            with ``offender_id``, ``error`` and ``message``.

        Raises:
            InvalidInputError: If no offenders are given or too many
        """
        offender_ids = list(dict.fromkeys(offender_ids or []))
        if not offender_ids:
            raise InvalidInputError("At least one offender is required")
        max_offenders = fine_pot_setting('MAX_BATCH_OFFENDERS')
        if len(offender_ids) > max_offenders:
            raise InvalidInputError(f"At most {max_offenders} offenders per batch")

        fines, failures = [], []
        for offender_id in offender_ids:
            try:
                fines.append(self.create_fine(
                    team_id=team_id,
                    issuer=issuer,
                    offender_id=offender_id,
                    **fine_kwargs
                ))
            except ServiceError as exc:
                failures.append({
                    'offender_id': offender_id,
                    'error': exc.code,
                    'message': exc.message,
                })
        return fines, failures

    def forgive_fine(self, *, fine_id: UUID) -> Fine:
        """
        Mark a fine fully paid without a payment.

        Called by the dispute engine when a dispute is decided for the
        offender; joins the caller's transaction.
        """
        with unit_of_work(self.using):
            try:
                fine = Fine.objects.using(self.using).select_for_update().get(id=fine_id)
            except Fine.DoesNotExist:
                raise FineNotFoundError(f"Fine with ID {fine_id} not found")

            fine.amount_paid = fine.amount
            fine.status = compute_fine_status(fine.amount, fine.amount_paid)
            fine.save(update_fields=['amount_paid', 'status', 'updated_at'])
        return fine

    def delete_fine(self, *, team_id: UUID, fine_id: UUID, actor: User) -> None:
        """
        Permanently delete a fine (admin only).

        Payments made against it stay recorded with no fine attached.
        """
        with unit_of_work(self.using):
            team = get_team(team_id=team_id, using=self.using)
            require_admin(team=team, user=actor, using=self.using)
            try:
                fine = (
                    Fine.objects
                    .using(self.using)
                    .select_for_update()
                    .get(id=fine_id, team=team)
                )
            except Fine.DoesNotExist:
                raise FineNotFoundError(f"Fine with ID {fine_id} not found")

            record_activity(
                team=team,
                activity_type=ActivityType.FINE_DELETED,
                actor=actor,
                target_user=fine.offender,
                metadata={
                    'fine_id': fine.id,
                    'label': fine.label,
                    'amount': fine.amount,
                    'amount_paid': fine.amount_paid,
                },
                using=self.using,
            )
            fine.delete()

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def record_payment(
        self,
        *,
        team_id: UUID,
        amount,
        recorded_by: User,
        payer_id: UUID = None,
        fine_id: UUID = None,
        method: str = '',
        note: str = ''
    ) -> dict:
        """
        Record money received from a member.

        With ``fine_id`` the payment targets that fine; otherwise it is
        distributed over the payer's open fines, oldest first. Whatever the
        fines cannot absorb is banked as credit on the payer's membership.

        Returns:
            dict with ``payments`` (created rows), ``fines`` (fines touched),
            ``total_applied`` (always equal to ``amount``) and
            ``credit_added``.

        Raises:
            InvalidInputError: If amount is not positive, neither payer nor
                fine is given, or payer is not the fine's offender
            TeamNotFoundError: If team doesn't exist
            ForbiddenError: If recorder is not an admin or treasurer
            FineNotFoundError: If the fine is not in this team
            PayerNotFoundError: If the payer never belonged to the team
            AlreadyPaidError: If the targeted fine is fully paid
            NoUnpaidFinesError: If a distributed payer has no open fines
            InvalidPaymentMethodError: If the team does not accept ``method``
        """
        amount = to_money(amount)
        if amount <= ZERO:
            raise InvalidInputError("Payment amount must be positive")
        if payer_id is None and fine_id is None:
            raise InvalidInputError("Either a payer or a fine is required")

        with unit_of_work(self.using):
            team = get_team(team_id=team_id, using=self.using)
            recorder = require_membership(team=team, user=recorded_by, using=self.using)
            if not can_manage_ledger(recorder.role):
                raise ForbiddenError("Only admins and treasurers can record payments")
            method = resolve_payment_method(team=team, method=method, using=self.using)

            if fine_id is not None:
                # offender_id never changes, so the payer is known before any lock
                offender_id = (
                    Fine.objects
                    .using(self.using)
                    .filter(id=fine_id, team=team)
                    .values_list('offender_id', flat=True)
                    .first()
                )
                if offender_id is None:
                    raise FineNotFoundError(f"Fine with ID {fine_id} not found")
                if payer_id is None:
                    payer_id = offender_id
                elif str(payer_id) != str(offender_id):
                    raise InvalidInputError("Payer must be the offender of the fine")

            membership = self._lock_membership(team, payer_id)

            if fine_id is not None:
                fines = self._lock_targeted_fine(team, fine_id)
            else:
                fines = self._lock_open_fines(team, payer_id)

            payments = []
            remaining = amount
            for fine in fines:
                if remaining <= ZERO:
                    break
                applied = fine.apply_amount(remaining)
                if applied <= ZERO:
                    continue
                fine.save(update_fields=['amount_paid', 'status', 'updated_at'])
                payments.append(self._create_payment(
                    team, membership, recorded_by, applied, fine, method, note
                ))
                remaining -= applied

            credit_added = ZERO
            if remaining > ZERO:
                payments.append(self._create_payment(
                    team, membership, recorded_by, remaining, None, method, note
                ))
                membership.credit += remaining
                membership.save(update_fields=['credit'])
                credit_added = remaining

            touched = [payment.fine for payment in payments if payment.fine_id]
            total_applied = sum((payment.amount for payment in payments), ZERO)

            record_activity(
                team=team,
                activity_type=ActivityType.PAYMENT_RECORDED,
                actor=recorded_by,
                target_user=membership.user,
                metadata={
                    'amount': amount,
                    'fine_ids': [fine.id for fine in touched],
                    'credit_added': credit_added,
                    'method': method,
                },
                using=self.using,
            )
            self._notify_payer(team, membership.user, amount, touched)

        return {
            'payments': payments,
            'fines': touched,
            'total_applied': total_applied,
            'credit_added': credit_added,
        }

    def _notify_payer(self, team, payer, amount, fines) -> None:
        currency = fine_pot_setting('CURRENCY')
        notify(
            user=payer,
            team=team,
            notification_type=NotificationType.PAYMENT_RECORDED,
            title="Payment recorded",
            body=f"A payment of {amount} {currency} was recorded for you.",
            data={'amount': amount, 'fine_ids': [fine.id for fine in fines]},
            using=self.using,
        )
        for fine in fines:
            if fine.is_paid:
                notify(
                    user=payer,
                    team=team,
                    notification_type=NotificationType.FINE_PAID,
                    title=f"Fine paid: {fine.label}",
                    body=f"Your fine of {fine.amount} {currency} is fully paid.",
                    data={'fine_id': fine.id},
                    using=self.using,
                )

    def _lock_membership(self, team, payer_id) -> TeamMembership:
        # Soft-deleted members can still settle their fines
        try:
            return (
                TeamMembership.objects
                .using(self.using)
                .select_for_update()
                .get(team=team, user_id=payer_id)
            )
        except TeamMembership.DoesNotExist:
            raise PayerNotFoundError(f"User {payer_id} is not a member of {team.name}")

    def _lock_targeted_fine(self, team, fine_id) -> list:
        try:
            fine = (
                Fine.objects
                .using(self.using)
                .select_for_update()
                .get(id=fine_id, team=team)
            )
        except Fine.DoesNotExist:
            raise FineNotFoundError(f"Fine with ID {fine_id} not found")
        if fine.is_paid:
            raise AlreadyPaidError(f"Fine {fine_id} is already fully paid")
        return [fine]

    def _lock_open_fines(self, team, payer_id) -> list:
        fines = list(
            Fine.objects
            .using(self.using)
            .select_for_update()
            .filter(team=team, offender_id=payer_id)
            .exclude(status=FineStatus.PAID)
            .order_by('created_at', 'id')
        )
        if not fines:
            raise NoUnpaidFinesError("Member has no unpaid fines")
        return fines

    def _create_payment(self, team, membership, recorded_by, amount, fine, method, note) -> Payment:
        return Payment.objects.using(self.using).create(
            team=team,
            fine=fine,
            payer_id=membership.user_id,
            amount=amount,
            method=method or '',
            note=note or '',
            recorded_by=recorded_by,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_fine(self, *, fine_id: UUID, team_id: UUID = None) -> Fine:
        fines = (
            Fine.objects
            .using(self.using)
            .select_related('rule', 'offender', 'issued_by')
        )
        if team_id is not None:
            fines = fines.filter(team_id=team_id)
        try:
            return fines.get(id=fine_id)
        except Fine.DoesNotExist:
            raise FineNotFoundError(f"Fine with ID {fine_id} not found")

    def list_team_fines(
        self,
        *,
        team_id: UUID,
        offender_id: UUID = None,
        status: str = None
    ) -> QuerySet[Fine]:
        fines = (
            Fine.objects
            .using(self.using)
            .filter(team_id=team_id)
            .select_related('rule', 'offender', 'issued_by')
        )
        if offender_id is not None:
            fines = fines.filter(offender_id=offender_id)
        if status:
            fines = fines.filter(status=status)
        return fines.order_by('-created_at')

    def list_team_payments(self, *, team_id: UUID, payer_id: UUID = None) -> QuerySet[Payment]:
        payments = (
            Payment.objects
            .using(self.using)
            .filter(team_id=team_id)
            .select_related('fine', 'fine__rule', 'payer', 'recorded_by')
        )
        if payer_id is not None:
            payments = payments.filter(payer_id=payer_id)
        return payments.order_by('-created_at')
