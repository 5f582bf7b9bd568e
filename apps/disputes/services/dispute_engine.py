"""
Dispute Engine
==============

Contestation of a single fine by its offender.

State machine::

    pending ── admin/treasurer approves ──────────► approved       (fine forgiven)
       │
       ├──── cancel votes reach the threshold ────► auto_approved  (fine forgiven)
       │
       └──── admin/treasurer rejects ─────────────► rejected       (fine untouched)

Terminal disputes accept no further votes or resolutions.

In community mode every "cancel" vote adds one to ``votes_count`` and every
"maintain" vote raises ``votes_required`` by one. The dispute is approved
automatically as soon as ``votes_count >= votes_required``.

Forgiving a fine goes through the ledger (``LedgerService.forgive_fine``) in
the same transaction as the dispute transition.
"""

from uuid import UUID

from django.db import DEFAULT_DB_ALIAS, IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.core.conf import fine_pot_setting
from apps.core.exceptions import ForbiddenError, InvalidStateError
from apps.core.transactions import unit_of_work
from apps.disputes.models import DisputeStatus, FineDispute, FineDisputeVote
from apps.fines.models import Fine
from apps.fines.services import AlreadyPaidError, FineNotFoundError, LedgerService
from apps.notifications.models import NotificationType
from apps.notifications.services.inbox import notify, notify_members
from apps.teams.models import ActivityType, TeamRole
from apps.teams.permissions import can_resolve_dispute
from apps.teams.services import record_activity, require_membership

from .exceptions import (
    AlreadyVotedError,
    DisputeAlreadyExistsError,
    DisputeNotFoundError,
    DisputeNotPendingError,
    DisputesDisabledError,
)


class DisputeService:
    """
    Files, votes on and resolves fine disputes.

    Args:
        using: Database alias every query and transaction runs on.
        ledger: Ledger used to forgive fines; defaults to a
            ``LedgerService`` on the same alias.
    """

    def __init__(self, using=DEFAULT_DB_ALIAS, ledger=None):
        self.using = using
        self.ledger = ledger or LedgerService(using=using)

    def create_dispute(self, *, fine_id: UUID, disputer: User, reason: str) -> FineDispute:
        """
        Open a dispute on an unpaid fine.

        ``votes_required`` is copied from the team so later setting changes do
        not move the bar for disputes already running.

        Raises:
            FineNotFoundError: If fine doesn't exist
            DisputesDisabledError: If the team has disputes switched off
            ForbiddenError: If disputer is not the fine's offender or not an
                active member
            AlreadyPaidError: If the fine is fully paid
            DisputeAlreadyExistsError: If the fine has a pending dispute
        """
        with unit_of_work(self.using):
            try:
                fine = (
                    Fine.objects
                    .using(self.using)
                    .select_for_update()
                    .select_related('team')
                    .get(id=fine_id)
                )
            except Fine.DoesNotExist:
                raise FineNotFoundError(f"Fine with ID {fine_id} not found")

            team = fine.team
            if not team.dispute_enabled:
                raise DisputesDisabledError(f"Disputes are not enabled for {team.name}")
            if str(fine.offender_id) != str(disputer.id):
                raise ForbiddenError("Only the fined member can dispute a fine")
            require_membership(team=team, user=disputer, using=self.using)
            if fine.is_paid:
                raise AlreadyPaidError("A paid fine cannot be disputed")

            pending = FineDispute.objects.using(self.using).filter(
                fine=fine,
                status=DisputeStatus.PENDING,
            )
            if pending.exists():
                raise DisputeAlreadyExistsError("This fine already has a pending dispute")

            votes_required = (
                team.dispute_votes_required
                or fine_pot_setting('DEFAULT_DISPUTE_VOTES_REQUIRED')
            )
            try:
                with transaction.atomic(using=self.using):
                    dispute = FineDispute.objects.using(self.using).create(
                        fine=fine,
                        team=team,
                        disputed_by=disputer,
                        reason=reason,
                        votes_required=votes_required,
                    )
            except IntegrityError:
                # Concurrent dispute won the partial unique index
                raise DisputeAlreadyExistsError("This fine already has a pending dispute")

            record_activity(
                team=team,
                activity_type=ActivityType.DISPUTE_CREATED,
                actor=disputer,
                target_user=disputer,
                metadata={'dispute_id': dispute.id, 'fine_id': fine.id},
                using=self.using,
            )
            # Simple mode: only those who can decide hear about it
            notify_members(
                team=team,
                notification_type=NotificationType.DISPUTE_CREATED,
                title=f"Fine disputed: {fine.label}",
                body=f"{disputer.get_display_name()} disputes a fine of {fine.amount} {fine_pot_setting('CURRENCY')}.",
                roles=None if team.is_community_mode else (TeamRole.ADMIN, TeamRole.TREASURER),
                exclude=(disputer,),
                data={'dispute_id': dispute.id, 'fine_id': fine.id},
                using=self.using,
            )
        return dispute

    def vote(self, *, dispute_id: UUID, voter: User, choice: bool) -> FineDispute:
        """
        Cast a community vote. ``choice=True`` votes to cancel the fine.

        Raises:
            DisputeNotFoundError: If dispute doesn't exist
            DisputeNotPendingError: If the dispute is already resolved
            InvalidStateError: If the team is not in community mode
            ForbiddenError: If voter is the disputer or not an active member
            AlreadyVotedError: If voter already voted on this dispute
        """
        with unit_of_work(self.using):
            dispute = self._lock_dispute(dispute_id)
            team = dispute.team

            if not dispute.is_pending:
                raise DisputeNotPendingError("This dispute has already been resolved")
            if not team.is_community_mode:
                raise InvalidStateError("Voting is only available in community dispute mode")
            if str(voter.id) == str(dispute.disputed_by_id):
                raise ForbiddenError("You cannot vote on your own dispute")
            require_membership(team=team, user=voter, using=self.using)

            votes = FineDisputeVote.objects.using(self.using)
            if votes.filter(dispute=dispute, voter=voter).exists():
                raise AlreadyVotedError("You have already voted on this dispute")
            try:
                with transaction.atomic(using=self.using):
                    votes.create(dispute=dispute, voter=voter, vote=choice)
            except IntegrityError:
                raise AlreadyVotedError("You have already voted on this dispute")

            if choice:
                dispute.votes_count += 1
                if dispute.votes_count >= dispute.votes_required:
                    dispute.status = DisputeStatus.AUTO_APPROVED
                    dispute.resolved_at = timezone.now()
            else:
                dispute.votes_required += 1

            dispute.save(update_fields=['votes_count', 'votes_required', 'status', 'resolved_at'])

            if dispute.status == DisputeStatus.AUTO_APPROVED:
                self.ledger.forgive_fine(fine_id=dispute.fine_id)
                self._log_resolution(dispute, actor=voter)
        return dispute

    def resolve(
        self,
        *,
        dispute_id: UUID,
        resolver: User,
        approved: bool,
        note: str = ''
    ) -> FineDispute:
        """
        Decide a dispute as admin or treasurer.

        Community disputes are decided by vote unless the
        ``ALLOW_COMMUNITY_OVERRIDE`` setting is on.

        Raises:
            DisputeNotFoundError: If dispute doesn't exist
            DisputeNotPendingError: If the dispute is already resolved
            ForbiddenError: If resolver is not an admin or treasurer, or is
                the disputer
            InvalidStateError: If the team decides disputes by vote
        """
        with unit_of_work(self.using):
            dispute = self._lock_dispute(dispute_id)
            team = dispute.team

            if not dispute.is_pending:
                raise DisputeNotPendingError("This dispute has already been resolved")
            membership = require_membership(team=team, user=resolver, using=self.using)
            if not can_resolve_dispute(membership.role):
                raise ForbiddenError("Only admins and treasurers can resolve disputes")
            if str(resolver.id) == str(dispute.disputed_by_id):
                raise ForbiddenError("You cannot resolve your own dispute")
            if team.is_community_mode and not fine_pot_setting('ALLOW_COMMUNITY_OVERRIDE'):
                raise InvalidStateError("This team decides disputes by community vote")

            dispute.status = DisputeStatus.APPROVED if approved else DisputeStatus.REJECTED
            dispute.resolved_by = resolver
            dispute.resolution_note = note or ''
            dispute.resolved_at = timezone.now()
            dispute.save(update_fields=['status', 'resolved_by', 'resolution_note', 'resolved_at'])

            if approved:
                self.ledger.forgive_fine(fine_id=dispute.fine_id)
            self._log_resolution(dispute, actor=resolver)
        return dispute

    def _lock_dispute(self, dispute_id) -> FineDispute:
        try:
            return (
                FineDispute.objects
                .using(self.using)
                .select_for_update()
                .select_related('team')
                .get(id=dispute_id)
            )
        except FineDispute.DoesNotExist:
            raise DisputeNotFoundError(f"Dispute with ID {dispute_id} not found")

    def _log_resolution(self, dispute, actor):
        record_activity(
            team=dispute.team,
            activity_type=ActivityType.DISPUTE_RESOLVED,
            actor=actor,
            target_user=dispute.disputed_by,
            metadata={
                'dispute_id': dispute.id,
                'fine_id': dispute.fine_id,
                'status': dispute.status,
            },
            using=self.using,
        )
        notify(
            user=dispute.disputed_by,
            team=dispute.team,
            notification_type=NotificationType.DISPUTE_RESOLVED,
            title=f"Dispute {dispute.get_status_display().lower()}",
            body=(
                "Your fine was cancelled."
                if dispute.status != DisputeStatus.REJECTED
                else "Your fine stands."
            ),
            data={'dispute_id': dispute.id, 'fine_id': dispute.fine_id, 'status': dispute.status},
            using=self.using,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_dispute(self, *, dispute_id: UUID) -> FineDispute:
        try:
            return (
                FineDispute.objects
                .using(self.using)
                .select_related('fine', 'disputed_by', 'resolved_by')
                .get(id=dispute_id)
            )
        except FineDispute.DoesNotExist:
            raise DisputeNotFoundError(f"Dispute with ID {dispute_id} not found")

    def get_fine_dispute(self, *, fine_id: UUID):
        """Latest dispute of a fine, or None."""
        return (
            FineDispute.objects
            .using(self.using)
            .filter(fine_id=fine_id)
            .select_related('disputed_by', 'resolved_by')
            .order_by('-created_at')
            .first()
        )

    def list_team_disputes(self, *, team_id: UUID, status: str = None) -> QuerySet[FineDispute]:
        disputes = (
            FineDispute.objects
            .using(self.using)
            .filter(team_id=team_id)
            .select_related(
                'fine', 'fine__rule', 'fine__offender', 'fine__issued_by',
                'disputed_by', 'resolved_by',
            )
        )
        if status:
            disputes = disputes.filter(status=status)
        return disputes.order_by('-created_at')

    def get_votes(self, *, dispute_id: UUID) -> QuerySet[FineDisputeVote]:
        return (
            FineDisputeVote.objects
            .using(self.using)
            .filter(dispute_id=dispute_id)
            .select_related('voter')
            .order_by('created_at')
        )

    def get_user_vote(self, *, dispute_id: UUID, user: User):
        """The user's vote on a dispute, or None."""
        return (
            FineDisputeVote.objects
            .using(self.using)
            .filter(dispute_id=dispute_id, voter=user)
            .first()
        )
