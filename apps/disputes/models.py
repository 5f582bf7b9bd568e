from django.core.validators import MinValueValidator
from django.db import models
import uuid


class DisputeStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'
    AUTO_APPROVED = 'auto_approved', 'Approved by vote'


TERMINAL_STATUSES = frozenset({
    DisputeStatus.APPROVED,
    DisputeStatus.REJECTED,
    DisputeStatus.AUTO_APPROVED,
})


class FineDispute(models.Model):
    """Contestation of one fine by its offender."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    fine = models.ForeignKey('fines.Fine', on_delete=models.CASCADE, related_name='disputes')
    team = models.ForeignKey('teams.Team', on_delete=models.CASCADE, related_name='disputes')
    disputed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='disputes_filed'
    )
    reason = models.TextField()
    status = models.CharField(
        max_length=20,
        choices=DisputeStatus.choices,
        default=DisputeStatus.PENDING
    )

    # Community voting; votes_required is snapshotted from the team and
    # grows by one with every "maintain" vote
    votes_count = models.PositiveIntegerField(default=0)
    votes_required = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)]
    )

    resolved_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='disputes_resolved'
    )
    resolution_note = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'fine_disputes'
        indexes = [
            models.Index(fields=['team', 'status'], name='disputes_team_status_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['fine'],
                condition=models.Q(status='pending'),
                name='disputes_one_pending_per_fine',
            ),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"Dispute on {self.fine_id} ({self.get_status_display()})"

    @property
    def is_pending(self):
        return self.status == DisputeStatus.PENDING

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES


class FineDisputeVote(models.Model):
    """One member's vote on a community dispute. True means cancel the fine."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    dispute = models.ForeignKey(FineDispute, on_delete=models.CASCADE, related_name='votes')
    voter = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='dispute_votes'
    )
    vote = models.BooleanField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'fine_dispute_votes'
        constraints = [
            models.UniqueConstraint(
                fields=['dispute', 'voter'],
                name='dispute_votes_one_per_voter',
            ),
        ]
        ordering = ['created_at']

    def __str__(self):
        choice = 'cancel' if self.vote else 'maintain'
        return f"{self.voter} votes {choice}"
