# ==========================================
# apps/teams/models.py
# ==========================================

from decimal import Decimal
import secrets
import uuid

from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models


def generate_invite_code():
    return secrets.token_urlsafe(12)[:16]


class TeamRole(models.TextChoices):
    ADMIN = 'admin', 'Admin'
    TREASURER = 'treasurer', 'Treasurer'
    MEMBER = 'member', 'Member'


class FinePermission(models.TextChoices):
    ADMIN_ONLY = 'admin_only', 'Admins only'
    TREASURER = 'treasurer', 'Admins and treasurers'
    EVERYONE = 'everyone', 'Everyone'


class DisputeMode(models.TextChoices):
    SIMPLE = 'simple', 'Admin decision'
    COMMUNITY = 'community', 'Community vote'


class ActivityType(models.TextChoices):
    TEAM_CREATED = 'team_created', 'Team created'
    MEMBER_JOINED = 'member_joined', 'Member joined'
    MEMBER_LEFT = 'member_left', 'Member left'
    RULE_CREATED = 'rule_created', 'Rule created'
    RULE_UPDATED = 'rule_updated', 'Rule updated'
    FINE_ISSUED = 'fine_issued', 'Fine issued'
    FINE_DELETED = 'fine_deleted', 'Fine deleted'
    PAYMENT_RECORDED = 'payment_recorded', 'Payment recorded'
    EXPENSE_RECORDED = 'expense_recorded', 'Expense recorded'
    DISPUTE_CREATED = 'dispute_created', 'Dispute created'
    DISPUTE_RESOLVED = 'dispute_resolved', 'Dispute resolved'


class Team(models.Model):
    """Team sharing a fine pot."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=50)
    description = models.TextField(blank=True)
    sport = models.CharField(max_length=50, blank=True)
    invite_code = models.CharField(
        max_length=16,
        unique=True,
        default=generate_invite_code,
        editable=False,
    )
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='created_teams'
    )

    # Fine and dispute configuration
    fine_permission = models.CharField(
        max_length=20,
        choices=FinePermission.choices,
        default=FinePermission.EVERYONE
    )
    allow_custom_fines = models.BooleanField(default=True)
    dispute_enabled = models.BooleanField(default=False)
    dispute_mode = models.CharField(
        max_length=20,
        choices=DisputeMode.choices,
        null=True,
        blank=True
    )
    dispute_votes_required = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(100)]
    )

    # Closed teams accept payments but no new fines or expenses
    is_closed = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'teams'
        indexes = [
            models.Index(fields=['created_by', 'created_at'], name='teams_creator_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def regenerate_invite_code(self):
        self.invite_code = generate_invite_code()
        self.save(update_fields=['invite_code', 'updated_at'])
        return self.invite_code

    def get_membership(self, user):
        """Return the active membership of ``user`` or None."""
        if user is None or not getattr(user, 'is_authenticated', True):
            return None
        return self.memberships.filter(user=user, is_deleted=False).first()

    def has_member(self, user):
        return self.get_membership(user) is not None

    def get_user_role(self, user):
        membership = self.get_membership(user)
        return membership.role if membership else None

    def is_admin(self, user):
        return self.get_user_role(user) == TeamRole.ADMIN

    @property
    def is_community_mode(self):
        return self.dispute_enabled and self.dispute_mode == DisputeMode.COMMUNITY


class ActiveMembershipManager(models.Manager):
    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)


class TeamMembership(models.Model):
    """User membership in a team with role and banked credit."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='memberships')
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='team_memberships')
    role = models.CharField(max_length=20, choices=TeamRole.choices, default=TeamRole.MEMBER)

    # Surplus payments banked for future fines; changed only by the ledger
    credit = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    # Members with fine or payment history are soft-deleted
    is_deleted = models.BooleanField(default=False)
    joined_at = models.DateTimeField(auto_now_add=True)

    objects = models.Manager()
    active = ActiveMembershipManager()

    class Meta:
        db_table = 'team_memberships'
        unique_together = [['team', 'user']]
        indexes = [
            models.Index(fields=['team', 'role'], name='memberships_team_role_idx'),
            models.Index(fields=['user', 'joined_at'], name='memberships_user_joined_idx'),
        ]
        ordering = ['joined_at']

    def __str__(self):
        return f"{self.user.get_display_name()} in {self.team.name} ({self.role})"


class ActivityLog(models.Model):
    """Append-only record of ledger and dispute events in a team."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='activities')
    actor = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='activities'
    )
    activity_type = models.CharField(max_length=30, choices=ActivityType.choices)
    target_user = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='targeted_activities'
    )
    metadata = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'activity_log'
        indexes = [
            models.Index(fields=['team', 'created_at'], name='activity_team_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.get_activity_type_display()} in {self.team.name}"
