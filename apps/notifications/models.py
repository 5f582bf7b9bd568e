from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
import uuid


class NotificationType(models.TextChoices):
    FINE_RECEIVED = 'fine_received', 'Fine received'
    FINE_PAID = 'fine_paid', 'Fine paid'
    PAYMENT_RECORDED = 'payment_recorded', 'Payment recorded'
    MEMBER_JOINED = 'member_joined', 'Member joined'
    MEMBER_LEFT = 'member_left', 'Member left'
    TEAM_CLOSED = 'team_closed', 'Team closed'
    TEAM_REOPENED = 'team_reopened', 'Team reopened'
    REMINDER_UNPAID = 'reminder_unpaid', 'Unpaid fine reminder'
    DISPUTE_CREATED = 'dispute_created', 'Dispute filed'
    DISPUTE_RESOLVED = 'dispute_resolved', 'Dispute resolved'


class Notification(models.Model):
    """Inbox entry of one user."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='notifications')
    team = models.ForeignKey(
        'teams.Team',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='notifications'
    )
    notification_type = models.CharField(max_length=30, choices=NotificationType.choices)
    title = models.CharField(max_length=200)
    body = models.TextField()
    data = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        indexes = [
            models.Index(fields=['user', 'is_read'], name='notifications_user_read_idx'),
            models.Index(fields=['user', 'created_at'], name='notifications_user_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} -> {self.user}"


class TeamNotificationSettings(models.Model):
    """
    Which notifications one member receives from one team.

    A missing row means everything is on.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='team_notification_settings'
    )
    team = models.ForeignKey(
        'teams.Team',
        on_delete=models.CASCADE,
        related_name='notification_settings'
    )

    notifications_enabled = models.BooleanField(default=True)
    notify_fine_received = models.BooleanField(default=True)
    notify_fine_paid = models.BooleanField(default=True)
    notify_payment_recorded = models.BooleanField(default=True)
    notify_member_joined = models.BooleanField(default=True)
    notify_member_left = models.BooleanField(default=True)
    notify_team_closed = models.BooleanField(default=True)
    notify_team_reopened = models.BooleanField(default=True)
    notify_reminder_unpaid = models.BooleanField(default=True)
    notify_dispute_created = models.BooleanField(default=True)
    notify_dispute_resolved = models.BooleanField(default=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'team_notification_settings'
        unique_together = [['user', 'team']]

    def __str__(self):
        return f"{self.user} in {self.team}"

    def allows(self, notification_type):
        return self.notifications_enabled and getattr(self, f'notify_{notification_type}', True)
