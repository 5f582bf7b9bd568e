from django.db import models
from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid


class FineStatus(models.TextChoices):
    UNPAID = 'unpaid', 'Unpaid'
    PARTIALLY_PAID = 'partially_paid', 'Partially paid'
    PAID = 'paid', 'Paid'


class RuleCategory(models.TextChoices):
    LATE = 'late', 'Late'
    ABSENCE = 'absence', 'Absence'
    EQUIPMENT = 'equipment', 'Equipment'
    BEHAVIOR = 'behavior', 'Behavior'
    PERFORMANCE = 'performance', 'Performance'
    OTHER = 'other', 'Other'


class ExpenseCategory(models.TextChoices):
    FOOD = 'food', 'Food'
    DRINKS = 'drinks', 'Drinks'
    EQUIPMENT = 'equipment', 'Equipment'
    EVENT = 'event', 'Event'
    OTHER = 'other', 'Other'


class PaymentMethodType(models.TextChoices):
    BANK_TRANSFER = 'bank_transfer', 'Bank transfer'
    PAYPAL = 'paypal', 'PayPal'
    LYDIA = 'lydia', 'Lydia'
    CASH = 'cash', 'Cash'
    PAYLIB = 'paylib', 'Paylib'
    REVOLUT = 'revolut', 'Revolut'


def compute_fine_status(amount, amount_paid):
    """Derive a fine's status from its amount and what has been paid."""
    if amount_paid >= amount:
        return FineStatus.PAID
    if amount_paid > 0:
        return FineStatus.PARTIALLY_PAID
    return FineStatus.UNPAID


class FineRule(models.Model):
    """Reusable fine template. Deactivated, never deleted."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    team = models.ForeignKey('teams.Team', on_delete=models.CASCADE, related_name='fine_rules')
    label = models.CharField(max_length=100)
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    category = models.CharField(
        max_length=20,
        choices=RuleCategory.choices,
        default=RuleCategory.OTHER
    )
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='fine_rules_created'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'fine_rules'
        indexes = [
            models.Index(fields=['team', 'is_active'], name='fine_rules_team_active_idx'),
        ]
        ordering = ['category', 'label']

    def __str__(self):
        return f"{self.label} ({self.amount})"


class Fine(models.Model):
    """Monetary obligation of one team member."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    team = models.ForeignKey('teams.Team', on_delete=models.CASCADE, related_name='fines')
    offender = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='fines_received'
    )
    issued_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='fines_issued'
    )

    # Exactly one of rule or custom_label is set at creation
    rule = models.ForeignKey(
        FineRule,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='fines'
    )
    custom_label = models.CharField(max_length=100, blank=True)

    # amount is fixed at creation; amount_paid only grows
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    amount_paid = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00')
    )
    status = models.CharField(
        max_length=20,
        choices=FineStatus.choices,
        default=FineStatus.UNPAID,
        editable=False
    )
    note = models.TextField(blank=True)
    last_reminder_sent = models.DateTimeField(null=True, blank=True)

    # Not auto_now_add: payments are distributed oldest first by this value
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'fines'
        indexes = [
            models.Index(fields=['team', 'status'], name='fines_team_status_idx'),
            models.Index(fields=['team', 'offender', 'created_at'], name='fines_team_offender_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.label} - {self.amount} ({self.get_status_display()})"

    @property
    def label(self):
        if self.rule_id and self.rule:
            return self.rule.label
        return self.custom_label

    @property
    def outstanding(self):
        return self.amount - self.amount_paid

    @property
    def is_paid(self):
        return self.status == FineStatus.PAID

    def apply_amount(self, amount):
        """
        Add up to ``amount`` to amount_paid and return what was applied.

        The increment is clamped to the outstanding balance. Caller saves.
        """
        applied = min(amount, self.outstanding)
        self.amount_paid += applied
        self.status = compute_fine_status(self.amount, self.amount_paid)
        return applied


class AppendOnlyError(Exception):
    """Raised when code tries to modify or delete a stored payment."""


class Payment(models.Model):
    """
    Money received from a member. Append-only.

    ``fine`` is null for surplus banked as credit.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    team = models.ForeignKey('teams.Team', on_delete=models.CASCADE, related_name='payments')
    fine = models.ForeignKey(
        Fine,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments'
    )
    payer = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='payments_made'
    )
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    method = models.CharField(max_length=50, blank=True, choices=PaymentMethodType.choices)
    note = models.TextField(blank=True)
    recorded_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='payments_recorded'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'payments'
        indexes = [
            models.Index(fields=['team', 'created_at'], name='payments_team_created_idx'),
            models.Index(fields=['team', 'payer'], name='payments_team_payer_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        target = self.fine.label if self.fine_id and self.fine else 'credit'
        return f"{self.amount} from {self.payer} ({target})"

    @property
    def is_credit(self):
        return self.fine_id is None

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AppendOnlyError("Payments cannot be modified once recorded")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AppendOnlyError("Payments cannot be deleted")


class Expense(models.Model):
    """Money spent out of the team pot."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    team = models.ForeignKey('teams.Team', on_delete=models.CASCADE, related_name='expenses')
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    description = models.CharField(max_length=200)
    category = models.CharField(
        max_length=20,
        choices=ExpenseCategory.choices,
        default=ExpenseCategory.OTHER
    )
    recorded_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='expenses_recorded'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'expenses'
        indexes = [
            models.Index(fields=['team', 'created_at'], name='expenses_team_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.description} - {self.amount}"


class TeamPaymentMethod(models.Model):
    """
    A way of paying into the team pot, configured by an admin.

    ``config`` holds what members need to pay (IBAN, PayPal link...).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    team = models.ForeignKey('teams.Team', on_delete=models.CASCADE, related_name='payment_methods')
    method_type = models.CharField(max_length=20, choices=PaymentMethodType.choices)
    is_enabled = models.BooleanField(default=True)
    display_name = models.CharField(max_length=100, blank=True)
    instructions = models.TextField(blank=True)
    config = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='payment_methods_created'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'team_payment_methods'
        constraints = [
            models.UniqueConstraint(
                fields=['team', 'method_type'],
                name='team_payment_methods_unique_type'
            ),
        ]
        ordering = ['method_type']

    def __str__(self):
        return f"{self.label} ({self.team})"

    @property
    def label(self):
        return self.display_name or self.get_method_type_display()
