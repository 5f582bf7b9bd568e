from decimal import Decimal

from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer
from .models import (
    Expense,
    ExpenseCategory,
    Fine,
    FineRule,
    FineStatus,
    Payment,
    PaymentMethodType,
    RuleCategory,
    TeamPaymentMethod,
)

POSITIVE = Decimal('0.01')


# =============================================================================
# Rules
# =============================================================================

class FineRuleSerializer(serializers.ModelSerializer):
    class Meta:
        model = FineRule
        fields = ['id', 'label', 'amount', 'category', 'is_active', 'created_at', 'updated_at']
        read_only_fields = fields


class FineRuleWriteSerializer(serializers.Serializer):
    """Create or partially update a rule."""

    label = serializers.CharField(min_length=2, max_length=100)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=POSITIVE)
    category = serializers.ChoiceField(choices=RuleCategory.choices, default=RuleCategory.OTHER)
    is_active = serializers.BooleanField(required=False)


class FineRuleMinimalSerializer(serializers.ModelSerializer):
    class Meta:
        model = FineRule
        fields = ['id', 'label', 'category']
        read_only_fields = fields


# =============================================================================
# Fines
# =============================================================================

class FineSerializer(serializers.ModelSerializer):
    """Fine with its derived label and outstanding balance."""

    offender = UserMinimalSerializer(read_only=True)
    issued_by = UserMinimalSerializer(read_only=True)
    rule = FineRuleMinimalSerializer(read_only=True)
    label = serializers.CharField(read_only=True)
    outstanding = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Fine
        fields = [
            'id',
            'team',
            'offender',
            'issued_by',
            'rule',
            'custom_label',
            'label',
            'amount',
            'amount_paid',
            'outstanding',
            'status',
            'note',
            'last_reminder_sent',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class FineCreateSerializer(serializers.Serializer):
    """
    Issue a fine to one or several members.

    Either ``rule_id`` (optionally with an overriding ``amount``) or
    ``custom_label`` with ``amount``.
    """

    offender_id = serializers.UUIDField(required=False)
    offender_ids = serializers.ListField(
        child=serializers.UUIDField(),
        required=False,
        allow_empty=False
    )
    rule_id = serializers.UUIDField(required=False, allow_null=True)
    custom_label = serializers.CharField(required=False, allow_blank=False, max_length=100)
    amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=POSITIVE,
        required=False
    )
    note = serializers.CharField(required=False, allow_blank=True, max_length=500)

    def validate(self, attrs):
        if not attrs.get('offender_id') and not attrs.get('offender_ids'):
            raise serializers.ValidationError({
                'offender_ids': 'At least one offender is required'
            })
        if attrs.get('offender_id') and attrs.get('offender_ids'):
            raise serializers.ValidationError({
                'offender_ids': 'Provide offender_id or offender_ids, not both'
            })
        if not attrs.get('rule_id') and not attrs.get('custom_label'):
            raise serializers.ValidationError({
                'rule_id': 'Either rule_id or custom_label is required'
            })
        if attrs.get('rule_id') and attrs.get('custom_label'):
            raise serializers.ValidationError({
                'custom_label': 'Provide rule_id or custom_label, not both'
            })
        if attrs.get('custom_label') and attrs.get('amount') is None:
            raise serializers.ValidationError({
                'amount': 'Amount is required for a custom fine'
            })
        return attrs


class FineFailureSerializer(serializers.Serializer):
    offender_id = serializers.UUIDField()
    error = serializers.CharField()
    message = serializers.CharField()


class FineBatchResultSerializer(serializers.Serializer):
    fines = FineSerializer(many=True)
    failures = FineFailureSerializer(many=True)


class FineFilterSerializer(serializers.Serializer):
    offender_id = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=FineStatus.choices, required=False)


# =============================================================================
# Payments
# =============================================================================

class PaymentSerializer(serializers.ModelSerializer):
    payer = UserMinimalSerializer(read_only=True)
    recorded_by = UserMinimalSerializer(read_only=True)
    is_credit = serializers.BooleanField(read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id',
            'team',
            'fine',
            'payer',
            'amount',
            'method',
            'note',
            'is_credit',
            'recorded_by',
            'created_at',
        ]
        read_only_fields = fields


class PaymentCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=POSITIVE)
    method = serializers.ChoiceField(choices=PaymentMethodType.choices, required=False, allow_blank=True)
    note = serializers.CharField(required=False, allow_blank=True, max_length=500)


class PaymentResultSerializer(serializers.Serializer):
    """Outcome of one recorded payment."""

    payments = PaymentSerializer(many=True)
    fines = FineSerializer(many=True)
    total_applied = serializers.DecimalField(max_digits=10, decimal_places=2)
    credit_added = serializers.DecimalField(max_digits=10, decimal_places=2)


# =============================================================================
# Payment methods
# =============================================================================

class TeamPaymentMethodSerializer(serializers.ModelSerializer):
    label = serializers.CharField(read_only=True)

    class Meta:
        model = TeamPaymentMethod
        fields = [
            'id',
            'method_type',
            'label',
            'is_enabled',
            'display_name',
            'instructions',
            'config',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class TeamPaymentMethodWriteSerializer(serializers.Serializer):
    """Create or update the configuration of one method."""

    method_type = serializers.ChoiceField(choices=PaymentMethodType.choices)
    is_enabled = serializers.BooleanField(required=False)
    display_name = serializers.CharField(required=False, allow_blank=True, max_length=100)
    instructions = serializers.CharField(required=False, allow_blank=True, max_length=1000)
    config = serializers.DictField(required=False)


# =============================================================================
# Reminders
# =============================================================================

class ReminderSerializer(serializers.Serializer):
    message = serializers.CharField(required=False, allow_blank=True, max_length=500)


class ReminderResultSerializer(serializers.Serializer):
    reminded = serializers.BooleanField()
    fine_count = serializers.IntegerField()


# =============================================================================
# Expenses
# =============================================================================

class ExpenseSerializer(serializers.ModelSerializer):
    recorded_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Expense
        fields = ['id', 'team', 'amount', 'description', 'category', 'recorded_by', 'created_at']
        read_only_fields = fields


class ExpenseCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=POSITIVE)
    description = serializers.CharField(min_length=2, max_length=200)
    category = serializers.ChoiceField(choices=ExpenseCategory.choices, default=ExpenseCategory.OTHER)


class PaymentFilterSerializer(serializers.Serializer):
    payer_id = serializers.UUIDField(required=False)
