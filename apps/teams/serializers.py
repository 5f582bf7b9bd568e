from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer
from .models import (
    ActivityLog,
    DisputeMode,
    FinePermission,
    Team,
    TeamMembership,
    TeamRole,
)


class TeamSerializer(serializers.ModelSerializer):
    """Main serializer for teams."""

    created_by = UserMinimalSerializer(read_only=True)
    member_count = serializers.SerializerMethodField()
    user_role = serializers.SerializerMethodField()

    class Meta:
        model = Team
        fields = [
            'id',
            'name',
            'description',
            'sport',
            'invite_code',
            'created_by',
            'fine_permission',
            'allow_custom_fines',
            'dispute_enabled',
            'dispute_mode',
            'dispute_votes_required',
            'is_closed',
            'member_count',
            'user_role',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_member_count(self, obj):
        """Get number of active members in the team."""
        return obj.memberships.filter(is_deleted=False).count()

    def get_user_role(self, obj):
        """Get current user's role in the team."""
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return obj.get_user_role(request.user)
        return None


class TeamListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    member_count = serializers.SerializerMethodField()

    class Meta:
        model = Team
        fields = [
            'id',
            'name',
            'sport',
            'is_closed',
            'member_count',
            'created_at',
        ]
        read_only_fields = fields

    def get_member_count(self, obj):
        return obj.memberships.filter(is_deleted=False).count()


class TeamSettingsSerializer(serializers.Serializer):
    """Writable team fields, used for both create and partial update."""

    name = serializers.CharField(min_length=2, max_length=50)
    description = serializers.CharField(required=False, allow_blank=True, max_length=500)
    sport = serializers.CharField(required=False, allow_blank=True, max_length=50)
    fine_permission = serializers.ChoiceField(choices=FinePermission.choices, required=False)
    allow_custom_fines = serializers.BooleanField(required=False)
    dispute_enabled = serializers.BooleanField(required=False)
    dispute_mode = serializers.ChoiceField(
        choices=DisputeMode.choices,
        required=False,
        allow_null=True
    )
    dispute_votes_required = serializers.IntegerField(
        required=False,
        allow_null=True,
        min_value=1,
        max_value=100
    )
    is_closed = serializers.BooleanField(required=False)


class JoinTeamSerializer(serializers.Serializer):
    invite_code = serializers.CharField(max_length=16)


class TeamMemberSerializer(serializers.ModelSerializer):
    """Member information including banked credit."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = TeamMembership
        fields = ['id', 'user', 'role', 'credit', 'joined_at']
        read_only_fields = fields


class UpdateMemberRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=TeamRole.choices)


class MemberBalanceSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    total_fines = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    outstanding = serializers.DecimalField(max_digits=12, decimal_places=2)
    credit = serializers.DecimalField(max_digits=10, decimal_places=2)
    fine_count = serializers.IntegerField()
    unpaid_count = serializers.IntegerField()


class TeamStatsSerializer(serializers.Serializer):
    total_fined = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_outstanding = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_collected = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_expenses = serializers.DecimalField(max_digits=12, decimal_places=2)
    pot_balance = serializers.DecimalField(max_digits=12, decimal_places=2)
    fine_count = serializers.IntegerField()
    paid_fine_count = serializers.IntegerField()
    member_count = serializers.IntegerField()


class LeaderboardEntrySerializer(serializers.Serializer):
    rank = serializers.IntegerField()
    user = UserMinimalSerializer()
    total_fined = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    outstanding = serializers.DecimalField(max_digits=12, decimal_places=2)
    fine_count = serializers.IntegerField()


class ActivityLogSerializer(serializers.ModelSerializer):
    actor = UserMinimalSerializer(read_only=True)
    target_user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = ActivityLog
        fields = ['id', 'activity_type', 'actor', 'target_user', 'metadata', 'created_at']
        read_only_fields = fields
