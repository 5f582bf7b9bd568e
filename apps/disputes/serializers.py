from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer
from apps.fines.serializers import FineSerializer
from .models import DisputeStatus, FineDispute, FineDisputeVote


class FineDisputeSerializer(serializers.ModelSerializer):
    """Dispute with its voting progress."""

    disputed_by = UserMinimalSerializer(read_only=True)
    resolved_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = FineDispute
        fields = [
            'id',
            'fine',
            'team',
            'disputed_by',
            'reason',
            'status',
            'votes_count',
            'votes_required',
            'resolved_by',
            'resolution_note',
            'created_at',
            'resolved_at',
        ]
        read_only_fields = fields


class FineDisputeDetailSerializer(FineDisputeSerializer):
    """Dispute including the disputed fine, for team listings."""

    fine = FineSerializer(read_only=True)

    class Meta(FineDisputeSerializer.Meta):
        pass


class DisputeCreateSerializer(serializers.Serializer):
    reason = serializers.CharField(min_length=10, max_length=1000)


class VoteSerializer(serializers.Serializer):
    """``vote=true`` votes to cancel the fine, ``false`` to maintain it."""

    vote = serializers.BooleanField()


class ResolveSerializer(serializers.Serializer):
    approved = serializers.BooleanField()
    note = serializers.CharField(required=False, allow_blank=True, max_length=500)


class FineDisputeVoteSerializer(serializers.ModelSerializer):
    voter = UserMinimalSerializer(read_only=True)

    class Meta:
        model = FineDisputeVote
        fields = ['id', 'voter', 'vote', 'created_at']
        read_only_fields = fields


class DisputeFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=DisputeStatus.choices, required=False)
