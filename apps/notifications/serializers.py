from rest_framework import serializers

from .models import Notification, TeamNotificationSettings
from .services import SETTING_FIELDS


class NotificationSerializer(serializers.ModelSerializer):
    team_name = serializers.CharField(source='team.name', read_only=True, default=None)

    class Meta:
        model = Notification
        fields = [
            'id',
            'team',
            'team_name',
            'notification_type',
            'title',
            'body',
            'data',
            'is_read',
            'read_at',
            'created_at',
        ]
        read_only_fields = fields


class UnreadCountSerializer(serializers.Serializer):
    unread = serializers.IntegerField()


class MarkAllReadSerializer(serializers.Serializer):
    marked = serializers.IntegerField()


class TeamNotificationSettingsSerializer(serializers.ModelSerializer):
    """Every switch is optional on PATCH."""

    class Meta:
        model = TeamNotificationSettings
        fields = ['team'] + list(SETTING_FIELDS)
        read_only_fields = ['team']
        extra_kwargs = {field: {'required': False} for field in SETTING_FIELDS}
