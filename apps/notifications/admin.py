from django.contrib import admin
from apps.notifications.models import Notification, TeamNotificationSettings


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['user', 'team', 'notification_type', 'title', 'is_read', 'created_at']
    list_filter = ['notification_type', 'is_read', 'created_at']
    search_fields = ['user__email', 'team__name', 'title']
    readonly_fields = ['created_at', 'read_at']
    date_hierarchy = 'created_at'


@admin.register(TeamNotificationSettings)
class TeamNotificationSettingsAdmin(admin.ModelAdmin):
    list_display = ['user', 'team', 'notifications_enabled', 'updated_at']
    list_filter = ['notifications_enabled']
    search_fields = ['user__email', 'team__name']
