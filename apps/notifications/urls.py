from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    # GET    /api/notifications/                               - Inbox (limit, unread_only)
    path('notifications/', views.notification_list, name='notification-list'),

    # GET    /api/notifications/unread-count/                  - Unread count
    path(
        'notifications/unread-count/',
        views.notification_unread_count,
        name='notification-unread-count'
    ),

    # POST   /api/notifications/mark-all-read/                 - Mark every notification read
    path(
        'notifications/mark-all-read/',
        views.notification_mark_all_read,
        name='notification-mark-all-read'
    ),

    # POST   /api/notifications/{notification_id}/read/        - Mark one read
    path(
        'notifications/<uuid:notification_id>/read/',
        views.notification_read,
        name='notification-read'
    ),

    # GET    /api/teams/{team_id}/notification-settings/       - Switches for one team
    # PATCH  /api/teams/{team_id}/notification-settings/       - Change switches
    path(
        'teams/<uuid:team_id>/notification-settings/',
        views.team_notification_settings,
        name='team-notification-settings'
    ),
]
