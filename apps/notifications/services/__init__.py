"""
Notifications app services layer.

``notify`` and ``notify_members`` are called by the ledger, dispute and
membership services; the rest backs the inbox endpoints.
"""

from .exceptions import NotificationNotFoundError

from .inbox import (
    notify,
    notify_members,
    list_notifications,
    unread_count,
    mark_read,
    mark_all_read,
)

from .preferences import (
    SETTING_FIELDS,
    get_team_settings,
    update_team_settings,
)


__all__ = [
    # Exceptions
    'NotificationNotFoundError',

    # Inbox
    'notify',
    'notify_members',
    'list_notifications',
    'unread_count',
    'mark_read',
    'mark_all_read',

    # Settings
    'SETTING_FIELDS',
    'get_team_settings',
    'update_team_settings',
]
