"""Domain exceptions for notifications app."""

from apps.core.exceptions import NotFoundError


class NotificationNotFoundError(NotFoundError):
    """Notification does not exist or belongs to someone else."""

    default_detail = 'Notification not found.'
