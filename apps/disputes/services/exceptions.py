"""
Domain exceptions for disputes app.
"""

from apps.core.exceptions import ForbiddenError, InvalidStateError, NotFoundError


class DisputeNotFoundError(NotFoundError):
    default_detail = 'Dispute not found.'


class DisputesDisabledError(InvalidStateError):
    """Team has disputes switched off."""

    default_detail = 'Disputes are not enabled for this team.'


class DisputeAlreadyExistsError(InvalidStateError):
    """Fine already has a pending dispute."""

    default_detail = 'This fine already has a pending dispute.'


class DisputeNotPendingError(InvalidStateError):
    """Dispute already reached a terminal status."""

    default_detail = 'This dispute has already been resolved.'


class AlreadyVotedError(ForbiddenError):
    """Voter already voted on this dispute."""

    default_detail = 'You have already voted on this dispute.'
