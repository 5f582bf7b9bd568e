"""
Disputes app services layer.
"""

from .exceptions import (
    DisputeNotFoundError,
    DisputesDisabledError,
    DisputeAlreadyExistsError,
    DisputeNotPendingError,
    AlreadyVotedError,
)

from .dispute_engine import DisputeService


__all__ = [
    # Exceptions
    'DisputeNotFoundError',
    'DisputesDisabledError',
    'DisputeAlreadyExistsError',
    'DisputeNotPendingError',
    'AlreadyVotedError',

    # Dispute Engine
    'DisputeService',
]
