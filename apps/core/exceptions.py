"""
Error taxonomy shared by every Fine Pot service.

Services raise exactly one of these for any business-rule failure. Each
error carries a stable ``code`` and a human ``message``; the API layer
renders the pair unchanged (see ``apps.core.handlers``).

Exception Hierarchy:
    ServiceError (base)
    ├── ForbiddenError          FORBIDDEN      403
    ├── NotFoundError           NOT_FOUND      404
    ├── InvalidInputError       INVALID_INPUT  400
    ├── InvalidStateError       INVALID_STATE  400
    └── ConflictError           CONFLICT       409

App-specific errors live in each app's ``services/exceptions.py`` and
subclass one of the above, overriding ``default_code`` where the caller
needs a finer distinction (``FINE_NOT_FOUND``, ``ALREADY_PAID``...).

Usage:
    from apps.fines.services.exceptions import AlreadyPaidError

    if fine.is_paid:
        raise AlreadyPaidError("Fine is already fully paid")
"""


class ServiceError(Exception):
    """
    Base exception for all service errors.

    Mirrors the attribute names of DRF's ``APIException`` so the exception
    handler can treat both families alike.
    """

    status_code = 400
    default_code = 'ERROR'
    default_detail = 'The operation could not be completed.'

    def __init__(self, message=None, code=None):
        self.message = message or self.default_detail
        self.code = code or self.default_code
        super().__init__(self.message)

    def as_dict(self):
        return {'error': self.code, 'message': self.message}


class ForbiddenError(ServiceError):
    """Raised when the actor lacks the role required for an operation."""

    status_code = 403
    default_code = 'FORBIDDEN'
    default_detail = 'You do not have permission to perform this action.'


class NotFoundError(ServiceError):
    """Raised when a referenced entity does not exist or belongs to another team."""

    status_code = 404
    default_code = 'NOT_FOUND'
    default_detail = 'Not found.'


class InvalidInputError(ServiceError):
    """Raised when a combination of arguments violates a business rule."""

    default_code = 'INVALID_INPUT'
    default_detail = 'Invalid input.'


class InvalidStateError(ServiceError):
    """Raised when an entity is not in a state that allows the operation."""

    default_code = 'INVALID_STATE'
    default_detail = 'The operation is not allowed in the current state.'


class ConflictError(ServiceError):
    """
    Raised when the storage layer aborts a transaction because of a
    concurrent write (lock timeout, deadlock, serialization failure).

    The whole operation is safe to retry from scratch.
    """

    status_code = 409
    default_code = 'CONFLICT'
    default_detail = 'The resource was modified concurrently. Please retry.'
    retryable = True
