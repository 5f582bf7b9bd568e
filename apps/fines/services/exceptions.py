"""
Domain exceptions for fines app.

Each error refines one family of the shared taxonomy in
``apps.core.exceptions`` with the code callers branch on.
"""

from apps.core.exceptions import (
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)


class FineNotFoundError(NotFoundError):
    """Fine does not exist or belongs to another team."""

    default_code = 'FINE_NOT_FOUND'
    default_detail = 'Fine not found.'


class RuleNotFoundError(NotFoundError):
    """Rule does not exist or belongs to another team."""

    default_detail = 'Rule not found.'


class ExpenseNotFoundError(NotFoundError):
    default_detail = 'Expense not found.'


class PayerNotFoundError(NotFoundError):
    """Payer never had a membership in the team."""

    default_detail = 'Payer is not a member of this team.'


class InvalidOffenderError(InvalidInputError):
    """Offender is not an active member of the team."""

    default_code = 'INVALID_OFFENDER'
    default_detail = 'Offender is not an active member of this team.'


class InvalidRuleError(InvalidInputError):
    """Rule is inactive or belongs to another team."""

    default_code = 'INVALID_RULE'
    default_detail = 'Rule is not an active rule of this team.'


class AlreadyPaidError(InvalidStateError):
    """Fine is already fully paid."""

    default_code = 'ALREADY_PAID'
    default_detail = 'Fine is already fully paid.'


class NoUnpaidFinesError(InvalidStateError):
    """Distributed payment for a member without outstanding fines."""

    default_code = 'NO_UNPAID_FINES'
    default_detail = 'Member has no unpaid fines.'


class TeamClosedError(InvalidStateError):
    """Team is closed for new fines and expenses."""

    default_code = 'TEAM_CLOSED'
    default_detail = 'Team is closed.'


class PaymentMethodNotFoundError(NotFoundError):
    """Team has no configuration for this payment method."""

    default_detail = 'Payment method not found.'


class InvalidPaymentMethodError(InvalidInputError):
    """Unknown payment method, or one the team does not accept."""

    default_code = 'INVALID_PAYMENT_METHOD'
    default_detail = 'This payment method is not accepted by the team.'
