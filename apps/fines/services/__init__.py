"""
Fines app services layer.

Rule catalog, payment methods, expenses and reminders are plain functions;
the ledger is a service object bound to a database alias.
"""

from apps.fines.models import compute_fine_status

from .exceptions import (
    FineNotFoundError,
    RuleNotFoundError,
    ExpenseNotFoundError,
    PayerNotFoundError,
    InvalidOffenderError,
    InvalidRuleError,
    AlreadyPaidError,
    NoUnpaidFinesError,
    TeamClosedError,
    PaymentMethodNotFoundError,
    InvalidPaymentMethodError,
)

from .rule_catalog import (
    create_rule,
    update_rule,
    deactivate_rule,
    list_rules,
    resolve_rule,
)

from .payment_methods import (
    list_payment_methods,
    upsert_payment_method,
    delete_payment_method,
    resolve_payment_method,
)

from .ledger import (
    LedgerService,
    to_money,
)

from .expense_management import (
    record_expense,
    delete_expense,
    list_team_expenses,
)

from .reminders import (
    send_fine_reminder,
    send_member_reminder,
)


__all__ = [
    # Exceptions
    'FineNotFoundError',
    'RuleNotFoundError',
    'ExpenseNotFoundError',
    'PayerNotFoundError',
    'InvalidOffenderError',
    'InvalidRuleError',
    'AlreadyPaidError',
    'NoUnpaidFinesError',
    'TeamClosedError',
    'PaymentMethodNotFoundError',
    'InvalidPaymentMethodError',

    # Rule Catalog
    'create_rule',
    'update_rule',
    'deactivate_rule',
    'list_rules',
    'resolve_rule',

    # Payment Methods
    'list_payment_methods',
    'upsert_payment_method',
    'delete_payment_method',
    'resolve_payment_method',

    # Ledger
    'LedgerService',
    'compute_fine_status',
    'to_money',

    # Expenses
    'record_expense',
    'delete_expense',
    'list_team_expenses',

    # Reminders
    'send_fine_reminder',
    'send_member_reminder',
]
