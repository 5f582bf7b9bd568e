"""
Unit-of-work helper.

Every mutating service call runs inside exactly one ``unit_of_work``. It is
``transaction.atomic`` bound to an explicit database alias, with storage
conflicts surfaced as ``ConflictError`` so callers can retry the whole call.
"""

from contextlib import contextmanager

from django.db import DEFAULT_DB_ALIAS, OperationalError, transaction

from .exceptions import ConflictError


@contextmanager
def unit_of_work(using=DEFAULT_DB_ALIAS):
    """
    Open a transaction on ``using`` that commits on success and rolls back on
    any exception.

    Nested calls become savepoints of the outer transaction.

    Raises:
        ConflictError: If the database aborted the transaction because of a
            lock timeout, deadlock or serialization failure.
    """
    try:
        with transaction.atomic(using=using):
            yield
    except OperationalError as exc:
        raise ConflictError() from exc
