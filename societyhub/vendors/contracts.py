"""
Contract status derivation and renewal arithmetic for vendor contracts.

Statuses are derived from dates on every read, never stored:

* no end date             -> ``active``
* end date already passed -> ``expired``
* ends within the warning window (30 days by default) -> ``expiring``
* otherwise               -> ``active``
"""
from datetime import date, timedelta

from django.conf import settings

ACTIVE = 'active'
EXPIRING = 'expiring'
EXPIRED = 'expired'

CONTRACT_STATUSES = [ACTIVE, EXPIRING, EXPIRED]

DEFAULT_TERM_DAYS = 365


def days_until(end: date, today: date) -> int:
    """Whole days from ``today`` to ``end`` (negative once ``end`` has passed)"""
    return (end - today).days


def contract_status(contract_end, today, warning_days=None):
    if contract_end is None:
        return ACTIVE
    if warning_days is None:
        warning_days = settings.SOCIETYHUB_CONTRACT_WARNING_DAYS
    days = days_until(contract_end, today)
    if days < 0:
        return EXPIRED
    if days <= warning_days:
        return EXPIRING
    return ACTIVE


def contract_end_bounds(status, today, warning_days=None):
    """
    Date lookups on ``contract_end`` matching a derived status, so list
    filters stay in the database. Returns a dict of ORM lookups and a flag
    telling whether vendors without an end date match.
    """
    if warning_days is None:
        warning_days = settings.SOCIETYHUB_CONTRACT_WARNING_DAYS
    horizon = today + timedelta(days=warning_days)
    if status == EXPIRED:
        return {'contract_end__lt': today}, False
    if status == EXPIRING:
        return {'contract_end__gte': today, 'contract_end__lte': horizon}, False
    if status == ACTIVE:
        return {'contract_end__gt': horizon}, True
    raise ValueError(f"Unknown contract status: {status}")


def renewal_term(contract_start, contract_end, today, new_end=None):
    """
    Compute the next contract term.

    The new term starts the day after the current end, or today when the
    contract already expired or never had an end. It lasts as long as the
    previous term (a year when that is unknown) unless ``new_end`` is given.
    """
    if contract_end is None or contract_end < today:
        start = today
    else:
        start = contract_end + timedelta(days=1)

    if new_end is not None:
        if new_end < start:
            raise ValueError('New contract end must be on or after the renewal start date')
        return start, new_end

    if contract_start is not None and contract_end is not None and contract_end >= contract_start:
        term_days = (contract_end - contract_start).days
    else:
        term_days = DEFAULT_TERM_DAYS
    return start, start + timedelta(days=term_days)
