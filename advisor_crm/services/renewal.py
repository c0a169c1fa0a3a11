"""
Renewal and date projections for policies.

Dates are projected on calendar anniversaries with dateutil's relativedelta,
so a policy starting on Feb 29 renews on Feb 28 in non-leap years.
"""

from datetime import date, datetime
from typing import Any, Optional, Union

from dateutil.relativedelta import relativedelta

DateLike = Union[date, datetime, str, None]


def get_today() -> date:
    """Current date. Patched in tests to pin the clock."""
    return date.today()


def as_date(value: DateLike) -> Optional[date]:
    """
    Normalize a stored date value.

    Accepts date/datetime objects or ISO strings. A malformed string raises
    ValueError instead of producing a wrong projection.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def whole_years_between(later: date, earlier: date) -> int:
    """Whole calendar years from earlier to later, truncated toward zero."""
    return relativedelta(later, earlier).years


def calculate_next_renewal_date(policy: Any, today: Optional[date] = None) -> Optional[date]:
    """
    Calculate the next anniversary of the policy start date.

    The result is the nearest anniversary that falls on or after today.

    Args:
        policy: Policy record with a start_date attribute
        today: Reference date, defaults to get_today()

    Returns:
        Next renewal date, or None without a start date
    """
    start = as_date(policy.start_date)
    if start is None:
        return None
    today = today or get_today()

    years_since_start = whole_years_between(today, start)
    renewal = start + relativedelta(years=years_since_start)
    if renewal < today:
        renewal = start + relativedelta(years=years_since_start + 1)
    return renewal


def calculate_days_until_renewal(policy: Any, today: Optional[date] = None) -> Optional[int]:
    today = today or get_today()
    renewal = calculate_next_renewal_date(policy, today)
    if renewal is None:
        return None
    return (renewal - today).days


def is_renewing_soon(policy: Any, window_days: int, today: Optional[date] = None) -> bool:
    """True if the policy renews within window_days (inclusive)."""
    days = calculate_days_until_renewal(policy, today)
    if days is None:
        return False
    return 0 <= days <= window_days


def calculate_policy_age(policy: Any, today: Optional[date] = None) -> Optional[int]:
    start = as_date(policy.start_date)
    if start is None:
        return None
    return whole_years_between(today or get_today(), start)


def calculate_commission_maturity_date(policy: Any) -> Optional[date]:
    """Date on which the last commission year ends."""
    start = as_date(policy.start_date)
    if start is None or policy.commission_duration is None:
        return None
    return start + relativedelta(years=policy.commission_duration)
