"""
Commission calculator for advisor policies.

All functions are pure. Missing inputs propagate as None so that "no data"
stays distinguishable from a genuine zero commission.
"""

from typing import Any, Optional

# Years over which the remaining (post first-year) commission pool is paid,
# keyed by payment structure. Structures without an entry pay no ongoing
# commission.
ONGOING_COMMISSION_DIVISORS = {
    "single_premium": None,
    "one_year_term": None,
    "regular_premium": 5,
    "five_year_premium": 4,
    "ten_year_premium": 5,
    "lifetime_premium": 5,
}


def calculate_total_commission(
    premium: Optional[float],
    commission_rate: Optional[float]
) -> Optional[float]:
    """
    Calculate the total commission earned on a premium.

    Formula: total = premium * commission_rate / 100

    Args:
        premium: Premium amount, or None if unknown
        commission_rate: Commission rate as a percentage (0-100), or None

    Returns:
        Total commission, or None when either input is missing
    """
    if premium is None or commission_rate is None:
        return None
    return premium * commission_rate / 100


def calculate_first_year_commission(
    premium: Optional[float],
    commission_rate: Optional[float]
) -> Optional[float]:
    """First-year commission is the premium times the first-year rate."""
    return calculate_total_commission(premium, commission_rate)


def clamp_first_year_commission(
    first_year_commission: Optional[float],
    total_commission: Optional[float]
) -> Optional[float]:
    """Cap a first-year commission at the total commission."""
    if first_year_commission is None or total_commission is None:
        return first_year_commission
    return min(first_year_commission, total_commission)


def calculate_ongoing_commission(
    total_commission: Optional[float],
    first_year_commission: Optional[float],
    payment_structure_type: Optional[str]
) -> Optional[float]:
    """
    Calculate the annual ongoing commission for a payment structure.

    The commission left after the first year is spread over a fixed number
    of years per structure family:

    - single_premium, one_year_term: no ongoing commission
    - regular_premium, ten_year_premium, lifetime_premium: remaining / 5
    - five_year_premium: remaining / 4
    - anything else: 0

    The divisor does not depend on policy or commission duration.

    Args:
        total_commission: Total commission for the policy
        first_year_commission: Commission paid in the first year
        payment_structure_type: Payment structure of the policy

    Returns:
        Annual ongoing commission, or None when an amount is missing
    """
    if total_commission is None or first_year_commission is None:
        return None

    remaining = total_commission - first_year_commission
    divisor = ONGOING_COMMISSION_DIVISORS.get(payment_structure_type)
    if not divisor:
        return 0.0
    return remaining / divisor


def calculate_total_expected_commission(policy: Any) -> float:
    """
    Calculate the commission a policy is expected to pay over its lifetime.

    Formula: first_year + ongoing * max(0, commission_duration - 1)

    Missing amounts and durations count as zero. The result is never
    negative.
    """
    first_year = policy.first_year_commission or 0
    ongoing = policy.annual_ongoing_commission or 0
    duration = policy.commission_duration or 0

    total = first_year + ongoing * max(0, duration - 1)
    return max(0.0, total)


def calculate_premium_to_value_ratio(policy: Any) -> Optional[float]:
    """Premium as a percentage of the sum assured, None without both."""
    if not policy.premium or not policy.value:
        return None
    return (policy.premium / policy.value) * 100
