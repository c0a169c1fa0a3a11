"""
Yearly commission projection for a portfolio of policies.
"""

from typing import Any, Dict, Iterable, List

from advisor_crm.services.renewal import as_date


def calculate_yearly_commissions(
    policies: Iterable[Any],
    start_year: int,
    number_of_years: int
) -> List[Dict[str, Any]]:
    """
    Project policy commissions onto a window of calendar years.

    For each policy with a start date:
    - the start year receives the first-year commission
    - each later year receives the annual ongoing commission, as long as it
      is within commission_duration years of the start (every later year
      in the window when commission_duration is unset)

    Policies without a start date are skipped.

    Args:
        policies: Policy records
        start_year: First calendar year of the window
        number_of_years: Number of years in the window

    Returns:
        List of {"year": int, "amount": float} in year order
    """
    buckets = [
        {"year": start_year + offset, "amount": 0.0}
        for offset in range(max(0, number_of_years))
    ]

    for policy in policies:
        start = as_date(policy.start_date)
        if start is None:
            continue

        policy_start_year = start.year
        commission_duration = policy.commission_duration

        for bucket in buckets:
            delta = bucket["year"] - policy_start_year
            if delta == 0:
                bucket["amount"] += policy.first_year_commission or 0
            elif delta > 0 and (commission_duration is None or delta <= commission_duration):
                bucket["amount"] += policy.annual_ongoing_commission or 0

    return buckets


def summarize_projection(commission_data: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Next year's projected amount and the highest projected year."""
    next_year_commission = commission_data[1]["amount"] if len(commission_data) > 1 else 0.0

    highest = {"year": 0, "amount": 0.0}
    for item in commission_data:
        if item["amount"] > highest["amount"]:
            highest = item

    return {
        "next_year_commission": next_year_commission,
        "highest_year": highest["year"],
        "highest_amount": highest["amount"],
    }
