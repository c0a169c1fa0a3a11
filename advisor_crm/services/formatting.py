"""
Display formatting shared by API responses.
"""

from typing import Optional

PAYMENT_STRUCTURE_LABELS = {
    "single_premium": "Single Premium",
    "one_year_term": "One-Year Term",
    "regular_premium": "Regular Premium",
    "five_year_premium": "5-Year Premium",
    "ten_year_premium": "10-Year Premium",
    "lifetime_premium": "Lifetime Premium",
}

MISSING = "N/A"


def format_currency(amount: Optional[float]) -> str:
    if amount is None:
        return MISSING
    if float(amount).is_integer():
        return f"${int(amount):,}"
    return f"${amount:,.2f}"


def format_percentage(percent: Optional[float]) -> str:
    if percent is None:
        return MISSING
    return f"{percent:g}%"


def payment_structure_label(payment_structure_type: Optional[str]) -> str:
    if not payment_structure_type:
        return MISSING
    return PAYMENT_STRUCTURE_LABELS.get(payment_structure_type, payment_structure_type)
