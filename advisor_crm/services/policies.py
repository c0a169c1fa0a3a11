"""
Policy record service: applies the form rules on save and builds responses.
"""

from typing import Any, Dict, Iterable, Optional, Tuple
from datetime import date

from advisor_crm.schemas import PolicyResponse
from advisor_crm.services import renewal
from advisor_crm.services.commission import (
    calculate_premium_to_value_ratio,
    calculate_total_expected_commission,
)
from advisor_crm.services.formatting import (
    format_currency,
    format_percentage,
    payment_structure_label,
)
from advisor_crm.services.policy_form import (
    check_policy_limits,
    derive_fields,
    validate_fields,
)

CURRENCY_FIELDS = (
    "premium",
    "value",
    "first_year_commission",
    "annual_ongoing_commission",
    "total_expected_commission",
)

PERCENTAGE_FIELDS = ("commission_rate", "ongoing_commission_rate", "premium_to_value_ratio")


class PolicyValidationError(ValueError):
    """Raised when policy values fail field validation."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(f"{field}: {message}" for field, message in errors.items()))
        self.errors = errors


def prepare_policy_values(
    values: Dict[str, Any],
    changed: Optional[Iterable[str]] = None
) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """
    Derive and validate the values of a policy about to be stored.

    Args:
        values: Complete field values (stored values merged with the edit)
        changed: Fields touched by the edit, None for a new record

    Returns:
        Tuple of (values with derived fields applied, soft-limit warnings)

    Raises:
        PolicyValidationError: If a field fails validation
    """
    merged = dict(values)
    merged.update(derive_fields(merged, changed))

    errors = validate_fields(merged)
    if errors:
        raise PolicyValidationError(errors)

    return merged, check_policy_limits(merged)


def policy_metrics(policy: Any, today: Optional[date] = None) -> Dict[str, Any]:
    """Derived display metrics for a stored policy."""
    today = today or renewal.get_today()
    return {
        "payment_structure_label": payment_structure_label(policy.payment_structure_type),
        "total_expected_commission": calculate_total_expected_commission(policy),
        "premium_to_value_ratio": calculate_premium_to_value_ratio(policy),
        "policy_age": renewal.calculate_policy_age(policy, today),
        "commission_maturity_date": renewal.calculate_commission_maturity_date(policy),
        "next_renewal_date": renewal.calculate_next_renewal_date(policy, today),
        "days_until_renewal": renewal.calculate_days_until_renewal(policy, today),
    }


def policy_display(data: Dict[str, Any]) -> Dict[str, str]:
    """Formatted money and percentage fields; missing values read "N/A"."""
    display = {field: format_currency(data.get(field)) for field in CURRENCY_FIELDS}
    display.update({field: format_percentage(data.get(field)) for field in PERCENTAGE_FIELDS})
    return display


def build_policy_response(policy: Any, today: Optional[date] = None) -> PolicyResponse:
    data = policy.model_dump()
    data.update(policy_metrics(policy, today))
    data["warnings"] = check_policy_limits(data)
    data["display"] = policy_display(data)
    return PolicyResponse(**data)
