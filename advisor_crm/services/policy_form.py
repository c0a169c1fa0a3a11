"""
Derivation and validation rules for the policy editor.

The editor sends its current field values after every change; the rules
return a patch of derived fields and a map of field errors. Nothing here
mutates the values it receives, so the caller decides when to merge.
"""

import logging
import math
from typing import Any, Dict, Iterable, Optional

from advisor_crm.services.commission import (
    calculate_first_year_commission,
    calculate_ongoing_commission,
    calculate_total_commission,
    clamp_first_year_commission,
)
from advisor_crm.services.renewal import as_date, whole_years_between

logger = logging.getLogger("advisor_crm")

MAX_POLICY_DURATION = 30

DEFAULT_PAYMENT_STRUCTURE = "regular_premium"

# Soft limits per policy type: (max_premium, max_value)
POLICY_LIMITS = {
    "life": (1_000_000, 10_000_000),
    "health": (50_000, 1_000_000),
    "auto": (10_000, 500_000),
    "home": (20_000, 2_000_000),
    "disability": (30_000, 1_000_000),
    "liability": (50_000, 5_000_000),
    "business": (500_000, 10_000_000),
    "other": (100_000, 1_000_000),
}

# Fields a global policy template controls in the editor
TEMPLATE_FIELDS = (
    "policy_name",
    "policy_type",
    "provider",
    "payment_structure_type",
    "commission_rate",
    "ongoing_commission_rate",
    "commission_duration",
    "policy_duration",
    "global_policy_id",
)


def _differs(current: Any, new: Any) -> bool:
    if current is None or new is None:
        return current is not new
    if isinstance(current, (int, float)) and isinstance(new, (int, float)):
        return not math.isclose(current, new, rel_tol=1e-9, abs_tol=1e-9)
    return current != new


def derive_commission_fields(
    values: Dict[str, Any],
    changed: Optional[Iterable[str]] = None
) -> Dict[str, Any]:
    """
    Compute the derived commission fields of a policy being edited.

    first_year_commission follows premium * commission_rate / 100 when
    either input was just changed or no first-year amount exists yet;
    otherwise an existing amount is clamped to the total commission.
    Clearing premium or commission_rate clears the first-year amount.

    annual_ongoing_commission is recomputed from total commission,
    first-year commission and payment structure, and is None whenever one
    of them is missing.
    """
    changed = set(changed or ())
    patch: Dict[str, Any] = {}

    premium = values.get("premium")
    commission_rate = values.get("commission_rate")
    first_year = values.get("first_year_commission")
    total = calculate_total_commission(premium, commission_rate)

    if total is not None:
        if changed & {"premium", "commission_rate"} or first_year is None:
            new_first_year = calculate_first_year_commission(premium, commission_rate)
        else:
            new_first_year = clamp_first_year_commission(first_year, total)
            if new_first_year != first_year:
                logger.info(
                    f"First-year commission clamped | "
                    f"entered={first_year} | total={total}"
                )
    elif changed & {"premium", "commission_rate"}:
        new_first_year = None
    else:
        new_first_year = first_year

    if _differs(first_year, new_first_year):
        patch["first_year_commission"] = new_first_year
    first_year = new_first_year

    ongoing = None
    payment_structure_type = values.get("payment_structure_type")
    if total is not None and first_year is not None and payment_structure_type:
        ongoing = calculate_ongoing_commission(total, first_year, payment_structure_type)
    if _differs(values.get("annual_ongoing_commission"), ongoing):
        patch["annual_ongoing_commission"] = ongoing

    return patch


def derive_policy_duration(values: Dict[str, Any]) -> Dict[str, Any]:
    """Set policy_duration from start/end dates when the whole-year gap is 0-30."""
    start = as_date(values.get("start_date"))
    end = as_date(values.get("end_date"))
    if start and end:
        duration = whole_years_between(end, start)
        if 0 <= duration <= MAX_POLICY_DURATION and duration != values.get("policy_duration"):
            return {"policy_duration": duration}
    return {}


def derive_fields(
    values: Dict[str, Any],
    changed: Optional[Iterable[str]] = None
) -> Dict[str, Any]:
    """
    Compute the derived fields of a policy being edited.

    Args:
        values: Current field values of the policy
        changed: Names of the fields the user just edited, or None for a
            full re-derivation without a specific trigger

    Returns:
        Patch containing only the fields whose value changes
    """
    patch = derive_commission_fields(values, changed)
    patch.update(derive_policy_duration(values))
    return patch


def validate_fields(values: Dict[str, Any]) -> Dict[str, str]:
    """
    Validate a policy's fields.

    Returns:
        Map of field name to error message; empty when the record is valid
    """
    errors: Dict[str, str] = {}

    for field, label in (("policy_name", "Policy name"), ("policy_type", "Policy type")):
        if field in values and not values[field]:
            errors[field] = f"{label} is required"
    if "payment_structure_type" in values and not values["payment_structure_type"]:
        errors["payment_structure_type"] = "Payment structure is required"

    premium = values.get("premium")
    if premium is not None and premium < 0:
        errors["premium"] = "Premium must be greater than 0"

    value = values.get("value")
    if value is not None and value < 0:
        errors["value"] = "Value must be greater than 0"

    commission_rate = values.get("commission_rate")
    if commission_rate is not None and not 0 <= commission_rate <= 100:
        errors["commission_rate"] = "Commission rate must be between 0 and 100"

    policy_duration = values.get("policy_duration")
    if policy_duration is not None and not 1 <= policy_duration <= MAX_POLICY_DURATION:
        errors["policy_duration"] = "Policy duration must be between 1 and 30 years"

    commission_duration = values.get("commission_duration")
    if commission_duration is not None and commission_duration < 0:
        errors["commission_duration"] = "Commission duration cannot be negative"
    elif (
        commission_duration is not None
        and policy_duration is not None
        and commission_duration > policy_duration
    ):
        errors["commission_duration"] = "Commission duration cannot exceed policy duration"

    start = as_date(values.get("start_date"))
    end = as_date(values.get("end_date"))
    if start and end and end <= start:
        errors["end_date"] = "End date must be after start date"

    return errors


def check_policy_limits(values: Dict[str, Any]) -> Dict[str, str]:
    """
    Check premium and value against the soft limits of the policy type.

    Unknown policy types have no limits.
    """
    policy_type = values.get("policy_type")
    limits = POLICY_LIMITS.get((policy_type or "").lower())
    if limits is None:
        return {}

    max_premium, max_value = limits
    warnings: Dict[str, str] = {}

    premium = values.get("premium")
    if premium and premium > max_premium:
        warnings["premium"] = f"Premium exceeds maximum limit for {policy_type} policies"

    value = values.get("value")
    if value and value > max_value:
        warnings["value"] = f"Value exceeds maximum limit for {policy_type} policies"

    return warnings


def apply_global_policy(global_policy: Any) -> Dict[str, Any]:
    """Patch that copies a template's fields into the policy editor."""
    return {
        "policy_name": global_policy.policy_name,
        "policy_type": global_policy.policy_type,
        "provider": global_policy.provider,
        "payment_structure_type": global_policy.payment_structure_type or DEFAULT_PAYMENT_STRUCTURE,
        "commission_rate": global_policy.first_year_commission_rate,
        "ongoing_commission_rate": global_policy.ongoing_commission_rate,
        "commission_duration": global_policy.commission_duration,
        "policy_duration": global_policy.policy_duration,
        "global_policy_id": global_policy.id,
    }


def unlink_global_policy() -> Dict[str, Any]:
    """Patch that resets the template-controlled fields to blanks."""
    return {
        "policy_name": "",
        "policy_type": "",
        "provider": None,
        "payment_structure_type": DEFAULT_PAYMENT_STRUCTURE,
        "commission_rate": None,
        "ongoing_commission_rate": None,
        "commission_duration": None,
        "policy_duration": None,
        "global_policy_id": None,
    }


def create_policy_from_global(global_policy: Any, client_id: str) -> Dict[str, Any]:
    """
    Build the field values of a new client policy seeded from a template.

    The first-year commission is computed from the template premium and
    first-year rate; the ongoing commission is left for derivation.
    """
    return {
        "client_id": client_id,
        "policy_name": global_policy.policy_name,
        "policy_type": global_policy.policy_type,
        "provider": global_policy.provider,
        "payment_structure_type": global_policy.payment_structure_type or DEFAULT_PAYMENT_STRUCTURE,
        "premium": global_policy.premium,
        "value": global_policy.value,
        "commission_rate": global_policy.first_year_commission_rate,
        "ongoing_commission_rate": global_policy.ongoing_commission_rate,
        "commission_duration": global_policy.commission_duration,
        "policy_duration": global_policy.policy_duration,
        "start_date": global_policy.start_date,
        "end_date": global_policy.end_date,
        "status": global_policy.status,
        "global_policy_id": global_policy.id,
        "first_year_commission": calculate_first_year_commission(
            global_policy.premium, global_policy.first_year_commission_rate
        ),
        "annual_ongoing_commission": None,
    }
