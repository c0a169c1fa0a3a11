"""
Policies router for client policies, commission projections and the
policy editor rules.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session
from typing import Any, Dict, List, Optional
from datetime import date, datetime
import logging

from advisor_crm.schemas import (
    PolicyCreate,
    PolicyUpdate,
    PolicyFromGlobalRequest,
    PolicyResponse,
    PolicyKpis,
    CommissionProjection,
    PolicyDeriveRequest,
    PolicyDeriveResponse,
    ApplyTemplateRequest,
    PolicyPatchResponse,
)
from advisor_crm.deps import get_current_advisor, get_owned_or_404
from advisor_crm.db import get_session
from advisor_crm.models import Advisor, Client, Policy, GlobalPolicy
from advisor_crm.settings import PROJECTION_YEARS, RENEWAL_WINDOW_DAYS
from advisor_crm.services import renewal
from advisor_crm.services.kpis import calculate_policy_kpis
from advisor_crm.services.projection import calculate_yearly_commissions, summarize_projection
from advisor_crm.services.policies import (
    PolicyValidationError,
    build_policy_response,
    prepare_policy_values,
)
from advisor_crm.services.policy_form import (
    apply_global_policy,
    check_policy_limits,
    create_policy_from_global,
    derive_commission_fields,
    derive_fields,
    unlink_global_policy,
    validate_fields,
)

logger = logging.getLogger("advisor_crm")

router = APIRouter()


def _policy_values(policy: Policy) -> Dict[str, Any]:
    return policy.model_dump(exclude={"id", "advisor_id", "created_at", "updated_at"})


def _prepare_or_422(values: Dict[str, Any], changed=None) -> Dict[str, Any]:
    try:
        prepared, _ = prepare_policy_values(values, changed)
    except PolicyValidationError as e:
        raise HTTPException(status_code=422, detail={"errors": e.errors})
    return prepared


def _store_new_policy(session: Session, advisor: Advisor, values: Dict[str, Any]) -> Policy:
    policy = Policy(advisor_id=advisor.id, **_prepare_or_422(values))
    session.add(policy)
    session.commit()
    session.refresh(policy)

    logger.info(
        f"Policy created | policy_id={policy.id} | client_id={policy.client_id} | "
        f"global_policy_id={policy.global_policy_id} | "
        f"first_year_commission={policy.first_year_commission}"
    )
    return policy


def _projection(policies: List[Policy], start_year: int, years: int) -> CommissionProjection:
    data = calculate_yearly_commissions(policies, start_year, years)
    return CommissionProjection(start_year=start_year, years=data, **summarize_projection(data))


@router.get("/policies", response_model=List[PolicyResponse])
async def list_policies(
    client_id: Optional[str] = None,
    status: Optional[str] = None,
    policy_type: Optional[str] = None,
    year: Optional[int] = Query(None, description="Only policies starting in this year"),
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    query = session.query(Policy).filter(Policy.advisor_id == advisor.id)
    if client_id:
        query = query.filter(Policy.client_id == client_id)
    if status:
        query = query.filter(Policy.status == status)
    if policy_type:
        query = query.filter(Policy.policy_type == policy_type)
    if year:
        query = query.filter(
            Policy.start_date >= date(year, 1, 1),
            Policy.start_date <= date(year, 12, 31)
        )

    today = renewal.get_today()
    policies = query.order_by(Policy.created_at.desc()).all()
    return [build_policy_response(policy, today) for policy in policies]


@router.get("/policies/kpis", response_model=PolicyKpis)
async def get_policy_kpis(
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    policies = session.query(Policy).filter(Policy.advisor_id == advisor.id).all()
    return calculate_policy_kpis(policies, renewal.get_today(), RENEWAL_WINDOW_DAYS)


@router.get("/policies/projection", response_model=CommissionProjection)
async def get_commission_projection(
    years: int = Query(PROJECTION_YEARS, ge=1, le=50),
    start_year: Optional[int] = None,
    client_id: Optional[str] = None,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    """Project yearly commission from the current year onward."""
    query = session.query(Policy).filter(Policy.advisor_id == advisor.id)
    if client_id:
        query = query.filter(Policy.client_id == client_id)

    start_year = start_year or renewal.get_today().year
    return _projection(query.all(), start_year, years)


@router.post("/policies/form/derive", response_model=PolicyDeriveResponse)
async def derive_policy_form(
    request: PolicyDeriveRequest,
    advisor: Advisor = Depends(get_current_advisor)
):
    """
    Re-run the editor rules after a change.

    Returns the derived-field patch plus field errors and soft-limit
    warnings for the values with the patch applied.
    """
    values = request.values.model_dump()
    patch = derive_fields(values, request.changed)
    merged = {**values, **patch}
    return PolicyDeriveResponse(
        patch=patch,
        errors=validate_fields(merged),
        warnings=check_policy_limits(merged)
    )


@router.post("/policies/form/apply-template", response_model=PolicyPatchResponse)
async def apply_template_to_form(
    request: ApplyTemplateRequest,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    """Fill the editor from a global policy template."""
    global_policy = get_owned_or_404(
        session, GlobalPolicy, request.global_policy_id, advisor, "Global policy"
    )

    patch = apply_global_policy(global_policy)
    merged = {**request.values.model_dump(), **patch}
    # The template duration wins over one computed from editor dates
    patch.update(derive_commission_fields(merged, changed=("commission_rate", "payment_structure_type")))
    return PolicyPatchResponse(patch=patch)


@router.post("/policies/form/unlink", response_model=PolicyPatchResponse)
async def unlink_template_from_form(
    advisor: Advisor = Depends(get_current_advisor)
):
    """Clear the template link and the fields it controlled."""
    return PolicyPatchResponse(patch=unlink_global_policy())


@router.post("/clients/{client_id}/policies", response_model=PolicyResponse, status_code=201)
async def create_policy(
    client_id: str,
    request: PolicyCreate,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    get_owned_or_404(session, Client, client_id, advisor, "Client")

    values = request.model_dump()
    values["client_id"] = client_id
    policy = _store_new_policy(session, advisor, values)
    return build_policy_response(policy)


@router.post(
    "/clients/{client_id}/policies/from-global/{global_policy_id}",
    response_model=PolicyResponse,
    status_code=201
)
async def create_policy_from_template(
    client_id: str,
    global_policy_id: str,
    request: Optional[PolicyFromGlobalRequest] = None,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    """
    Seed a client policy from a global policy template.

    Template fields are copied; later edits to the template do not reach
    the policy. Values in the request body override the template's
    premium, value, dates, policy number and status.
    """
    get_owned_or_404(session, Client, client_id, advisor, "Client")
    global_policy = get_owned_or_404(session, GlobalPolicy, global_policy_id, advisor, "Global policy")

    values = create_policy_from_global(global_policy, client_id)
    if request:
        overrides = request.model_dump(exclude_unset=True)
        values.update(overrides)
        if "premium" in overrides:
            # First-year commission follows the client's actual premium
            values["first_year_commission"] = None

    policy = _store_new_policy(session, advisor, values)
    return build_policy_response(policy)


@router.get("/policies/{policy_id}", response_model=PolicyResponse)
async def get_policy(
    policy_id: str,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    policy = get_owned_or_404(session, Policy, policy_id, advisor, "Policy")
    return build_policy_response(policy)


@router.patch("/policies/{policy_id}", response_model=PolicyResponse)
async def update_policy(
    policy_id: str,
    request: PolicyUpdate,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    """
    Apply a partial update.

    Derived commission fields and the policy duration are recomputed from
    the merged values before they are stored.
    """
    policy = get_owned_or_404(session, Policy, policy_id, advisor, "Policy")

    changes = request.model_dump(exclude_unset=True)
    values = {**_policy_values(policy), **changes}
    prepared = _prepare_or_422(values, changed=changes.keys())

    for field, value in prepared.items():
        setattr(policy, field, value)
    policy.updated_at = datetime.utcnow()

    session.add(policy)
    session.commit()
    session.refresh(policy)
    return build_policy_response(policy)


@router.delete("/policies/{policy_id}", status_code=204)
async def delete_policy(
    policy_id: str,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    policy = get_owned_or_404(session, Policy, policy_id, advisor, "Policy")
    session.delete(policy)
    session.commit()
    logger.info(f"Policy deleted | policy_id={policy_id}")
