"""
Global policies router for policy templates.
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session
from typing import List
from datetime import datetime
import logging

from advisor_crm.schemas import (
    GlobalPolicyCreate,
    GlobalPolicyUpdate,
    GlobalPolicyResponse,
    GlobalPolicyKpis,
)
from advisor_crm.deps import get_current_advisor, get_owned_or_404
from advisor_crm.db import get_session
from advisor_crm.models import Advisor, GlobalPolicy
from advisor_crm.services.kpis import calculate_global_policy_kpis

logger = logging.getLogger("advisor_crm")

router = APIRouter()


@router.get("/global-policies", response_model=List[GlobalPolicyResponse])
async def list_global_policies(
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    return session.query(GlobalPolicy).filter(
        GlobalPolicy.advisor_id == advisor.id
    ).order_by(GlobalPolicy.created_at.desc()).all()


@router.get("/global-policies/kpis", response_model=GlobalPolicyKpis)
async def get_global_policy_kpis(
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    templates = session.query(GlobalPolicy).filter(GlobalPolicy.advisor_id == advisor.id).all()
    return calculate_global_policy_kpis(templates)


@router.post("/global-policies", response_model=GlobalPolicyResponse, status_code=201)
async def create_global_policy(
    request: GlobalPolicyCreate,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    global_policy = GlobalPolicy(advisor_id=advisor.id, **request.model_dump())
    session.add(global_policy)
    session.commit()
    session.refresh(global_policy)

    logger.info(f"Global policy created | global_policy_id={global_policy.id}")
    return global_policy


@router.get("/global-policies/{global_policy_id}", response_model=GlobalPolicyResponse)
async def get_global_policy(
    global_policy_id: str,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    return get_owned_or_404(session, GlobalPolicy, global_policy_id, advisor, "Global policy")


@router.patch("/global-policies/{global_policy_id}", response_model=GlobalPolicyResponse)
async def update_global_policy(
    global_policy_id: str,
    request: GlobalPolicyUpdate,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    """
    Update a template.

    Policies previously seeded from the template keep their copied values.
    """
    global_policy = get_owned_or_404(session, GlobalPolicy, global_policy_id, advisor, "Global policy")

    for field, value in request.model_dump(exclude_unset=True).items():
        setattr(global_policy, field, value)
    global_policy.updated_at = datetime.utcnow()

    session.add(global_policy)
    session.commit()
    session.refresh(global_policy)
    return global_policy


@router.delete("/global-policies/{global_policy_id}", status_code=204)
async def delete_global_policy(
    global_policy_id: str,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    global_policy = get_owned_or_404(session, GlobalPolicy, global_policy_id, advisor, "Global policy")
    session.delete(global_policy)
    session.commit()
    logger.info(f"Global policy deleted | global_policy_id={global_policy_id}")
