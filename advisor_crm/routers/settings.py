"""
Settings router for account details and the annual commission goal.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
import logging

from advisor_crm.schemas import (
    AccountSettings,
    AccountUpdate,
    CommissionGoalUpdate,
    CommissionGoalProgress,
)
from advisor_crm.deps import get_current_advisor
from advisor_crm.db import get_session
from advisor_crm.models import Advisor, Policy
from advisor_crm.settings import DEFAULT_COMMISSION_GOAL
from advisor_crm.services import renewal
from advisor_crm.services.kpis import calculate_goal_progress

logger = logging.getLogger("advisor_crm")

router = APIRouter()


def _goal_progress(advisor: Advisor, session: Session) -> CommissionGoalProgress:
    policies = session.query(Policy).filter(Policy.advisor_id == advisor.id).all()
    goal = advisor.commission_goal or DEFAULT_COMMISSION_GOAL
    return CommissionGoalProgress(**calculate_goal_progress(policies, goal, renewal.get_today()))


@router.get("/settings/account", response_model=AccountSettings)
async def get_account(advisor: Advisor = Depends(get_current_advisor)):
    return advisor


@router.put("/settings/account", response_model=AccountSettings)
async def update_account(
    request: AccountUpdate,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    changes = request.model_dump(exclude_unset=True, exclude_none=True)

    new_email = changes.get("email")
    if new_email and new_email != advisor.email:
        taken = session.query(Advisor).filter(Advisor.email == new_email).first()
        if taken:
            raise HTTPException(status_code=409, detail="Email already in use")

    for field, value in changes.items():
        setattr(advisor, field, value)

    session.add(advisor)
    session.commit()
    session.refresh(advisor)
    return advisor


@router.get("/settings/commission-goal", response_model=CommissionGoalProgress)
async def get_commission_goal(
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    """Annual goal with year-to-date progress."""
    return _goal_progress(advisor, session)


@router.put("/settings/commission-goal", response_model=CommissionGoalProgress)
async def update_commission_goal(
    request: CommissionGoalUpdate,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    advisor.commission_goal = request.commission_goal
    session.add(advisor)
    session.commit()
    session.refresh(advisor)

    logger.info(f"Commission goal updated | advisor_id={advisor.id} | goal={advisor.commission_goal}")
    return _goal_progress(advisor, session)
