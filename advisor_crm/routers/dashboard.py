"""
Dashboard and pipeline router for aggregate KPIs.
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from advisor_crm.schemas import DashboardResponse, PipelineSummary, CommissionProjection
from advisor_crm.deps import get_current_advisor
from advisor_crm.db import get_session
from advisor_crm.models import Advisor, Client, Policy, Task
from advisor_crm.settings import DEFAULT_COMMISSION_GOAL, PROJECTION_YEARS
from advisor_crm.services import renewal
from advisor_crm.services.kpis import (
    calculate_goal_progress,
    calculate_monthly_commission,
    calculate_pipeline_summary,
    calculate_total_commission_earned,
)
from advisor_crm.services.projection import calculate_yearly_commissions, summarize_projection
from advisor_crm.routers.tasks import build_task_response

router = APIRouter()

UPCOMING_TASK_LIMIT = 5
RECENT_CLIENT_LIMIT = 4


@router.get("/pipeline", response_model=PipelineSummary)
async def get_pipeline(
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    """Client counts per pipeline stage with open deals and win rate."""
    clients = session.query(Client).filter(Client.advisor_id == advisor.id).all()
    return calculate_pipeline_summary(clients)


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    """
    Aggregate dashboard for the advisor.

    This endpoint:
    1. Sums commission across all policies
    2. Counts clients, active policies and pending tasks
    3. Groups commission by the month policies were recorded
    4. Summarizes the pipeline and upcoming tasks
    5. Lists the most recent clients with their policy totals
    6. Reports goal progress and the commission projection
    """
    today = renewal.get_today()

    policies = session.query(Policy).filter(Policy.advisor_id == advisor.id).all()
    clients = session.query(Client).filter(Client.advisor_id == advisor.id).all()

    pending_query = session.query(Task).filter(
        Task.advisor_id == advisor.id,
        Task.status == "pending"
    )
    upcoming_tasks = pending_query.order_by(
        Task.due_date.is_(None), Task.due_date.asc()
    ).limit(UPCOMING_TASK_LIMIT).all()

    recent_clients = []
    for client in sorted(clients, key=lambda c: c.created_at, reverse=True)[:RECENT_CLIENT_LIMIT]:
        client_policies = [policy for policy in policies if policy.client_id == client.id]
        recent_clients.append({
            "id": client.id,
            "name": client.name,
            "policies": len(client_policies),
            "value": sum(policy.value or 0 for policy in client_policies),
        })

    commission_goal = advisor.commission_goal or DEFAULT_COMMISSION_GOAL
    projection_data = calculate_yearly_commissions(policies, today.year, PROJECTION_YEARS)

    return DashboardResponse(
        total_commission=calculate_total_commission_earned(policies),
        total_clients=len(clients),
        active_policies=sum(1 for policy in policies if (policy.status or "").lower() == "active"),
        pending_tasks=pending_query.count(),
        monthly_commission=calculate_monthly_commission(policies),
        pipeline=calculate_pipeline_summary(clients)["stages"],
        upcoming_tasks=[build_task_response(task, today) for task in upcoming_tasks],
        recent_clients=recent_clients,
        commission_goal=calculate_goal_progress(policies, commission_goal, today),
        projection=CommissionProjection(
            start_year=today.year,
            years=projection_data,
            **summarize_projection(projection_data)
        )
    )
