"""
KPI aggregations for the dashboard and list pages.

Every function takes already-loaded records and a reference date, so the
aggregations stay independent of the database session.
"""

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from advisor_crm.services.renewal import as_date, is_renewing_soon

PIPELINE_STAGES = [
    "Lead",
    "Contacted",
    "Proposal Sent",
    "Negotiation",
    "Closed Won",
    "Closed Lost",
]

CLOSED_STAGES = {"Closed Won", "Closed Lost"}

ATTENTION_STAGES = {"Lead", "Contacted"}

MONTH_ABBREVIATIONS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


def _is_active(record: Any) -> bool:
    return (record.status or "").lower() == "active"


def _policy_commission(policy: Any) -> float:
    return (policy.first_year_commission or 0) + (policy.annual_ongoing_commission or 0)


def calculate_total_commission_earned(policies: Iterable[Any]) -> float:
    """Sum of first-year and ongoing commission across policies."""
    return sum(_policy_commission(policy) for policy in policies)


def calculate_policy_kpis(
    policies: List[Any],
    today: date,
    renewal_window_days: int
) -> Dict[str, Any]:
    """
    KPIs for the policies page.

    Commission totals only count active policies; renewals and the
    highest-value policy consider every policy.
    """
    active = [policy for policy in policies if _is_active(policy)]

    highest_value_policy = None
    if policies:
        highest_value_policy = max(policies, key=lambda policy: policy.value or 0)

    return {
        "active_policies": len(active),
        "total_first_year_commission": sum(p.first_year_commission or 0 for p in active),
        "total_ongoing_commission": sum(p.annual_ongoing_commission or 0 for p in active),
        "renewing_soon": sum(
            1 for policy in policies
            if is_renewing_soon(policy, renewal_window_days, today)
        ),
        "highest_value_policy_id": highest_value_policy.id if highest_value_policy else None,
        "highest_value": highest_value_policy.value if highest_value_policy else None,
    }


def calculate_client_kpis(clients: List[Any], policies: List[Any]) -> Dict[str, Any]:
    clients_with_active = {policy.client_id for policy in policies if _is_active(policy)}
    return {
        "total_clients": len(clients),
        "clients_with_active_policies": len(clients_with_active),
        "clients_needing_attention": sum(
            1 for client in clients if client.pipeline_stage in ATTENTION_STAGES
        ),
        "total_policy_value": sum(policy.value or 0 for policy in policies),
    }


def calculate_global_policy_kpis(global_policies: List[Any]) -> Dict[str, Any]:
    """
    KPIs for the template catalogue.

    Averages ignore templates where the field is unset; they are None when
    no template has a value.
    """
    rates = [
        gp.first_year_commission_rate for gp in global_policies
        if gp.first_year_commission_rate is not None
    ]
    durations = [gp.policy_duration for gp in global_policies if gp.policy_duration is not None]
    providers = Counter(gp.provider for gp in global_policies if gp.provider)

    return {
        "total_active_global_policies": sum(1 for gp in global_policies if _is_active(gp)),
        "avg_first_year_commission_rate": round(sum(rates) / len(rates), 1) if rates else None,
        "top_provider": providers.most_common(1)[0][0] if providers else None,
        "avg_policy_duration": round(sum(durations) / len(durations), 1) if durations else None,
    }


def calculate_pipeline_summary(clients: List[Any]) -> Dict[str, Any]:
    """
    Count clients per pipeline stage.

    Win rate is won / (won + lost) as a percentage; None before any deal
    has closed.
    """
    stages = {stage: 0 for stage in PIPELINE_STAGES}
    for client in clients:
        if client.pipeline_stage in stages:
            stages[client.pipeline_stage] += 1

    won = stages["Closed Won"]
    lost = stages["Closed Lost"]
    closed = won + lost

    return {
        "stages": stages,
        "open_deals": sum(count for stage, count in stages.items() if stage not in CLOSED_STAGES),
        "win_rate": round(won / closed * 100, 1) if closed else None,
    }


def is_task_overdue(task: Any, today: date) -> bool:
    due = as_date(task.due_date)
    return due is not None and due < today and task.status != "completed"


def calculate_task_kpis(tasks: List[Any], today: date) -> Dict[str, int]:
    week_ago = today - timedelta(days=7)

    def completed_recently(task: Any) -> bool:
        stamp = task.updated_at or task.created_at
        return task.status == "completed" and stamp is not None and as_date(stamp) > week_ago

    return {
        "pending_tasks": sum(1 for task in tasks if task.status == "pending"),
        "overdue_tasks": sum(1 for task in tasks if is_task_overdue(task, today)),
        "completed_this_week": sum(1 for task in tasks if completed_recently(task)),
        "high_priority_tasks": sum(
            1 for task in tasks
            if task.priority == "high" and task.status != "completed"
        ),
    }


def calculate_monthly_commission(policies: Iterable[Any]) -> List[Dict[str, Any]]:
    """Commission grouped by the month each policy was recorded, in calendar order."""
    totals: Dict[int, float] = {}
    for policy in policies:
        created: Optional[datetime] = policy.created_at
        if created is None:
            continue
        totals[created.month] = totals.get(created.month, 0.0) + _policy_commission(policy)

    return [
        {"month": MONTH_ABBREVIATIONS[month - 1], "amount": totals[month]}
        for month in sorted(totals)
    ]


def calculate_goal_progress(
    policies: Iterable[Any],
    commission_goal: float,
    today: date
) -> Dict[str, Any]:
    """
    Year-to-date commission against the advisor's annual goal.

    Year-to-date covers policies starting on or after January 1 of the
    current year. Progress is capped at 100%.
    """
    start_of_year = date(today.year, 1, 1)
    ytd_commission = sum(
        _policy_commission(policy) for policy in policies
        if as_date(policy.start_date) is not None and as_date(policy.start_date) >= start_of_year
    )
    progress = min(ytd_commission / commission_goal * 100, 100) if commission_goal else 0.0

    return {
        "commission_goal": commission_goal,
        "ytd_commission": ytd_commission,
        "progress_pct": round(progress, 1),
    }
