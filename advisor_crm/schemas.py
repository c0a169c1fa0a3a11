"""
Pydantic schemas for request/response validation.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any, Literal
from datetime import date, datetime

PaymentStructureType = Literal[
    "single_premium",
    "one_year_term",
    "regular_premium",
    "five_year_premium",
    "ten_year_premium",
    "lifetime_premium",
]

PolicyStatus = Literal["active", "pending", "expired", "cancelled", "inactive"]

PipelineStage = Literal[
    "Lead",
    "Contacted",
    "Proposal Sent",
    "Negotiation",
    "Closed Won",
    "Closed Lost",
]

TaskPriority = Literal["low", "medium", "high"]

TaskStatus = Literal["pending", "completed", "overdue"]


class RecordResponse(BaseModel):
    """Base for responses built from database rows."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime
    updated_at: Optional[datetime] = None


# Clients
class ClientCreate(BaseModel):
    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    occupation: Optional[str] = None
    age_group: Optional[str] = None
    pipeline_stage: PipelineStage = "Lead"


class ClientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    occupation: Optional[str] = None
    age_group: Optional[str] = None
    pipeline_stage: Optional[PipelineStage] = None


class ClientStageUpdate(BaseModel):
    """Move a client to another pipeline stage."""
    pipeline_stage: PipelineStage


class ClientResponse(RecordResponse):
    name: str
    email: Optional[str]
    phone: Optional[str]
    occupation: Optional[str]
    age_group: Optional[str]
    pipeline_stage: str


class ClientKpis(BaseModel):
    total_clients: int
    clients_with_active_policies: int
    clients_needing_attention: int
    total_policy_value: float


# Policies
class PolicyFields(BaseModel):
    """
    Editable policy fields.

    annual_ongoing_commission is absent on purpose: it is always derived.
    Range checks run in the form rules so they come back as field errors.
    """
    policy_name: Optional[str] = None
    policy_type: Optional[str] = None
    policy_number: Optional[str] = None
    provider: Optional[str] = None
    premium: Optional[float] = None
    value: Optional[float] = None
    payment_structure_type: Optional[PaymentStructureType] = None
    commission_rate: Optional[float] = None
    ongoing_commission_rate: Optional[float] = None
    first_year_commission: Optional[float] = None
    policy_duration: Optional[int] = None
    commission_duration: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[PolicyStatus] = None
    global_policy_id: Optional[str] = None


class PolicyCreate(PolicyFields):
    policy_name: str = Field(min_length=1)
    policy_type: str = Field(min_length=1)
    payment_structure_type: PaymentStructureType = "regular_premium"
    status: Optional[PolicyStatus] = "active"


class PolicyUpdate(PolicyFields):
    """Partial update; only the fields sent are applied."""


class PolicyFromGlobalRequest(BaseModel):
    """Client-specific values supplied when seeding a policy from a template."""
    premium: Optional[float] = None
    value: Optional[float] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    policy_number: Optional[str] = None
    status: Optional[PolicyStatus] = None


class PolicyResponse(RecordResponse):
    client_id: str
    policy_name: str
    policy_type: str
    policy_number: Optional[str]
    provider: Optional[str]
    premium: Optional[float]
    value: Optional[float]
    payment_structure_type: str
    commission_rate: Optional[float]
    ongoing_commission_rate: Optional[float]
    first_year_commission: Optional[float]
    annual_ongoing_commission: Optional[float]
    policy_duration: Optional[int]
    commission_duration: Optional[int]
    start_date: Optional[date]
    end_date: Optional[date]
    status: Optional[str]
    global_policy_id: Optional[str]

    # Derived display metrics
    payment_structure_label: str
    total_expected_commission: float
    premium_to_value_ratio: Optional[float]
    policy_age: Optional[int]
    commission_maturity_date: Optional[date]
    next_renewal_date: Optional[date]
    days_until_renewal: Optional[int]
    warnings: Dict[str, str] = Field(default_factory=dict)
    display: Dict[str, str] = Field(default_factory=dict, description="Formatted money and percentage fields")


class PolicyKpis(BaseModel):
    active_policies: int
    total_first_year_commission: float
    total_ongoing_commission: float
    renewing_soon: int
    highest_value_policy_id: Optional[str]
    highest_value: Optional[float]


class YearlyCommission(BaseModel):
    year: int
    amount: float


class CommissionProjection(BaseModel):
    """Commission projection for charting."""
    start_year: int
    years: List[YearlyCommission]
    next_year_commission: float
    highest_year: int
    highest_amount: float


# Policy editor
class PolicyFormValues(PolicyFields):
    """Current state of the policy editor, derived fields included."""
    annual_ongoing_commission: Optional[float] = None


class PolicyDeriveRequest(BaseModel):
    values: PolicyFormValues
    changed: List[str] = Field(default_factory=list, description="Fields the user just edited")


class PolicyDeriveResponse(BaseModel):
    patch: Dict[str, Any]
    errors: Dict[str, str]
    warnings: Dict[str, str]


class ApplyTemplateRequest(BaseModel):
    global_policy_id: str
    values: PolicyFormValues = Field(default_factory=PolicyFormValues)


class PolicyPatchResponse(BaseModel):
    patch: Dict[str, Any]


# Global policies
class GlobalPolicyFields(BaseModel):
    policy_name: Optional[str] = None
    policy_type: Optional[str] = None
    provider: Optional[str] = None
    payment_structure_type: Optional[PaymentStructureType] = None
    premium: Optional[float] = Field(None, ge=0)
    value: Optional[float] = Field(None, ge=0)
    first_year_commission_rate: Optional[float] = Field(None, ge=0, le=100)
    ongoing_commission_rate: Optional[float] = Field(None, ge=0, le=100)
    policy_duration: Optional[int] = Field(None, ge=1, le=30)
    commission_duration: Optional[int] = Field(None, ge=0, le=30)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[PolicyStatus] = None


class GlobalPolicyCreate(GlobalPolicyFields):
    policy_name: str = Field(min_length=1)
    policy_type: str = Field(min_length=1)
    payment_structure_type: PaymentStructureType = "regular_premium"
    status: Optional[PolicyStatus] = "active"


class GlobalPolicyUpdate(GlobalPolicyFields):
    """Partial update; only the fields sent are applied."""


class GlobalPolicyResponse(RecordResponse):
    policy_name: str
    policy_type: str
    provider: Optional[str]
    payment_structure_type: str
    premium: Optional[float]
    value: Optional[float]
    first_year_commission_rate: Optional[float]
    ongoing_commission_rate: Optional[float]
    policy_duration: Optional[int]
    commission_duration: Optional[int]
    start_date: Optional[date]
    end_date: Optional[date]
    status: Optional[str]


class GlobalPolicyKpis(BaseModel):
    total_active_global_policies: int
    avg_first_year_commission_rate: Optional[float]
    top_provider: Optional[str]
    avg_policy_duration: Optional[float]


# Pipeline
class PipelineSummary(BaseModel):
    stages: Dict[str, int]
    open_deals: int
    win_rate: Optional[float] = Field(description="Won / closed deals as a percentage")


# Tasks
class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    client_id: Optional[str] = None
    due_date: Optional[date] = None
    priority: TaskPriority = "medium"
    status: TaskStatus = "pending"
    task_type: Optional[str] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    client_id: Optional[str] = None
    due_date: Optional[date] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    task_type: Optional[str] = None


class TaskResponse(RecordResponse):
    title: str
    description: Optional[str]
    client_id: Optional[str]
    due_date: Optional[date]
    priority: Optional[str]
    status: Optional[str]
    task_type: Optional[str]
    is_overdue: bool = False


class TaskKpis(BaseModel):
    pending_tasks: int
    overdue_tasks: int
    completed_this_week: int
    high_priority_tasks: int


# Settings
class AccountSettings(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    email: str
    full_name: str


class AccountUpdate(BaseModel):
    email: Optional[str] = Field(None, min_length=3)
    full_name: Optional[str] = Field(None, min_length=1)


class CommissionGoalUpdate(BaseModel):
    commission_goal: float = Field(gt=0, description="Annual commission goal")


class CommissionGoalProgress(BaseModel):
    commission_goal: float
    ytd_commission: float
    progress_pct: float


# Dashboard
class MonthlyCommission(BaseModel):
    month: str
    amount: float


class RecentClient(BaseModel):
    id: str
    name: str
    policies: int
    value: float


class DashboardResponse(BaseModel):
    total_commission: float
    total_clients: int
    active_policies: int
    pending_tasks: int
    monthly_commission: List[MonthlyCommission]
    pipeline: Dict[str, int]
    upcoming_tasks: List[TaskResponse]
    recent_clients: List[RecentClient]
    commission_goal: CommissionGoalProgress
    projection: CommissionProjection
