"""
SQLModel database models for the advisor CRM.
"""

from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import date, datetime
import uuid


def new_id() -> str:
    """Opaque record identifier."""
    return uuid.uuid4().hex


class Advisor(SQLModel, table=True):
    """Advisor account; the API key authenticates every request."""
    id: str = Field(default_factory=new_id, primary_key=True)
    email: str = Field(unique=True, index=True)
    full_name: str
    api_key: str = Field(unique=True, index=True)
    commission_goal: Optional[float] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Client(SQLModel, table=True):
    """Client record with its sales pipeline stage."""
    id: str = Field(default_factory=new_id, primary_key=True)
    advisor_id: str = Field(foreign_key="advisor.id", index=True)
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    occupation: Optional[str] = None
    age_group: Optional[str] = None
    pipeline_stage: str = "Lead"
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Policy(SQLModel, table=True):
    """Insurance policy held by a client."""
    id: str = Field(default_factory=new_id, primary_key=True)
    advisor_id: str = Field(foreign_key="advisor.id", index=True)
    client_id: str = Field(foreign_key="client.id", index=True)
    policy_name: str
    policy_type: str
    policy_number: Optional[str] = None
    provider: Optional[str] = None
    premium: Optional[float] = None
    value: Optional[float] = None
    payment_structure_type: str = "regular_premium"
    commission_rate: Optional[float] = None
    ongoing_commission_rate: Optional[float] = None
    first_year_commission: Optional[float] = None
    annual_ongoing_commission: Optional[float] = None
    policy_duration: Optional[int] = None
    commission_duration: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[str] = None
    # Weak reference: templates can be deleted without touching policies
    global_policy_id: Optional[str] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class GlobalPolicy(SQLModel, table=True):
    """Policy template used to seed client policies."""
    __tablename__ = "global_policy"

    id: str = Field(default_factory=new_id, primary_key=True)
    advisor_id: str = Field(foreign_key="advisor.id", index=True)
    policy_name: str
    policy_type: str
    provider: Optional[str] = None
    payment_structure_type: str = "regular_premium"
    premium: Optional[float] = None
    value: Optional[float] = None
    first_year_commission_rate: Optional[float] = None
    ongoing_commission_rate: Optional[float] = None
    policy_duration: Optional[int] = None
    commission_duration: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Task(SQLModel, table=True):
    """Follow-up task, optionally tied to a client."""
    id: str = Field(default_factory=new_id, primary_key=True)
    advisor_id: str = Field(foreign_key="advisor.id", index=True)
    client_id: Optional[str] = Field(default=None, foreign_key="client.id")
    title: str
    description: Optional[str] = None
    due_date: Optional[date] = None
    priority: Optional[str] = "medium"
    status: Optional[str] = "pending"
    task_type: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
