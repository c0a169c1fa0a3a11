"""
Tasks router for follow-ups and reminders.
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session
from typing import List, Optional
from datetime import datetime
import logging

from advisor_crm.schemas import TaskCreate, TaskUpdate, TaskResponse, TaskKpis
from advisor_crm.deps import get_current_advisor, get_owned_or_404
from advisor_crm.db import get_session
from advisor_crm.models import Advisor, Client, Task
from advisor_crm.services import renewal
from advisor_crm.services.kpis import calculate_task_kpis, is_task_overdue

logger = logging.getLogger("advisor_crm")

router = APIRouter()


def build_task_response(task: Task, today=None) -> TaskResponse:
    response = TaskResponse.model_validate(task)
    response.is_overdue = is_task_overdue(task, today or renewal.get_today())
    return response


@router.get("/tasks", response_model=List[TaskResponse])
async def list_tasks(
    client_id: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    task_type: Optional[str] = None,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    """List tasks ordered by due date; tasks without one come last."""
    query = session.query(Task).filter(Task.advisor_id == advisor.id)
    if client_id:
        query = query.filter(Task.client_id == client_id)
    if status:
        query = query.filter(Task.status == status)
    if priority:
        query = query.filter(Task.priority == priority)
    if task_type:
        query = query.filter(Task.task_type == task_type)

    tasks = query.order_by(Task.due_date.is_(None), Task.due_date.asc()).all()
    today = renewal.get_today()
    return [build_task_response(task, today) for task in tasks]


@router.get("/tasks/kpis", response_model=TaskKpis)
async def get_task_kpis(
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    tasks = session.query(Task).filter(Task.advisor_id == advisor.id).all()
    return calculate_task_kpis(tasks, renewal.get_today())


@router.post("/tasks", response_model=TaskResponse, status_code=201)
async def create_task(
    request: TaskCreate,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    if request.client_id:
        get_owned_or_404(session, Client, request.client_id, advisor, "Client")

    task = Task(advisor_id=advisor.id, **request.model_dump())
    session.add(task)
    session.commit()
    session.refresh(task)

    logger.info(f"Task created | task_id={task.id} | due_date={task.due_date}")
    return build_task_response(task)


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    return build_task_response(get_owned_or_404(session, Task, task_id, advisor, "Task"))


@router.patch("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    request: TaskUpdate,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    task = get_owned_or_404(session, Task, task_id, advisor, "Task")

    changes = request.model_dump(exclude_unset=True)
    if changes.get("client_id"):
        get_owned_or_404(session, Client, changes["client_id"], advisor, "Client")

    for field, value in changes.items():
        setattr(task, field, value)
    task.updated_at = datetime.utcnow()

    session.add(task)
    session.commit()
    session.refresh(task)
    return build_task_response(task)


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    task = get_owned_or_404(session, Task, task_id, advisor, "Task")
    session.delete(task)
    session.commit()
