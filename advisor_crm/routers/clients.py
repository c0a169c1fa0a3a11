"""
Clients router for client records and pipeline stage moves.
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session
from typing import List, Optional
from datetime import datetime
import logging

from advisor_crm.schemas import (
    ClientCreate,
    ClientUpdate,
    ClientStageUpdate,
    ClientResponse,
    ClientKpis,
)
from advisor_crm.deps import get_current_advisor, get_owned_or_404
from advisor_crm.db import get_session
from advisor_crm.models import Advisor, Client, Policy, Task
from advisor_crm.services.kpis import calculate_client_kpis

logger = logging.getLogger("advisor_crm")

router = APIRouter()


@router.get("/clients", response_model=List[ClientResponse])
async def list_clients(
    pipeline_stage: Optional[str] = None,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    """List the advisor's clients, newest first."""
    query = session.query(Client).filter(Client.advisor_id == advisor.id)
    if pipeline_stage:
        query = query.filter(Client.pipeline_stage == pipeline_stage)
    return query.order_by(Client.created_at.desc()).all()


@router.get("/clients/kpis", response_model=ClientKpis)
async def get_client_kpis(
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    clients = session.query(Client).filter(Client.advisor_id == advisor.id).all()
    policies = session.query(Policy).filter(Policy.advisor_id == advisor.id).all()
    return calculate_client_kpis(clients, policies)


@router.post("/clients", response_model=ClientResponse, status_code=201)
async def create_client(
    request: ClientCreate,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    client = Client(advisor_id=advisor.id, **request.model_dump())
    session.add(client)
    session.commit()
    session.refresh(client)

    logger.info(f"Client created | client_id={client.id} | stage={client.pipeline_stage}")
    return client


@router.get("/clients/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: str,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    return get_owned_or_404(session, Client, client_id, advisor, "Client")


@router.patch("/clients/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: str,
    request: ClientUpdate,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    client = get_owned_or_404(session, Client, client_id, advisor, "Client")

    for field, value in request.model_dump(exclude_unset=True).items():
        setattr(client, field, value)
    client.updated_at = datetime.utcnow()

    session.add(client)
    session.commit()
    session.refresh(client)
    return client


@router.put("/clients/{client_id}/stage", response_model=ClientResponse)
async def move_client_stage(
    client_id: str,
    request: ClientStageUpdate,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    """Move a client to another pipeline stage."""
    client = get_owned_or_404(session, Client, client_id, advisor, "Client")

    previous_stage = client.pipeline_stage
    client.pipeline_stage = request.pipeline_stage
    client.updated_at = datetime.utcnow()

    session.add(client)
    session.commit()
    session.refresh(client)

    logger.info(
        f"Pipeline stage changed | client_id={client.id} | "
        f"from={previous_stage} | to={client.pipeline_stage}"
    )
    return client


@router.delete("/clients/{client_id}", status_code=204)
async def delete_client(
    client_id: str,
    advisor: Advisor = Depends(get_current_advisor),
    session: Session = Depends(get_session)
):
    """
    Delete a client.

    The client's policies are deleted with it; its tasks are kept but
    unlinked.
    """
    client = get_owned_or_404(session, Client, client_id, advisor, "Client")

    policies = session.query(Policy).filter(Policy.client_id == client.id).all()
    for policy in policies:
        session.delete(policy)

    for task in session.query(Task).filter(Task.client_id == client.id).all():
        task.client_id = None
        session.add(task)

    session.delete(client)
    session.commit()

    logger.info(f"Client deleted | client_id={client_id} | policies_deleted={len(policies)}")
