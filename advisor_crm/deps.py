"""
Dependencies for authentication and record ownership.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Type, TypeVar
from sqlmodel import Session, SQLModel
from advisor_crm.db import get_session
from advisor_crm.models import Advisor

security = HTTPBearer()

ModelT = TypeVar("ModelT", bound=SQLModel)


async def get_current_advisor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: Session = Depends(get_session)
) -> Advisor:
    """
    Extract and validate the advisor API key from the Authorization header.
    Returns the advisor owning every record touched by the request.
    """
    api_key = credentials.credentials

    # Look up advisor in database
    advisor = session.query(Advisor).filter(Advisor.api_key == api_key).first()

    if not advisor:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key"
        )

    return advisor


def get_owned_or_404(
    session: Session,
    model: Type[ModelT],
    record_id: str,
    advisor: Advisor,
    label: str
) -> ModelT:
    """
    Load a record belonging to the advisor.

    Records owned by another advisor are reported as missing.
    """
    record = session.query(model).filter(
        model.id == record_id,
        model.advisor_id == advisor.id
    ).first()

    if not record:
        raise HTTPException(status_code=404, detail=f"{label} not found")

    return record
