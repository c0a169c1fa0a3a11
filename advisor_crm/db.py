"""
Database configuration and session management.
"""

from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.pool import StaticPool
from typing import Generator
import logging

# Import all models to ensure they are registered with SQLModel
from advisor_crm.models import Advisor, Client, Policy, GlobalPolicy, Task
from advisor_crm.cache import config_cache
from advisor_crm.settings import DATABASE_URL

logger = logging.getLogger("advisor_crm")


def _create_engine(url: str):
    if url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection so every session sees the same in-memory database
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool
        )
    if url.startswith("sqlite"):
        return create_engine(url, echo=False, connect_args={"check_same_thread": False})
    return create_engine(url, echo=False)


# Create engine
engine = _create_engine(DATABASE_URL)


def create_db_and_tables():
    """Create database tables."""
    SQLModel.metadata.create_all(engine)


def drop_db_and_tables():
    """Drop all tables (used by the test suite)."""
    SQLModel.metadata.drop_all(engine)


def get_session() -> Generator[Session, None, None]:
    """Get database session."""
    with Session(engine) as session:
        yield session


def load_seed_data():
    """Load seed advisors and global policy templates into the database."""
    with Session(engine) as session:
        # Load advisors
        for advisor_data in config_cache.get_advisors():
            existing_advisor = session.query(Advisor).filter(Advisor.id == advisor_data["id"]).first()
            if not existing_advisor:
                session.add(Advisor(**advisor_data))
        session.commit()

        # Load templates once per advisor
        for template_data in config_cache.get_global_policies():
            existing_template = session.query(GlobalPolicy).filter(
                GlobalPolicy.advisor_id == template_data["advisor_id"],
                GlobalPolicy.policy_name == template_data["policy_name"]
            ).first()
            if not existing_template:
                session.add(GlobalPolicy(**template_data))

        session.commit()
        logger.info(
            f"Seed data loaded | advisors={len(config_cache.get_advisors())} | "
            f"global_policies={len(config_cache.get_global_policies())}"
        )


def initialize_database():
    """Initialize database with tables and seed data."""
    logger.info("Creating database tables...")
    create_db_and_tables()
    logger.info("Loading seed data...")
    load_seed_data()
    logger.info("Database initialization complete")
