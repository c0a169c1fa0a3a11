"""
Shared fixtures: in-memory database, authenticated client and a pinned clock.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"

from datetime import date

import pytest
from fastapi.testclient import TestClient

from advisor_crm.main import app
from advisor_crm.db import drop_db_and_tables
from advisor_crm.models import Policy
from advisor_crm.services import renewal

TODAY = date(2024, 6, 15)

AUTH_HEADERS = {"Authorization": "Bearer DEMO_ADVISOR_KEY"}


@pytest.fixture
def fixed_today(monkeypatch):
    """Pin the service clock to TODAY."""
    monkeypatch.setattr(renewal, "get_today", lambda: TODAY)
    return TODAY


@pytest.fixture
def client(fixed_today):
    """Test client over a freshly seeded database."""
    drop_db_and_tables()
    with TestClient(app) as test_client:
        yield test_client
    drop_db_and_tables()


@pytest.fixture
def auth_headers():
    return dict(AUTH_HEADERS)


def make_policy(**fields) -> Policy:
    """In-memory policy record with sensible defaults."""
    values = {
        "client_id": "client_1",
        "policy_name": "Test Policy",
        "policy_type": "life",
        "payment_structure_type": "regular_premium",
    }
    values.update(fields)
    return Policy(**values)
