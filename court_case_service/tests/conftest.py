# Shared fixtures: an in-memory MongoDB, a fixed identity directory and a case builder
import datetime
from typing import Dict, Optional

import pytest
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient

from court_case_service.app.models.case_db import CaseDB, PartyDB
from court_case_service.app.service.interfaces.identity_client import AbstractIdentityClient
from court_case_service.app.service.models import (
    CaseType, CourtType, PartyRole, Principal, ResolvedPrincipal, Role,
)
from court_case_service.infrastructure.database.case_store import ensure_case_indexes

FIXED_NOW = datetime.datetime(2025, 3, 14, 9, 30, tzinfo=datetime.timezone.utc)


class InMemoryIdentityClient(AbstractIdentityClient):
    def __init__(self, principals: Dict[str, ResolvedPrincipal]):
        self.principals = principals
        self.lookups = []

    async def resolve(self, principal_id: str) -> Optional[ResolvedPrincipal]:
        self.lookups.append(principal_id)
        return self.principals.get(principal_id)


@pytest_asyncio.fixture
async def mongo_db():
    client = AsyncMongoMockClient()
    db = client["court_case_test_db"]
    await ensure_case_indexes(db)
    return db


@pytest.fixture
def identity_client():
    principals = [
        ResolvedPrincipal(id="reg-1", role="registrar", display_name="Meera Iyer"),
        ResolvedPrincipal(id="judge-1", role="judge", display_name="Asha Rao"),
        ResolvedPrincipal(id="judge-2", role="judge", display_name="Vikram Sen"),
        ResolvedPrincipal(id="lawyer-1", role="lawyer", display_name="Priya Nair"),
        ResolvedPrincipal(id="lawyer-2", role="lawyer", display_name="Rohan Das"),
        ResolvedPrincipal(id="user-1", role="user", display_name="Anil Kumar"),
        ResolvedPrincipal(id="user-2", role="user", display_name="Sunita Roy"),
        ResolvedPrincipal(id="user-3", role="user", display_name="Kiran Shah"),
        ResolvedPrincipal(id="clerk-9", role="clerk", display_name="Out of directory role"),
    ]
    return InMemoryIdentityClient({p.id: p for p in principals})


@pytest.fixture
def registrar():
    return Principal(id="reg-1", role=Role.REGISTRAR)


@pytest.fixture
def judge():
    return Principal(id="judge-1", role=Role.JUDGE)


@pytest.fixture
def other_judge():
    return Principal(id="judge-2", role=Role.JUDGE)


@pytest.fixture
def lawyer():
    return Principal(id="lawyer-1", role=Role.LAWYER)


@pytest.fixture
def litigant():
    return Principal(id="user-1", role=Role.USER)


@pytest.fixture
def case_factory():
    """Builds a CaseDB with a petitioner (user-1, lawyer-1) and a respondent (user-2)."""
    counter = {"n": 0}

    def _make(**overrides) -> CaseDB:
        counter["n"] += 1
        fields = dict(
            case_number=f"DC/2025/{counter['n']:04d}",
            registration_date=FIXED_NOW + datetime.timedelta(days=counter["n"]),
            registered_by="reg-1",
            title=f"Boundary dispute {counter['n']}",
            description="Dispute over the eastern boundary wall.",
            case_type=CaseType.CIVIL,
            court_type=CourtType.DISTRICT_COURT,
            parties=[
                PartyDB(user_id="user-1", role=PartyRole.PETITIONER, assigned_lawyer_id="lawyer-1", is_main_party=True),
                PartyDB(user_id="user-2", role=PartyRole.RESPONDENT),
            ],
        )
        fields.update(overrides)
        return CaseDB(**fields)

    return _make
