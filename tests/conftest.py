import os

os.environ.setdefault("JWT_SECRET", "test-secret-for-ledger-tests")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models.out_manage  # noqa: F401
import app.models.system_log  # noqa: F401
from app.models.codes import CodeEntry
from app.services.audit_service import get_audit_sink
from db import get_db
from main import app
from models import Base, Staff
from security import create_access_token

TENANT = "SSMS"
OTHER_TENANT = "ACME"


class RecordingSink:
    def __init__(self) -> None:
        self.events = []

    def record(self, event) -> None:
        self.events.append(event)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded(db_session):
    db_session.add_all(
        [
            Staff(tenant_id=TENANT, staff_id="mgr001", name="Kim Manager"),
            Staff(tenant_id=TENANT, staff_id="dev001", name="Lee Developer"),
            Staff(tenant_id=TENANT, staff_id="dev002", name="Park Designer"),
            Staff(tenant_id=TENANT, staff_id="gone01", name="Former", is_active=False),
            Staff(tenant_id=OTHER_TENANT, staff_id="dev001", name="Other Tenant Dev"),
            CodeEntry(tenant_id=TENANT, group_code="GNT_CD", code="10", name="Half Day AM", sort_order=1),
            CodeEntry(tenant_id=TENANT, group_code="GNT_CD", code="20", name="Half Day PM", sort_order=2),
            CodeEntry(tenant_id=TENANT, group_code="GNT_CD", code="30", name="Full Day", sort_order=3),
            CodeEntry(
                tenant_id=TENANT, group_code="GNT_CD", code="99", name="Retired", sort_order=9,
                is_active=False,
            ),
            CodeEntry(tenant_id=TENANT, group_code="STATUS_CD", code="10", name="Requested", sort_order=1),
            CodeEntry(tenant_id=TENANT, group_code="STATUS_CD", code="20", name="Approved", sort_order=2),
            CodeEntry(tenant_id=TENANT, group_code="STATUS_CD", code="30", name="Rejected", sort_order=3),
        ]
    )
    db_session.commit()
    return db_session


@pytest.fixture
def audit_sink():
    return RecordingSink()


def auth_headers(staff_id: str = "mgr001", tenant_id: str = TENANT) -> dict:
    token = create_access_token(subject=staff_id, tenant_id=tenant_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(seeded, audit_sink):
    def _get_db():
        yield seeded

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_audit_sink] = lambda: audit_sink
    try:
        with TestClient(app) as test_client:
            test_client.headers.update(auth_headers())
            yield test_client
    finally:
        app.dependency_overrides.clear()
