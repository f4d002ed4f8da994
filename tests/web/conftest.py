"""Web test fixtures — TestClient with shared in-memory SQLite."""

from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event, text
from sqlalchemy.pool import StaticPool

from serviceops.constants import WEEKDAYS
from serviceops.models.client import Client
from serviceops.models.facility import FacilityProfile, TaxBehavior
from serviceops.repositories.sqlalchemy import (
    SQLAlchemyClientRepository,
    SQLAlchemyFacilityProfileRepository,
)
from tests.conftest import SCHEMA_DDL

COMPANY_ID = 1


def _make_test_engine():
    """Create a fresh in-memory SQLite engine with shared connection pool."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    with engine.connect() as conn:
        for statement in SCHEMA_DDL.strip().split(";"):
            stmt = statement.strip()
            if stmt:
                conn.execute(text(stmt))
        conn.commit()

    return engine


def create_client_in_db(engine, **overrides) -> Client:
    """Create a client in the test DB. Shared helper for web route tests."""
    defaults = dict(company_id=COMPANY_ID, name="Acme Corp", tax_rate=Decimal("0.0825"))
    defaults.update(overrides)
    with engine.connect() as conn:
        return SQLAlchemyClientRepository(conn).create(Client(**defaults))


def create_facility_in_db(engine, client_id: int, **overrides) -> FacilityProfile:
    defaults = dict(
        client_id=client_id,
        location_id="LOC-1",
        location_name="Main Office",
        normal_frequency_per_week=5,
        normal_days_of_week=list(WEEKDAYS),
        default_monthly_rate=Decimal("1000.00"),
        category="Office",
        tax_behavior=TaxBehavior.TAXABLE,
    )
    defaults.update(overrides)
    with engine.connect() as conn:
        return SQLAlchemyFacilityProfileRepository(conn).create(FacilityProfile(**defaults))


@pytest.fixture(autouse=True)
def web_test_db(monkeypatch):
    """Set up in-memory DB and patch the web app to use it."""
    engine = _make_test_engine()

    import web.deps as deps_module

    monkeypatch.setattr(deps_module, "get_engine", lambda: engine)

    import web.app as app_module

    monkeypatch.setattr(app_module, "initialize_db", lambda: None)

    yield engine

    engine.dispose()


@pytest.fixture()
def test_engine(web_test_db):
    """Expose the test engine for helpers that need direct DB access."""
    return web_test_db


@pytest.fixture()
def client():
    from starlette.testclient import TestClient

    from web.app import app

    return TestClient(app)


@pytest.fixture()
def headers() -> dict[str, str]:
    return {"X-Company-Id": str(COMPANY_ID)}
