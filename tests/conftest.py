"""Root conftest — in-memory SQLite engine and fixtures for the full schema."""

from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import Connection, create_engine, event, text
from sqlalchemy.engine import Engine

from serviceops.constants import WEEKDAYS
from serviceops.models.client import Client
from serviceops.models.facility import FacilityProfile, FacilityStatus, TaxBehavior
from serviceops.models.service_item import ServiceLineItem

# Matches Alembic head: 3f1c9a2b7d40 (initial schema)
SCHEMA_DDL = """
CREATE TABLE clients (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    company_id INTEGER NOT NULL,
    name TEXT NOT NULL,
    tax_exempt TINYINT NOT NULL DEFAULT 0,
    tax_rate VARCHAR(32),
    payment_terms VARCHAR(20) NOT NULL DEFAULT 'NET_30',
    billing_display_mode VARCHAR(20) NOT NULL DEFAULT 'itemized',
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
);

CREATE TABLE facility_profiles (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    client_id INTEGER NOT NULL REFERENCES clients(id) ON DELETE CASCADE,
    location_id VARCHAR(255) NOT NULL,
    location_name VARCHAR(255) NOT NULL,
    status VARCHAR(20) NOT NULL DEFAULT 'ACTIVE',
    normal_frequency_per_week INTEGER NOT NULL DEFAULT 0,
    normal_days_of_week VARCHAR(32) NOT NULL DEFAULT '',
    default_monthly_rate VARCHAR(32) NOT NULL DEFAULT '0',
    category VARCHAR(100),
    tax_behavior VARCHAR(20) NOT NULL DEFAULT 'INHERIT_CLIENT',
    seasonal_rules_enabled TINYINT NOT NULL DEFAULT 1,
    sort_order INTEGER NOT NULL DEFAULT 0,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    UNIQUE(client_id, location_id)
);

CREATE TABLE seasonal_rules (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    facility_profile_id INTEGER NOT NULL REFERENCES facility_profiles(id) ON DELETE CASCADE,
    active_months VARCHAR(64),
    paused_months VARCHAR(64),
    effective_year_start INTEGER,
    effective_year_end INTEGER,
    is_active TINYINT NOT NULL DEFAULT 1,
    notes TEXT NOT NULL DEFAULT '',
    created_at DATETIME NOT NULL
);

CREATE TABLE monthly_overrides (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    facility_profile_id INTEGER NOT NULL REFERENCES facility_profiles(id) ON DELETE CASCADE,
    year INTEGER NOT NULL,
    month INTEGER NOT NULL,
    override_status VARCHAR(20),
    override_frequency INTEGER,
    override_days_of_week VARCHAR(32),
    override_rate VARCHAR(32),
    override_notes TEXT,
    pause_start_day INTEGER,
    pause_end_day INTEGER,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    UNIQUE(facility_profile_id, year, month)
);

CREATE TABLE service_line_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    client_id INTEGER NOT NULL REFERENCES clients(id) ON DELETE CASCADE,
    facility_profile_id INTEGER REFERENCES facility_profiles(id) ON DELETE SET NULL,
    year INTEGER NOT NULL,
    month INTEGER NOT NULL,
    description TEXT NOT NULL,
    quantity VARCHAR(32) NOT NULL DEFAULT '1',
    unit_rate VARCHAR(32) NOT NULL,
    tax_behavior VARCHAR(20) NOT NULL DEFAULT 'INHERIT_CLIENT',
    performed_date VARCHAR(10),
    notes TEXT,
    status VARCHAR(20) NOT NULL DEFAULT 'pending',
    created_at DATETIME NOT NULL
)
"""


@pytest.fixture()
def db_engine() -> Engine:
    engine = create_engine("sqlite:///:memory:")

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    return engine


@pytest.fixture()
def db_connection(db_engine: Engine) -> Connection:
    conn = db_engine.connect()
    for statement in SCHEMA_DDL.strip().split(";"):
        stmt = statement.strip()
        if stmt:
            conn.execute(text(stmt))
    conn.commit()
    yield conn
    conn.close()


def _sample_client(**overrides) -> Client:
    defaults = dict(
        id=1,
        uuid="01JCLIENT0000000000000000A",
        company_id=1,
        name="Acme Corp",
        tax_rate=Decimal("0.0825"),
    )
    defaults.update(overrides)
    return Client(**defaults)


def _sample_facility(**overrides) -> FacilityProfile:
    defaults = dict(
        id=10,
        client_id=1,
        location_id="LOC-1",
        location_name="Main Office",
        status=FacilityStatus.ACTIVE,
        normal_frequency_per_week=5,
        normal_days_of_week=list(WEEKDAYS),
        default_monthly_rate=Decimal("1000.00"),
        category="Office",
        tax_behavior=TaxBehavior.TAXABLE,
    )
    defaults.update(overrides)
    return FacilityProfile(**defaults)


def _sample_service_item(**overrides) -> ServiceLineItem:
    defaults = dict(
        id=100,
        client_id=1,
        year=2027,
        month=4,
        description="Carpet shampoo",
        quantity=Decimal("2"),
        unit_rate=Decimal("75.00"),
        tax_behavior=TaxBehavior.TAXABLE,
    )
    defaults.update(overrides)
    return ServiceLineItem(**defaults)


@pytest.fixture()
def sample_client():
    return _sample_client


@pytest.fixture()
def sample_facility():
    return _sample_facility


@pytest.fixture()
def sample_service_item():
    return _sample_service_item
