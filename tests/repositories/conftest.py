import pytest
from sqlalchemy import Connection

from serviceops.repositories.sqlalchemy import (
    SQLAlchemyClientRepository,
    SQLAlchemyFacilityProfileRepository,
    SQLAlchemyServiceLineItemRepository,
)


@pytest.fixture()
def client_repo(db_connection: Connection) -> SQLAlchemyClientRepository:
    return SQLAlchemyClientRepository(db_connection)


@pytest.fixture()
def facility_repo(db_connection: Connection) -> SQLAlchemyFacilityProfileRepository:
    return SQLAlchemyFacilityProfileRepository(db_connection)


@pytest.fixture()
def service_item_repo(db_connection: Connection) -> SQLAlchemyServiceLineItemRepository:
    return SQLAlchemyServiceLineItemRepository(db_connection)


@pytest.fixture()
def stored_client(client_repo, sample_client):
    return client_repo.create(sample_client(id=None, uuid=""))
