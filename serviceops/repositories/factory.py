from serviceops.repositories.base import (
    ClientRepository,
    FacilityProfileRepository,
    ServiceLineItemRepository,
)


def get_client_repository() -> ClientRepository:
    from serviceops.db import get_connection
    from serviceops.repositories.sqlalchemy import SQLAlchemyClientRepository

    return SQLAlchemyClientRepository(get_connection())


def get_facility_repository() -> FacilityProfileRepository:
    from serviceops.db import get_connection
    from serviceops.repositories.sqlalchemy import SQLAlchemyFacilityProfileRepository

    return SQLAlchemyFacilityProfileRepository(get_connection())


def get_service_item_repository() -> ServiceLineItemRepository:
    from serviceops.db import get_connection
    from serviceops.repositories.sqlalchemy import SQLAlchemyServiceLineItemRepository

    return SQLAlchemyServiceLineItemRepository(get_connection())
