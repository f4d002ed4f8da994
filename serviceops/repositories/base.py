from abc import ABC, abstractmethod

from serviceops.models.client import Client
from serviceops.models.facility import FacilityProfile, MonthlyOverride, SeasonalRule
from serviceops.models.service_item import ServiceLineItem


class ClientRepository(ABC):
    @abstractmethod
    def create(self, client: Client) -> Client: ...

    @abstractmethod
    def get_by_id(self, client_id: int, company_id: int) -> Client | None: ...

    @abstractmethod
    def get_by_uuid(self, uuid: str, company_id: int) -> Client | None: ...


class FacilityProfileRepository(ABC):
    @abstractmethod
    def create(self, profile: FacilityProfile) -> FacilityProfile: ...

    @abstractmethod
    def get_by_id(self, facility_id: int) -> FacilityProfile | None: ...

    @abstractmethod
    def get_by_uuid(self, uuid: str) -> FacilityProfile | None: ...

    @abstractmethod
    def list_for_client(self, client_id: int) -> list[FacilityProfile]: ...

    @abstractmethod
    def add_seasonal_rule(self, rule: SeasonalRule) -> SeasonalRule: ...

    @abstractmethod
    def upsert_override(self, override: MonthlyOverride) -> MonthlyOverride: ...

    @abstractmethod
    def delete_override(self, facility_id: int, year: int, month: int) -> bool: ...


class ServiceLineItemRepository(ABC):
    @abstractmethod
    def create(self, item: ServiceLineItem) -> ServiceLineItem: ...

    @abstractmethod
    def list_for_month(self, client_id: int, year: int, month: int) -> list[ServiceLineItem]: ...
