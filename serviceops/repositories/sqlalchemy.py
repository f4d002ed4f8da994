from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Connection, text
from sqlalchemy.engine import RowMapping
from ulid import ULID

from serviceops.engine.money import to_decimal
from serviceops.models.client import Client, PaymentTerms
from serviceops.models.facility import (
    FacilityProfile,
    FacilityStatus,
    MonthlyOverride,
    SeasonalRule,
    TaxBehavior,
)
from serviceops.models.service_item import ServiceItemStatus, ServiceLineItem
from serviceops.repositories.base import (
    ClientRepository,
    FacilityProfileRepository,
    ServiceLineItemRepository,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _encode_ints(values: list[int] | None) -> str | None:
    if values is None:
        return None
    return ",".join(str(v) for v in sorted(set(values)))


def _decode_ints(raw: str | None) -> list[int] | None:
    if raw is None:
        return None
    return [int(part) for part in raw.split(",") if part.strip()]


def _money(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def _optional_decimal(value: object) -> Decimal | None:
    return None if value is None else to_decimal(value)


def _in_clause(prefix: str, ids: list[int]) -> tuple[str, dict[str, int]]:
    placeholders = ", ".join(f":{prefix}{i}" for i in range(len(ids)))
    params = {f"{prefix}{i}": value for i, value in enumerate(ids)}
    return placeholders, params


class SQLAlchemyClientRepository(ClientRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def create(self, client: Client) -> Client:
        now = _now()
        result = self.conn.execute(
            text(
                "INSERT INTO clients (uuid, company_id, name, tax_exempt, tax_rate, payment_terms, "
                "billing_display_mode, created_at, updated_at) "
                "VALUES (:uuid, :company_id, :name, :tax_exempt, :tax_rate, :payment_terms, "
                ":billing_display_mode, :created_at, :updated_at)"
            ),
            {
                "uuid": str(ULID()),
                "company_id": client.company_id,
                "name": client.name,
                "tax_exempt": client.tax_exempt,
                "tax_rate": _money(client.tax_rate),
                "payment_terms": client.payment_terms.value,
                "billing_display_mode": client.billing_display_mode,
                "created_at": now,
                "updated_at": now,
            },
        )
        client_id = result.lastrowid
        self.conn.commit()
        created = self.get_by_id(client_id, client.company_id)
        if created is None:
            raise RuntimeError(f"Failed to retrieve client after create (id={client_id})")
        return created

    @staticmethod
    def _build_client(row: RowMapping) -> Client:
        return Client(
            id=row["id"],
            uuid=row["uuid"],
            company_id=row["company_id"],
            name=row["name"],
            tax_exempt=bool(row["tax_exempt"]),
            tax_rate=_optional_decimal(row["tax_rate"]),
            payment_terms=PaymentTerms(row["payment_terms"]),
            billing_display_mode=row["billing_display_mode"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def get_by_id(self, client_id: int, company_id: int) -> Client | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM clients WHERE id = :id AND company_id = :company_id"),
                {"id": client_id, "company_id": company_id},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._build_client(row)

    def get_by_uuid(self, uuid: str, company_id: int) -> Client | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM clients WHERE uuid = :uuid AND company_id = :company_id"),
                {"uuid": uuid, "company_id": company_id},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._build_client(row)


class SQLAlchemyFacilityProfileRepository(FacilityProfileRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def create(self, profile: FacilityProfile) -> FacilityProfile:
        now = _now()
        result = self.conn.execute(
            text(
                "INSERT INTO facility_profiles (uuid, client_id, location_id, location_name, status, "
                "normal_frequency_per_week, normal_days_of_week, default_monthly_rate, category, "
                "tax_behavior, seasonal_rules_enabled, sort_order, created_at, updated_at) "
                "VALUES (:uuid, :client_id, :location_id, :location_name, :status, "
                ":normal_frequency_per_week, :normal_days_of_week, :default_monthly_rate, :category, "
                ":tax_behavior, :seasonal_rules_enabled, :sort_order, :created_at, :updated_at)"
            ),
            {
                "uuid": str(ULID()),
                "client_id": profile.client_id,
                "location_id": profile.location_id or profile.location_name,
                "location_name": profile.location_name,
                "status": profile.status.value,
                "normal_frequency_per_week": profile.normal_frequency_per_week,
                "normal_days_of_week": _encode_ints(profile.normal_days_of_week),
                "default_monthly_rate": _money(profile.default_monthly_rate),
                "category": profile.category,
                "tax_behavior": profile.tax_behavior.value,
                "seasonal_rules_enabled": profile.seasonal_rules_enabled,
                "sort_order": profile.sort_order,
                "created_at": now,
                "updated_at": now,
            },
        )
        facility_id = result.lastrowid
        self.conn.commit()
        for rule in profile.seasonal_rules:
            self.add_seasonal_rule(rule.model_copy(update={"facility_profile_id": facility_id}))
        for override in profile.monthly_overrides:
            self.upsert_override(override.model_copy(update={"facility_profile_id": facility_id}))
        created = self.get_by_id(facility_id)
        if created is None:
            raise RuntimeError(f"Failed to retrieve facility profile after create (id={facility_id})")
        return created

    @staticmethod
    def _build_rule(row: RowMapping) -> SeasonalRule:
        return SeasonalRule(
            id=row["id"],
            facility_profile_id=row["facility_profile_id"],
            active_months=_decode_ints(row["active_months"]) or [],
            paused_months=_decode_ints(row["paused_months"]) or [],
            effective_year_start=row["effective_year_start"],
            effective_year_end=row["effective_year_end"],
            is_active=bool(row["is_active"]),
            notes=row["notes"],
            created_at=row["created_at"],
        )

    @staticmethod
    def _build_override(row: RowMapping) -> MonthlyOverride:
        return MonthlyOverride(
            id=row["id"],
            uuid=row["uuid"],
            facility_profile_id=row["facility_profile_id"],
            year=row["year"],
            month=row["month"],
            override_status=FacilityStatus(row["override_status"]) if row["override_status"] else None,
            override_frequency=row["override_frequency"],
            override_days_of_week=_decode_ints(row["override_days_of_week"]),
            override_rate=_optional_decimal(row["override_rate"]),
            override_notes=row["override_notes"],
            pause_start_day=row["pause_start_day"],
            pause_end_day=row["pause_end_day"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _build_profile(
        row: RowMapping,
        rule_rows: list[RowMapping],
        override_rows: list[RowMapping],
    ) -> FacilityProfile:
        return FacilityProfile(
            id=row["id"],
            uuid=row["uuid"],
            client_id=row["client_id"],
            location_id=row["location_id"],
            location_name=row["location_name"],
            status=FacilityStatus(row["status"]),
            normal_frequency_per_week=row["normal_frequency_per_week"],
            normal_days_of_week=_decode_ints(row["normal_days_of_week"]) or [],
            default_monthly_rate=to_decimal(row["default_monthly_rate"]),
            category=row["category"],
            tax_behavior=TaxBehavior(row["tax_behavior"]),
            seasonal_rules_enabled=bool(row["seasonal_rules_enabled"]),
            sort_order=row["sort_order"],
            seasonal_rules=[SQLAlchemyFacilityProfileRepository._build_rule(r) for r in rule_rows],
            monthly_overrides=[SQLAlchemyFacilityProfileRepository._build_override(r) for r in override_rows],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _build_profiles_from_rows(self, rows: list[RowMapping]) -> list[FacilityProfile]:
        if not rows:
            return []
        placeholders, params = _in_clause("fid", [row["id"] for row in rows])
        rule_rows = (
            self.conn.execute(
                text(
                    f"SELECT * FROM seasonal_rules WHERE facility_profile_id IN ({placeholders}) "
                    "ORDER BY created_at, id"
                ),
                params,
            )
            .mappings()
            .fetchall()
        )
        override_rows = (
            self.conn.execute(
                text(
                    f"SELECT * FROM monthly_overrides WHERE facility_profile_id IN ({placeholders}) "
                    "ORDER BY year, month"
                ),
                params,
            )
            .mappings()
            .fetchall()
        )
        rules_by_facility: dict[int, list[RowMapping]] = {}
        for rule_row in rule_rows:
            rules_by_facility.setdefault(rule_row["facility_profile_id"], []).append(rule_row)
        overrides_by_facility: dict[int, list[RowMapping]] = {}
        for override_row in override_rows:
            overrides_by_facility.setdefault(override_row["facility_profile_id"], []).append(override_row)
        return [
            self._build_profile(row, rules_by_facility.get(row["id"], []), overrides_by_facility.get(row["id"], []))
            for row in rows
        ]

    def get_by_id(self, facility_id: int) -> FacilityProfile | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM facility_profiles WHERE id = :id"),
                {"id": facility_id},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._build_profiles_from_rows([row])[0]

    def get_by_uuid(self, uuid: str) -> FacilityProfile | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM facility_profiles WHERE uuid = :uuid"),
                {"uuid": uuid},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._build_profiles_from_rows([row])[0]

    def list_for_client(self, client_id: int) -> list[FacilityProfile]:
        rows = (
            self.conn.execute(
                text("SELECT * FROM facility_profiles WHERE client_id = :client_id ORDER BY sort_order, created_at, id"),
                {"client_id": client_id},
            )
            .mappings()
            .fetchall()
        )
        return self._build_profiles_from_rows(list(rows))

    def add_seasonal_rule(self, rule: SeasonalRule) -> SeasonalRule:
        result = self.conn.execute(
            text(
                "INSERT INTO seasonal_rules (facility_profile_id, active_months, paused_months, "
                "effective_year_start, effective_year_end, is_active, notes, created_at) "
                "VALUES (:facility_profile_id, :active_months, :paused_months, "
                ":effective_year_start, :effective_year_end, :is_active, :notes, :created_at)"
            ),
            {
                "facility_profile_id": rule.facility_profile_id,
                "active_months": _encode_ints(rule.active_months),
                "paused_months": _encode_ints(rule.paused_months),
                "effective_year_start": rule.effective_year_start,
                "effective_year_end": rule.effective_year_end,
                "is_active": rule.is_active,
                "notes": rule.notes,
                "created_at": _now(),
            },
        )
        rule_id = result.lastrowid
        self.conn.commit()
        row = (
            self.conn.execute(text("SELECT * FROM seasonal_rules WHERE id = :id"), {"id": rule_id})
            .mappings()
            .fetchone()
        )
        if row is None:
            raise RuntimeError(f"Failed to retrieve seasonal rule after create (id={rule_id})")
        return self._build_rule(row)

    def _get_override(self, facility_id: int, year: int, month: int) -> MonthlyOverride | None:
        row = (
            self.conn.execute(
                text(
                    "SELECT * FROM monthly_overrides "
                    "WHERE facility_profile_id = :fid AND year = :year AND month = :month"
                ),
                {"fid": facility_id, "year": year, "month": month},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._build_override(row)

    def upsert_override(self, override: MonthlyOverride) -> MonthlyOverride:
        if override.facility_profile_id is None:
            raise ValueError("Cannot store an override without a facility_profile_id")
        now = _now()
        params = {
            "fid": override.facility_profile_id,
            "year": override.year,
            "month": override.month,
            "override_status": override.override_status.value if override.override_status else None,
            "override_frequency": override.override_frequency,
            "override_days_of_week": _encode_ints(override.override_days_of_week),
            "override_rate": _money(override.override_rate),
            "override_notes": override.override_notes,
            "pause_start_day": override.pause_start_day,
            "pause_end_day": override.pause_end_day,
            "updated_at": now,
        }
        existing = self._get_override(override.facility_profile_id, override.year, override.month)
        if existing is None:
            self.conn.execute(
                text(
                    "INSERT INTO monthly_overrides (uuid, facility_profile_id, year, month, override_status, "
                    "override_frequency, override_days_of_week, override_rate, override_notes, "
                    "pause_start_day, pause_end_day, created_at, updated_at) "
                    "VALUES (:uuid, :fid, :year, :month, :override_status, "
                    ":override_frequency, :override_days_of_week, :override_rate, :override_notes, "
                    ":pause_start_day, :pause_end_day, :created_at, :updated_at)"
                ),
                {**params, "uuid": str(ULID()), "created_at": now},
            )
        else:
            self.conn.execute(
                text(
                    "UPDATE monthly_overrides SET override_status = :override_status, "
                    "override_frequency = :override_frequency, override_days_of_week = :override_days_of_week, "
                    "override_rate = :override_rate, override_notes = :override_notes, "
                    "pause_start_day = :pause_start_day, pause_end_day = :pause_end_day, "
                    "updated_at = :updated_at "
                    "WHERE facility_profile_id = :fid AND year = :year AND month = :month"
                ),
                params,
            )
        self.conn.commit()
        stored = self._get_override(override.facility_profile_id, override.year, override.month)
        if stored is None:
            raise RuntimeError(
                f"Failed to retrieve override after upsert (facility={override.facility_profile_id}, "
                f"period={override.year}-{override.month:02d})"
            )
        return stored

    def delete_override(self, facility_id: int, year: int, month: int) -> bool:
        result = self.conn.execute(
            text(
                "DELETE FROM monthly_overrides WHERE facility_profile_id = :fid AND year = :year AND month = :month"
            ),
            {"fid": facility_id, "year": year, "month": month},
        )
        self.conn.commit()
        return result.rowcount > 0


class SQLAlchemyServiceLineItemRepository(ServiceLineItemRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def create(self, item: ServiceLineItem) -> ServiceLineItem:
        result = self.conn.execute(
            text(
                "INSERT INTO service_line_items (uuid, client_id, facility_profile_id, year, month, "
                "description, quantity, unit_rate, tax_behavior, performed_date, notes, status, created_at) "
                "VALUES (:uuid, :client_id, :facility_profile_id, :year, :month, "
                ":description, :quantity, :unit_rate, :tax_behavior, :performed_date, :notes, :status, :created_at)"
            ),
            {
                "uuid": str(ULID()),
                "client_id": item.client_id,
                "facility_profile_id": item.facility_profile_id,
                "year": item.year,
                "month": item.month,
                "description": item.description,
                "quantity": _money(item.quantity),
                "unit_rate": _money(item.unit_rate),
                "tax_behavior": item.tax_behavior.value,
                "performed_date": item.performed_date.isoformat() if item.performed_date else None,
                "notes": item.notes,
                "status": item.status.value,
                "created_at": _now(),
            },
        )
        item_id = result.lastrowid
        self.conn.commit()
        row = (
            self.conn.execute(text("SELECT * FROM service_line_items WHERE id = :id"), {"id": item_id})
            .mappings()
            .fetchone()
        )
        if row is None:
            raise RuntimeError(f"Failed to retrieve service line item after create (id={item_id})")
        return self._build_item(row)

    @staticmethod
    def _build_item(row: RowMapping) -> ServiceLineItem:
        return ServiceLineItem(
            id=row["id"],
            uuid=row["uuid"],
            client_id=row["client_id"],
            facility_profile_id=row["facility_profile_id"],
            year=row["year"],
            month=row["month"],
            description=row["description"],
            quantity=to_decimal(row["quantity"]),
            unit_rate=to_decimal(row["unit_rate"]),
            tax_behavior=TaxBehavior(row["tax_behavior"]),
            performed_date=row["performed_date"],
            notes=row["notes"],
            status=ServiceItemStatus(row["status"]),
            created_at=row["created_at"],
        )

    def list_for_month(self, client_id: int, year: int, month: int) -> list[ServiceLineItem]:
        rows = (
            self.conn.execute(
                text(
                    "SELECT * FROM service_line_items "
                    "WHERE client_id = :client_id AND year = :year AND month = :month "
                    "ORDER BY performed_date, id"
                ),
                {"client_id": client_id, "year": year, "month": month},
            )
            .mappings()
            .fetchall()
        )
        return [self._build_item(row) for row in rows]
