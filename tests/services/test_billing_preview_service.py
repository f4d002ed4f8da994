from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from serviceops.errors import InvalidArgumentError, NotFoundError
from serviceops.models.facility import MonthlyOverride
from serviceops.services.billing_preview_service import BillingPreviewService


class TestBillingPreviewService:
    def setup_method(self):
        self.client_repo = MagicMock()
        self.facility_repo = MagicMock()
        self.service_item_repo = MagicMock()
        self.service = BillingPreviewService(self.client_repo, self.facility_repo, self.service_item_repo)
        self.service_item_repo.list_for_month.return_value = []

    def test_get_client_not_found(self):
        self.client_repo.get_by_id.return_value = None
        with pytest.raises(NotFoundError, match="Client not found"):
            self.service.get_client(1, 1)

    def test_get_client_by_uuid(self, sample_client):
        self.client_repo.get_by_uuid.return_value = sample_client()
        result = self.service.get_client_by_uuid("abc", 1)
        assert result.name == "Acme Corp"
        self.client_repo.get_by_uuid.assert_called_once_with("abc", 1)

    def test_get_client_by_uuid_not_found(self):
        self.client_repo.get_by_uuid.return_value = None
        with pytest.raises(NotFoundError):
            self.service.get_client_by_uuid("abc", 2)

    def test_tax_rate_falls_back_to_default(self, sample_client):
        with patch("serviceops.services.billing_preview_service.settings") as mock_settings:
            mock_settings.default_tax_rate = Decimal("0.05")
            assert BillingPreviewService.tax_rate_for(sample_client(tax_rate=None)) == Decimal("0.05")

    def test_tax_rate_from_client(self, sample_client):
        assert BillingPreviewService.tax_rate_for(sample_client()) == Decimal("0.0825")

    def test_compute_preview_with_previous_month(self, sample_client, sample_facility):
        self.client_repo.get_by_id.return_value = sample_client()
        self.facility_repo.list_for_client.return_value = [sample_facility()]

        preview = self.service.compute_preview(1, 1, 2027, 4)

        assert preview.total == Decimal("1082.50")
        # March 2027 has 23 weekdays, same full-month rate
        assert preview.previous_month_total == Decimal("1082.50")
        assert preview.explanation.delta_amount == Decimal("0.00")
        assert preview.explanation.delta_reason is None
        assert self.facility_repo.list_for_client.call_count == 2

    def test_previous_month_reflects_its_own_override(self, sample_client, sample_facility):
        january_pause = MonthlyOverride(year=2027, month=1, pause_start_day=11, pause_end_day=15)
        self.client_repo.get_by_id.return_value = sample_client()
        self.facility_repo.list_for_client.return_value = [sample_facility(monthly_overrides=[january_pause])]

        preview = self.service.compute_preview(1, 1, 2027, 2)

        assert preview.total == Decimal("1082.50")
        # January 2027: 16 of 21 weekdays active -> 761.90 + 62.86 tax
        assert preview.previous_month_total == Decimal("824.76")
        assert preview.explanation.delta_amount == Decimal("257.74")
        assert preview.explanation.delta_reason == "$257.74 increase from January"

    def test_history_depth_zero_skips_comparison(self, sample_client, sample_facility):
        self.client_repo.get_by_id.return_value = sample_client()
        self.facility_repo.list_for_client.return_value = [sample_facility()]

        preview = self.service.compute_preview(1, 1, 2027, 4, history_depth=0)

        assert preview.previous_month_total is None
        self.facility_repo.list_for_client.assert_called_once_with(1)

    def test_previous_month_only_one_level_deep(self, sample_client, sample_facility):
        self.client_repo.get_by_id.return_value = sample_client()
        self.facility_repo.list_for_client.return_value = [sample_facility()]

        self.service.compute_preview(1, 1, 2027, 4, history_depth=1)

        periods = [c.args[1:] for c in self.service_item_repo.list_for_month.call_args_list]
        assert periods == [(2027, 4), (2027, 3)]

    def test_previous_month_wraps_year(self, sample_client, sample_facility):
        self.client_repo.get_by_id.return_value = sample_client()
        self.facility_repo.list_for_client.return_value = [sample_facility()]

        self.service.compute_preview(1, 1, 2027, 1)

        periods = [c.args[1:] for c in self.service_item_repo.list_for_month.call_args_list]
        assert periods == [(2027, 1), (2026, 12)]

    def test_previous_month_failure_degrades(self, sample_client, sample_facility):
        self.client_repo.get_by_id.return_value = sample_client()
        self.facility_repo.list_for_client.side_effect = [[sample_facility()], RuntimeError("db down")]

        preview = self.service.compute_preview(1, 1, 2027, 4)

        assert preview.total == Decimal("1082.50")
        assert preview.previous_month_total is None
        assert preview.explanation.delta_amount is None

    def test_client_not_found_aborts(self):
        self.client_repo.get_by_id.return_value = None
        with pytest.raises(NotFoundError):
            self.service.compute_preview(1, 1, 2027, 4)
        self.facility_repo.list_for_client.assert_not_called()

    def test_invalid_month(self):
        with pytest.raises(InvalidArgumentError):
            self.service.compute_preview(1, 1, 2027, 13)
        self.client_repo.get_by_id.assert_not_called()

    def test_service_items_loaded_for_month(self, sample_client, sample_facility, sample_service_item):
        self.client_repo.get_by_id.return_value = sample_client()
        self.facility_repo.list_for_client.return_value = [sample_facility()]
        self.service_item_repo.list_for_month.return_value = [sample_service_item()]

        preview = self.service.compute_preview(1, 1, 2027, 4, history_depth=0)

        assert len(preview.service_lines) == 1
        self.service_item_repo.list_for_month.assert_called_once_with(1, 2027, 4)

    def test_compute_delta_report(self, sample_client, sample_facility):
        override = MonthlyOverride(year=2027, month=4, override_rate=Decimal("1100"))
        self.client_repo.get_by_id.return_value = sample_client()
        self.facility_repo.list_for_client.return_value = [sample_facility(monthly_overrides=[override])]

        report = self.service.compute_delta_report(1, 1, 2027, 4)

        assert report.current_month.month == 4
        assert report.previous_month.month == 3
        assert report.subtotal_delta == Decimal("100.00")
        assert report.changed_count == 1
        assert self.facility_repo.list_for_client.call_count == 2
