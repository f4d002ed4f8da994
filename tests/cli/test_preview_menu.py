from decimal import Decimal
from unittest.mock import MagicMock, patch

from serviceops.engine.aggregator import build_preview
from serviceops.errors import NotFoundError


def _preview(sample_client, sample_facility):
    return build_preview(sample_client(), [sample_facility()], [], 2027, 4, Decimal("0.0825"))


class TestAskPreviewRequest:
    @patch("serviceops.cli.preview_menu.questionary")
    def test_collects_answers(self, mock_q):
        from serviceops.cli.preview_menu import ask_preview_request

        mock_q.text.return_value.ask.side_effect = [" abc ", "1", "2027", "4"]
        assert ask_preview_request() == ("abc", 1, 2027, 4)

    @patch("serviceops.cli.preview_menu.questionary")
    def test_cancel_on_uuid(self, mock_q):
        from serviceops.cli.preview_menu import ask_preview_request

        mock_q.text.return_value.ask.return_value = None
        assert ask_preview_request() is None

    @patch("serviceops.cli.preview_menu.questionary")
    def test_non_numeric_month(self, mock_q):
        from serviceops.cli.preview_menu import ask_preview_request

        mock_q.text.return_value.ask.side_effect = ["abc", "1", "2027", "April"]
        assert ask_preview_request() is None


class TestPreviewMenu:
    @patch("serviceops.cli.preview_menu.print_preview")
    @patch("serviceops.cli.preview_menu.ask_preview_request")
    def test_prints_preview(self, mock_ask, mock_print, sample_client, sample_facility):
        from serviceops.cli.preview_menu import preview_menu

        service = MagicMock()
        service.get_client_by_uuid.return_value = sample_client()
        preview = _preview(sample_client, sample_facility)
        service.compute_preview.return_value = preview
        mock_ask.return_value = ("abc", 1, 2027, 4)

        preview_menu(service)

        service.compute_preview.assert_called_once_with(1, 1, 2027, 4)
        mock_print.assert_called_once_with(preview)

    @patch("serviceops.cli.preview_menu.print_preview")
    @patch("serviceops.cli.preview_menu.ask_preview_request")
    def test_error_is_reported(self, mock_ask, mock_print):
        from serviceops.cli.preview_menu import preview_menu

        service = MagicMock()
        service.get_client_by_uuid.side_effect = NotFoundError("Client not found")
        mock_ask.return_value = ("abc", 1, 2027, 4)

        preview_menu(service)

        mock_print.assert_not_called()

    def test_print_preview_runs(self, sample_client, sample_facility):
        from serviceops.cli.preview_menu import print_preview

        print_preview(_preview(sample_client, sample_facility))


class TestExportMenu:
    @patch("serviceops.cli.preview_menu.ask_preview_request")
    def test_generic_export(self, mock_ask, tmp_path, monkeypatch, sample_client, sample_facility):
        from serviceops.cli.preview_menu import export_menu

        monkeypatch.chdir(tmp_path)
        service = MagicMock()
        service.get_client_by_uuid.return_value = sample_client()
        service.compute_preview.return_value = _preview(sample_client, sample_facility)
        mock_ask.return_value = ("abc", 1, 2027, 4)

        path = export_menu(service)

        assert path.name == "Acme_Corp_billing_2027_04.csv"
        assert (tmp_path / path).read_text(encoding="utf-8").startswith("Type,Facility")

    @patch("serviceops.cli.preview_menu.ask_preview_request")
    def test_quickbooks_export(self, mock_ask, tmp_path, monkeypatch, sample_client, sample_facility):
        from serviceops.cli.preview_menu import export_menu

        monkeypatch.chdir(tmp_path)
        service = MagicMock()
        service.get_client_by_uuid.return_value = sample_client()
        service.compute_preview.return_value = _preview(sample_client, sample_facility)
        mock_ask.return_value = ("abc", 1, 2027, 4)

        path = export_menu(service, quickbooks=True)

        assert path.name == "Acme_Corp_QB_invoice_2027_04.csv"
        assert (tmp_path / path).read_text(encoding="utf-8").startswith("InvoiceNo,Customer")

    @patch("serviceops.cli.preview_menu.ask_preview_request")
    def test_cancelled(self, mock_ask):
        from serviceops.cli.preview_menu import export_menu

        mock_ask.return_value = None
        assert export_menu(MagicMock()) is None

    @patch("serviceops.cli.preview_menu.questionary")
    @patch("serviceops.cli.preview_menu.ask_preview_request")
    def test_pdf_export(self, mock_ask, mock_q, tmp_path, monkeypatch, sample_client, sample_facility):
        from serviceops.cli.preview_menu import pdf_export_menu

        monkeypatch.chdir(tmp_path)
        service = MagicMock()
        service.get_client_by_uuid.return_value = sample_client()
        service.compute_preview.return_value = _preview(sample_client, sample_facility)
        mock_ask.return_value = ("abc", 1, 2027, 4)
        mock_q.confirm.return_value.ask.return_value = True

        path = pdf_export_menu(service)

        assert path.name == "Acme_Corp_billing_2027_04.pdf"
        assert (tmp_path / path).read_bytes().startswith(b"%PDF")

    @patch("serviceops.cli.preview_menu.ask_preview_request")
    def test_pdf_export_cancelled(self, mock_ask):
        from serviceops.cli.preview_menu import pdf_export_menu

        mock_ask.return_value = None
        assert pdf_export_menu(MagicMock()) is None
