"""
test_sheets_client.py: Tests for the Google Sheets values client.

All upstream traffic goes through httpx.MockTransport; coroutines are driven
with asyncio.run so the suite needs no async plugin.
"""

import asyncio

import httpx
import pytest

from hr_dashboard.services.errors import ConfigurationError, FetchError, NetworkError
from hr_dashboard.services.sheets_client import SheetsClient

from conftest import EMPLOYEE_SHEET, WORKBOOK, sheets_transport


def _client(settings, transport):
    return SheetsClient(settings, http_client=httpx.AsyncClient(transport=transport))


class TestFetchRange:

    def test_header_row_dropped(self, settings, sheets_http):
        rows = asyncio.run(SheetsClient(settings, sheets_http).fetch_range("Funcionários!A:G"))
        assert rows == EMPLOYEE_SHEET[1:]

    def test_request_shape(self, settings, sheets_http, sheet_calls):
        asyncio.run(SheetsClient(settings, sheets_http).fetch_range("Funcionários!A:G"))
        assert len(sheet_calls) == 1
        request = sheet_calls[0]
        assert request.method == "GET"
        assert request.url.params["key"] == "sheets-key"
        assert request.url.path == "/v4/spreadsheets/sheet-123/values/Funcionários!A:G"

    def test_range_url_keeps_a1_separators(self, settings):
        url = SheetsClient(settings).range_url("Participacao_Treinamentos!A:G")
        assert url.endswith("/sheet-123/values/Participacao_Treinamentos!A:G")

    def test_missing_values_is_empty(self, settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"range": "X!A:B"}))
        assert asyncio.run(_client(settings, transport).fetch_range("X!A:B")) == []

    def test_header_only_is_empty(self, settings):
        transport = sheets_transport({"Funcionários": [EMPLOYEE_SHEET[0]]})
        assert asyncio.run(_client(settings, transport).fetch_range("Funcionários!A:G")) == []


class TestFetchRangeErrors:

    def test_missing_key_fails_before_network(self, settings):
        calls = []
        config = type(settings)(spreadsheet_id="sheet-123", sheets_api_key="")
        client = _client(config, sheets_transport(WORKBOOK, calls=calls))
        with pytest.raises(ConfigurationError, match="Google Sheets"):
            asyncio.run(client.fetch_range("Funcionários!A:G"))
        assert calls == []

    def test_missing_spreadsheet_id(self, settings):
        calls = []
        config = type(settings)(sheets_api_key="sheets-key")
        client = _client(config, sheets_transport(WORKBOOK, calls=calls))
        with pytest.raises(ConfigurationError):
            asyncio.run(client.fetch_range("Funcionários!A:G"))
        assert calls == []

    def test_forbidden_carries_upstream_message(self, settings):
        failures = {"Funcionários": (403, {"error": {"code": 403, "message": "API key not valid."}})}
        client = _client(settings, sheets_transport(WORKBOOK, failures=failures))
        with pytest.raises(FetchError) as exc_info:
            asyncio.run(client.fetch_range("Funcionários!A:G"))
        err = exc_info.value
        assert err.status_code == 403
        assert err.message == "API key not valid."
        assert err.range_spec == "Funcionários!A:G"
        assert "HTTP 403" in str(err)

    def test_non_json_error_uses_reason_phrase(self, settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="<html>oops</html>"))
        with pytest.raises(FetchError) as exc_info:
            asyncio.run(_client(settings, transport).fetch_range("Funcionários!A:G"))
        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Internal Server Error"

    def test_connection_failure_is_network_error(self, settings):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NetworkError):
            asyncio.run(_client(settings, httpx.MockTransport(handler)).fetch_range("Funcionários!A:G"))
