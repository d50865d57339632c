"""
Google Sheets read client.

One authenticated GET per call against the v4 ``values`` endpoint:

    GET {base}/{spreadsheet_id}/values/{range}?key={api_key}

The first row of ``values`` is the header and is dropped. No retry, no
pagination, no caching: every call goes to the network.
"""
import logging
import time
from typing import Any, List, Optional
from urllib.parse import quote

import httpx

from hr_dashboard.config import DashboardSettings
from hr_dashboard.services.errors import ConfigurationError, FetchError, NetworkError

logger = logging.getLogger("hr-dashboard.sheets")


def _error_message(response: httpx.Response) -> str:
    """Upstream ``error.message`` when the body is JSON, else the reason phrase."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.reason_phrase or "No additional error message."


class SheetsClient:
    def __init__(self, settings: DashboardSettings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._http = http_client

    def range_url(self, range_spec: str) -> str:
        # "!" and ":" are part of A1 notation and stay unescaped
        encoded = quote(range_spec, safe="!:")
        return f"{self.settings.sheets_base_url}/{self.settings.spreadsheet_id}/values/{encoded}"

    async def fetch_range(self, range_spec: str) -> List[List[Any]]:
        """Return the data rows of ``range_spec`` with the header row removed."""
        if not self.settings.sheets_api_key:
            raise ConfigurationError("Chave de API do Google Sheets não configurada.")
        if not self.settings.spreadsheet_id:
            raise ConfigurationError("ID da planilha não configurado.")

        url = self.range_url(range_spec)
        params = {"key": self.settings.sheets_api_key}
        start = time.perf_counter()
        try:
            if self._http is not None:
                response = await self._http.get(url, params=params)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(url, params=params)
        except httpx.RequestError as e:
            logger.error(f"Network error fetching {range_spec}: {e}", extra={"sheet_range": range_spec})
            raise NetworkError(
                f"Erro de rede ao buscar dados da planilha para {range_spec}: {e}"
            ) from e

        duration_ms = round((time.perf_counter() - start) * 1000, 2)

        if not response.is_success:
            message = _error_message(response)
            logger.error(
                f"Sheets API returned {response.status_code} for {range_spec}: {message}",
                extra={"sheet_range": range_spec, "duration_ms": duration_ms},
            )
            raise FetchError(response.status_code, message, range_spec)

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(response.status_code, "Resposta da planilha não é JSON válido.", range_spec) from e

        values = (data.get("values") or []) if isinstance(data, dict) else []
        rows = values[1:]
        logger.info(
            f"Fetched {len(rows)} rows from {range_spec}",
            extra={"sheet_range": range_spec, "row_count": len(rows), "duration_ms": duration_ms},
        )
        return rows
