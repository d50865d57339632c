"""Error taxonomy shared by the spreadsheet and Gemini clients."""
from typing import Optional


class DashboardError(Exception):
    """Base class for every error surfaced to a dashboard view."""

    kind: str = "dashboard_error"


class ConfigurationError(DashboardError):
    """A credential or identifier needed by the feature is not configured."""

    kind = "configuration_error"


class FetchError(DashboardError):
    """The upstream API answered with a non-2xx status."""

    kind = "fetch_error"

    def __init__(self, status_code: int, message: str, range_spec: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.range_spec = range_spec
        where = f" ({range_spec})" if range_spec else ""
        super().__init__(f"Falha ao buscar dados{where}: HTTP {status_code} - {message}")


class GenerationError(FetchError):
    """The generative-language API answered with a non-2xx status."""

    kind = "generation_error"

    def __init__(self, status_code: int, message: str):
        super().__init__(status_code, message)
        # Override the sheet-oriented wording set by FetchError
        self.args = (f"Erro da API Gemini ({status_code}): {message}",)


class NetworkError(DashboardError):
    """Transport-level failure: DNS, connection refused, TLS, read error."""

    kind = "network_error"


class NothingToAnalyzeError(DashboardError):
    """The selected employee or training has no text to summarize."""

    kind = "nothing_to_analyze"
