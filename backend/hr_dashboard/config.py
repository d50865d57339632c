"""
Dashboard configuration: single source of truth for credentials, upstream
endpoints, sheet ranges and parser behaviour.

Build a ``DashboardSettings`` explicitly (tests do) or from the process
environment with ``DashboardSettings.from_env()``. Nothing here reads the
environment at import time.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field


# ── Upstream endpoints ─────────────────────────────────────────────────────────
SHEETS_API_BASE_URL: str = "https://sheets.googleapis.com/v4/spreadsheets"
GEMINI_API_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/models"
GEMINI_MODEL: str = "gemini-1.5-pro-latest"


# ── Sheet ranges (live spreadsheet) ────────────────────────────────────────────
# "Perfomance" is spelled the way the tab is named in the spreadsheet.
EMPLOYEES_RANGE: str = "Funcionários!A:G"
TRAININGS_RANGE: str = "Treinamentos!A:N"
PERFORMANCE_RANGE: str = "Perfomance!A:G"
ENROLLMENTS_RANGE: str = "Participacao_Treinamentos!A:G"

# Ranges of the older sheet copies (see row_parsers.LEGACY_LAYOUTS)
LEGACY_TRAININGS_RANGE: str = "Treinamentos!A:M"
LEGACY_PERFORMANCE_RANGE: str = "Perfomance!A:F"


# ── Parser behaviour ───────────────────────────────────────────────────────────
FALLBACK_POLICIES: tuple[str, ...] = ("placeholder", "passthrough")
SCHEMA_REVISIONS: tuple[str, ...] = ("current", "legacy")

DEFAULT_CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"


def _split_csv(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class DashboardSettings:
    spreadsheet_id: str = ""
    sheets_api_key: str = ""
    gemini_api_key: str = ""
    sheets_base_url: str = SHEETS_API_BASE_URL
    gemini_base_url: str = GEMINI_API_BASE_URL
    gemini_model: str = GEMINI_MODEL
    fallback_policy: str = "placeholder"
    schema_revision: str = "current"
    log_level: str = "INFO"
    log_format: str = "json"
    cors_origins: list[str] = field(default_factory=lambda: _split_csv(DEFAULT_CORS_ORIGINS))

    def __post_init__(self):
        if self.fallback_policy not in FALLBACK_POLICIES:
            raise ValueError(
                f"fallback_policy must be one of {FALLBACK_POLICIES}, got {self.fallback_policy!r}"
            )
        if self.schema_revision not in SCHEMA_REVISIONS:
            raise ValueError(
                f"schema_revision must be one of {SCHEMA_REVISIONS}, got {self.schema_revision!r}"
            )

    @classmethod
    def from_env(cls) -> "DashboardSettings":
        """Read every setting from the process environment."""
        return cls(
            spreadsheet_id=os.getenv("SPREADSHEET_ID", ""),
            sheets_api_key=os.getenv("GOOGLE_SHEETS_API_KEY", ""),
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            sheets_base_url=os.getenv("SHEETS_API_BASE_URL", SHEETS_API_BASE_URL),
            gemini_base_url=os.getenv("GEMINI_API_BASE_URL", GEMINI_API_BASE_URL),
            gemini_model=os.getenv("GEMINI_MODEL", GEMINI_MODEL),
            fallback_policy=os.getenv("PARSER_FALLBACK_POLICY", "placeholder").lower(),
            schema_revision=os.getenv("SHEET_SCHEMA_REVISION", "current").lower(),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "json").lower(),
            cors_origins=_split_csv(os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)),
        )

    @property
    def sheets_configured(self) -> bool:
        return bool(self.sheets_api_key and self.spreadsheet_id)

    @property
    def gemini_configured(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def json_logs(self) -> bool:
        return self.log_format != "text"
