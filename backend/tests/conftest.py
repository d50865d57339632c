"""
conftest.py: Shared pytest fixtures for the HR dashboard backend test suite.

No real network access happens anywhere in the suite: every upstream call
goes through ``httpx.MockTransport`` handlers built here, keyed by sheet tab
name (the part of the A1 range before ``!``).

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``hr_dashboard.*`` imports resolve regardless of where pytest is invoked.
"""

import json
import os
import sys
from typing import Dict, List, Optional, Tuple

import httpx
import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any package imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from hr_dashboard.config import DashboardSettings  # noqa: E402


# ---------------------------------------------------------------------------
# Sheet contents (header row first, as the Sheets API returns them)
# ---------------------------------------------------------------------------

EMPLOYEE_SHEET: List[List[str]] = [
    ["employee_id", "name", "department", "position", "hire_date", "last_training_date", "total_training_hours"],
    ["E1", "Ana", "Eng", "Dev", "2020-01-01"],
    ["E2", "Bruno", "RH", "Analista", "2019-03-15", "2024-02-01", "16"],
    ["E3", "Carla", "Eng", "Tech Lead", "2018-07-30", "2024-05-10", "40"],
]

TRAINING_SHEET: List[List[str]] = [
    [
        "training_id", "training_name", "category", "duration_hours", "cost", "provider",
        "training_date", "status", "target_audience", "number_of_participants",
        "max_participants", "satisfaction_score", "effectiveness_notes", "prerequisites",
    ],
    ["T1", "Python Avançado", "Técnico", "16", "R$ 1.234,56", "Alura", "2024-03-01",
     "Concluído", "Engenharia", "8", "10", "4.5", "Equipe aplicou o conteúdo no projeto.", "T0, Lógica"],
    ["T2", "Liderança", "Comportamental", "8", "R$ 2.000,00", "FGV", "2024-04-10",
     "Em Andamento", "Liderança", "5", "10", "", "", "T1"],
    ["T3", "Excel", "Ferramentas", "4", "500", "Interno", "2024-05-20",
     "Desconhecido", "Todos", "", "", "", "Pouca adesão.", " "],
]

PERFORMANCE_SHEET: List[List[str]] = [
    ["performance_id", "employee_id", "metric_type", "metric_value", "metric_date", "period_type", "feedback"],
    ["P1", "E1", "Produtividade", "85%", "2024-02-01", "Mensal", "Entrega consistente."],
    ["P2", "E1", "Produtividade", "90%", "2024-01-01", "Mensal", "Boa comunicação."],
    ["P3", "E2", "Qualidade", "70", "2024-01-15", "Trimestral", " "],
    ["P4", "E9", "Qualidade", "60", "2024-01-20", "Trimestral", "Sem cadastro."],
]

ENROLLMENT_SHEET: List[List[str]] = [
    ["enrollment_id", "employee_id", "training_id", "enrollment_date", "completion_status", "date_obtained", "score"],
    ["R1", "E1", "T1", "2024-02-20", "Concluído", "2024-03-02", "9.5"],
    ["R2", "E2", "T2", "2024-04-01", "Reprovado", "2024-04-12", "4"],
    ["R3", "E9", "T9", "2024-04-05", "Em Andamento", "", "-"],
]

WORKBOOK: Dict[str, List[List[str]]] = {
    "Funcionários": EMPLOYEE_SHEET,
    "Treinamentos": TRAINING_SHEET,
    "Perfomance": PERFORMANCE_SHEET,
    "Participacao_Treinamentos": ENROLLMENT_SHEET,
}


# ---------------------------------------------------------------------------
# Mock transports
# ---------------------------------------------------------------------------

def sheet_name_of(request: httpx.Request) -> str:
    """'/v4/spreadsheets/ID/values/Funcionários!A:G' → 'Funcionários'."""
    range_spec = request.url.path.split("/values/", 1)[1]
    return range_spec.split("!", 1)[0]


def sheets_transport(
    workbook: Dict[str, List[List[str]]],
    failures: Optional[Dict[str, Tuple[int, dict]]] = None,
    calls: Optional[List[httpx.Request]] = None,
) -> httpx.MockTransport:
    failures = failures or {}

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        sheet = sheet_name_of(request)
        if sheet in failures:
            status, body = failures[sheet]
            return httpx.Response(status, json=body)
        if sheet not in workbook:
            return httpx.Response(400, json={"error": {"message": f"Unable to parse range: {sheet}"}})
        return httpx.Response(200, json={"range": sheet, "majorDimension": "ROWS", "values": workbook[sheet]})

    return httpx.MockTransport(handler)


def gemini_response(text: Optional[str] = "Resumo gerado.", finish_reason: str = "STOP") -> dict:
    candidate: dict = {"finishReason": finish_reason, "index": 0}
    if text is not None:
        candidate["content"] = {"parts": [{"text": text}], "role": "model"}
    return {"candidates": [candidate]}


def gemini_transport(
    status: int = 200,
    body: Optional[dict] = None,
    calls: Optional[List[httpx.Request]] = None,
) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status, json=body if body is not None else gemini_response())

    return httpx.MockTransport(handler)


def request_json(request: httpx.Request) -> dict:
    return json.loads(request.content.decode("utf-8"))


# ---------------------------------------------------------------------------
# Settings fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings():
    """Fully configured settings with fake credentials."""
    return DashboardSettings(
        spreadsheet_id="sheet-123",
        sheets_api_key="sheets-key",
        gemini_api_key="gemini-key",
    )


@pytest.fixture
def unconfigured_settings():
    """No credentials at all, as in a fresh checkout without .env."""
    return DashboardSettings()


@pytest.fixture
def sheet_calls():
    """Requests seen by the sheets transport, in order."""
    return []


@pytest.fixture
def sheets_http(sheet_calls):
    return httpx.AsyncClient(transport=sheets_transport(WORKBOOK, calls=sheet_calls))
