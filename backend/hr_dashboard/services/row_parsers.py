"""
row_parsers.py: Spreadsheet row normalisation for the HR dashboard.

Turns the raw ``values`` rows returned by the Sheets API (header already
stripped) into typed records:

  - Column-count gating: a row shorter than its layout's minimum is dropped
    and logged, never raised.
  - Fixed column indexes per sheet, described by a ``SheetLayout``.
  - Fallback policy for missing cells: PLACEHOLDER fills documented
    placeholders, PASSTHROUGH keeps them as None.
  - Numeric coercion with currency / percent stripping; a failed coercion
    yields 0.0.
  - Status coercion against ``TrainingStatus`` with a fixed default.
  - Comma-split prerequisites.

Two sheet schema revisions exist. ``current`` matches the live spreadsheet;
``legacy`` reads older copies (13-column trainings without satisfaction,
6-column performance without an identifier column).
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar, Union

from hr_dashboard import config
from hr_dashboard.models.records import (
    DEFAULT_TRAINING_STATUS,
    Employee,
    Enrollment,
    PerformanceMetric,
    Training,
    TrainingStatus,
)

logger = logging.getLogger("hr-dashboard.parsers")

Row = Sequence[Any]
R = TypeVar("R")


class FallbackPolicy(str, Enum):
    PLACEHOLDER = "placeholder"
    PASSTHROUGH = "passthrough"


# ---------------------------------------------------------------------------
# Sheet layouts
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SheetLayout:
    """Column positions and minimum width of one spreadsheet tab."""

    sheet: str
    range_spec: str
    min_columns: int
    columns: Dict[str, int]

    def cell(self, row: Row, field: str) -> Any:
        index = self.columns.get(field)
        if index is None or index >= len(row):
            return None
        return row[index]

    def text(self, row: Row, field: str) -> Optional[str]:
        return cell_text(self.cell(row, field))


EMPLOYEE_LAYOUT = SheetLayout(
    sheet="Funcionários",
    range_spec=config.EMPLOYEES_RANGE,
    min_columns=5,
    columns={
        "employee_id": 0,
        "name": 1,
        "department": 2,
        "position": 3,
        "hire_date": 4,
        "last_training_date": 5,
        "total_training_hours": 6,
    },
)

TRAINING_LAYOUT = SheetLayout(
    sheet="Treinamentos",
    range_spec=config.TRAININGS_RANGE,
    min_columns=14,
    columns={
        "training_id": 0,
        "training_name": 1,
        "category": 2,
        "duration_hours": 3,
        "cost": 4,
        "provider": 5,
        "training_date": 6,
        "status": 7,
        "target_audience": 8,
        "number_of_participants": 9,
        "max_participants": 10,
        "satisfaction_score": 11,
        "effectiveness_notes": 12,
        "prerequisites": 13,
    },
)

PERFORMANCE_LAYOUT = SheetLayout(
    sheet="Perfomance",
    range_spec=config.PERFORMANCE_RANGE,
    min_columns=7,
    columns={
        "performance_id": 0,
        "employee_id": 1,
        "metric_type": 2,
        "metric_value": 3,
        "metric_date": 4,
        "period_type": 5,
        "feedback": 6,
    },
)

ENROLLMENT_LAYOUT = SheetLayout(
    sheet="Participacao_Treinamentos",
    range_spec=config.ENROLLMENTS_RANGE,
    min_columns=7,
    columns={
        "enrollment_id": 0,
        "employee_id": 1,
        "training_id": 2,
        "enrollment_date": 3,
        "completion_status": 4,
        "date_obtained": 5,
        "score": 6,
    },
)

LEGACY_TRAINING_LAYOUT = SheetLayout(
    sheet="Treinamentos",
    range_spec=config.LEGACY_TRAININGS_RANGE,
    min_columns=13,
    columns={
        "training_id": 0,
        "training_name": 1,
        "category": 2,
        "duration_hours": 3,
        "cost": 4,
        "provider": 5,
        "training_date": 6,
        "status": 7,
        "target_audience": 8,
        "number_of_participants": 9,
        "max_participants": 10,
        "effectiveness_notes": 11,
        "prerequisites": 12,
    },
)

LEGACY_PERFORMANCE_LAYOUT = SheetLayout(
    sheet="Perfomance",
    range_spec=config.LEGACY_PERFORMANCE_RANGE,
    min_columns=6,
    columns={
        "employee_id": 0,
        "metric_type": 1,
        "metric_value": 2,
        "metric_date": 3,
        "period_type": 4,
        "feedback": 5,
    },
)

LAYOUTS: Dict[str, Dict[str, SheetLayout]] = {
    "current": {
        "employees": EMPLOYEE_LAYOUT,
        "trainings": TRAINING_LAYOUT,
        "performance": PERFORMANCE_LAYOUT,
        "enrollments": ENROLLMENT_LAYOUT,
    },
    "legacy": {
        "employees": EMPLOYEE_LAYOUT,
        "trainings": LEGACY_TRAINING_LAYOUT,
        "performance": LEGACY_PERFORMANCE_LAYOUT,
        "enrollments": ENROLLMENT_LAYOUT,
    },
}


def layouts_for(schema_revision: str) -> Dict[str, SheetLayout]:
    try:
        return LAYOUTS[schema_revision]
    except KeyError:
        raise ValueError(f"Unknown sheet schema revision: {schema_revision!r}") from None


# ---------------------------------------------------------------------------
# Placeholders (PLACEHOLDER policy)
# ---------------------------------------------------------------------------

UNKNOWN_NAME = "Nome Indisponível"
UNKNOWN_DEPARTMENT = "Departamento Indisponível"
UNKNOWN_POSITION = "Cargo Indisponível"
UNKNOWN_TRAINING = "Treinamento Indisponível"
UNKNOWN_CATEGORY = "Categoria Indisponível"
UNKNOWN_PROVIDER = "Provedor Indisponível"
UNKNOWN_METRIC = "Métrica Indisponível"
UNKNOWN_EMPLOYEE = "Func. Desconhecido"
NOT_AVAILABLE = "N/A"


def today_iso() -> str:
    return date.today().isoformat()


Placeholder = Union[Any, Callable[[], Any]]


class _Filler:
    """Applies the fallback policy to one already-normalised cell value."""

    def __init__(self, policy: FallbackPolicy):
        self.policy = policy

    def __call__(self, value: Any, placeholder: Placeholder) -> Any:
        if value is not None or self.policy is FallbackPolicy.PASSTHROUGH:
            return value
        return placeholder() if callable(placeholder) else placeholder


# ---------------------------------------------------------------------------
# Cell coercion
# ---------------------------------------------------------------------------

_NON_NUMERIC = re.compile(r"[^0-9,.\-]")
_NON_CURRENCY = re.compile(r"[^0-9,.]")
_LEADING_INT = re.compile(r"^\s*([-+]?\d+)")
_DOT_THOUSANDS = re.compile(r"^\d{1,3}(\.\d{3})+$")


def cell_text(value: Any) -> Optional[str]:
    """Cell as text, verbatim. Empty cells and missing cells are None."""
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    return text if text != "" else None


def _normalise_separators(text: str) -> str:
    # Whichever separator comes last is the decimal one: "1.234,56" / "1,234.56"
    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            return text.replace(".", "").replace(",", ".")
        return text.replace(",", "")
    if "," in text:
        return text.replace(",", "") if text.count(",") > 1 else text.replace(",", ".")
    if text.count(".") > 1:
        return text.replace(".", "")
    return text


def _coerce_float(value: Any, strip: "re.Pattern[str]") -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        cleaned = _normalise_separators(strip.sub("", str(value)))
        try:
            number = float(cleaned)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_decimal(value: Any) -> float:
    """Plain number cell ("8", "7,5", "12 h") → float; 0.0 when unparseable."""
    number = _coerce_float(value, _NON_NUMERIC)
    return number if number is not None else 0.0


def parse_currency(value: Any) -> float:
    """
    Currency cell → non-negative float.

    "R$ 1.234,56" → 1234.56, "1500" → 1500.0, "" or "a combinar" → 0.0.
    Sign characters are stripped together with the currency symbol. A dot
    followed by exactly three digits is pt-BR grouping: "R$ 1.500" → 1500.0.
    """
    if isinstance(value, str):
        digits = _NON_CURRENCY.sub("", value)
        if _DOT_THOUSANDS.match(digits):
            value = digits.replace(".", "")
    number = _coerce_float(value, _NON_CURRENCY)
    return number if number is not None else 0.0


def parse_percent(value: Any) -> float:
    """Percent cell → float without the sign: "85%" → 85.0, "" → 0.0."""
    if isinstance(value, str):
        value = value.replace("%", "")
    return parse_decimal(value)


def parse_optional_float(value: Any) -> Optional[float]:
    if cell_text(value) is None:
        return None
    return _coerce_float(value, _NON_NUMERIC)


def parse_optional_int(value: Any) -> Optional[int]:
    """Leading integer of the cell ("12 pessoas" → 12); None when absent."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return None if math.isnan(value) or math.isinf(value) else int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


_STATUS_BY_VALUE: Dict[str, TrainingStatus] = {status.value: status for status in TrainingStatus}


def coerce_status(value: Any) -> TrainingStatus:
    """Recognised status text maps to itself; anything else to the default."""
    if isinstance(value, TrainingStatus):
        return value
    text = cell_text(value)
    if text is not None:
        status = _STATUS_BY_VALUE.get(text.strip())
        if status is not None:
            return status
        logger.debug(f"Unrecognised training status {text!r}, using {DEFAULT_TRAINING_STATUS.value!r}")
    return DEFAULT_TRAINING_STATUS


def split_prerequisites(value: Any) -> List[str]:
    text = cell_text(value)
    if text is None:
        return []
    return [part.strip() for part in text.split(",") if part.strip()]


# ---------------------------------------------------------------------------
# Row driver
# ---------------------------------------------------------------------------

def _parse_rows(
    rows: Sequence[Row],
    layout: SheetLayout,
    build: Callable[[Row, int], R],
) -> List[R]:
    records: List[R] = []
    for index, row in enumerate(rows):
        width = len(row) if row is not None else 0
        if width < layout.min_columns:
            # Sheet line number: data index + header row + 1-based numbering
            logger.warning(
                f"Row {index + 2} of sheet '{layout.sheet}' has {width} columns, "
                f"expected at least {layout.min_columns}; skipped",
                extra={"sheet_range": layout.range_spec},
            )
            continue
        records.append(build(row, index))
    logger.debug(
        f"Parsed {len(records)}/{len(rows)} rows from '{layout.sheet}'",
        extra={"sheet_range": layout.range_spec, "row_count": len(records)},
    )
    return records


def _policy(policy: Union[FallbackPolicy, str]) -> FallbackPolicy:
    return policy if isinstance(policy, FallbackPolicy) else FallbackPolicy(policy)


# ---------------------------------------------------------------------------
# Entity parsers
# ---------------------------------------------------------------------------

def parse_employees(
    rows: Sequence[Row],
    policy: Union[FallbackPolicy, str] = FallbackPolicy.PLACEHOLDER,
    layout: SheetLayout = EMPLOYEE_LAYOUT,
) -> List[Employee]:
    fill = _Filler(_policy(policy))

    def build(row: Row, index: int) -> Employee:
        return Employee(
            employee_id=fill(layout.text(row, "employee_id"), f"TEMP_ID_{index}"),
            name=fill(layout.text(row, "name"), UNKNOWN_NAME),
            department=fill(layout.text(row, "department"), UNKNOWN_DEPARTMENT),
            position=fill(layout.text(row, "position"), UNKNOWN_POSITION),
            hire_date=fill(layout.text(row, "hire_date"), today_iso),
            last_training_date=layout.text(row, "last_training_date"),
            total_training_hours=fill(parse_optional_int(layout.cell(row, "total_training_hours")), 0),
        )

    return _parse_rows(rows, layout, build)


def parse_trainings(
    rows: Sequence[Row],
    policy: Union[FallbackPolicy, str] = FallbackPolicy.PLACEHOLDER,
    layout: SheetLayout = TRAINING_LAYOUT,
) -> List[Training]:
    fill = _Filler(_policy(policy))

    def build(row: Row, index: int) -> Training:
        return Training(
            training_id=fill(layout.text(row, "training_id"), f"TEMP_TRAINING_ID_{index}"),
            training_name=fill(layout.text(row, "training_name"), UNKNOWN_TRAINING),
            category=fill(layout.text(row, "category"), UNKNOWN_CATEGORY),
            duration_hours=max(parse_decimal(layout.cell(row, "duration_hours")), 0.0),
            cost=parse_currency(layout.cell(row, "cost")),
            provider=fill(layout.text(row, "provider"), UNKNOWN_PROVIDER),
            training_date=fill(layout.text(row, "training_date"), today_iso),
            status=coerce_status(layout.cell(row, "status")),
            target_audience=fill(layout.text(row, "target_audience"), NOT_AVAILABLE),
            number_of_participants=parse_optional_int(layout.cell(row, "number_of_participants")),
            max_participants=parse_optional_int(layout.cell(row, "max_participants")),
            satisfaction_score=parse_optional_float(layout.cell(row, "satisfaction_score")),
            effectiveness_notes=fill(layout.text(row, "effectiveness_notes"), ""),
            prerequisites=split_prerequisites(layout.cell(row, "prerequisites")),
        )

    return _parse_rows(rows, layout, build)


def synthesize_performance_id(
    employee_id: Optional[str], metric_type: Optional[str], metric_date: Optional[str]
) -> str:
    return f"{employee_id or ''}-{metric_type or ''}-{metric_date or ''}"


def parse_performance_metrics(
    rows: Sequence[Row],
    policy: Union[FallbackPolicy, str] = FallbackPolicy.PLACEHOLDER,
    layout: SheetLayout = PERFORMANCE_LAYOUT,
) -> List[PerformanceMetric]:
    fill = _Filler(_policy(policy))

    def build(row: Row, index: int) -> PerformanceMetric:
        employee_id = fill(layout.text(row, "employee_id"), UNKNOWN_EMPLOYEE)
        metric_type = fill(layout.text(row, "metric_type"), UNKNOWN_METRIC)
        metric_date = fill(layout.text(row, "metric_date"), today_iso)
        performance_id = layout.text(row, "performance_id")
        if performance_id is None:
            performance_id = synthesize_performance_id(employee_id, metric_type, metric_date)
        return PerformanceMetric(
            performance_id=performance_id,
            employee_id=employee_id,
            metric_type=metric_type,
            metric_value=parse_percent(layout.cell(row, "metric_value")),
            metric_date=metric_date,
            period_type=fill(layout.text(row, "period_type"), NOT_AVAILABLE),
            feedback=fill(layout.text(row, "feedback"), ""),
        )

    return _parse_rows(rows, layout, build)


def parse_enrollments(
    rows: Sequence[Row],
    policy: Union[FallbackPolicy, str] = FallbackPolicy.PLACEHOLDER,
    layout: SheetLayout = ENROLLMENT_LAYOUT,
) -> List[Enrollment]:
    fill = _Filler(_policy(policy))

    def build(row: Row, index: int) -> Enrollment:
        return Enrollment(
            enrollment_id=fill(layout.text(row, "enrollment_id"), f"TEMP_ENROLLMENT_ID_{index}"),
            employee_id=fill(layout.text(row, "employee_id"), UNKNOWN_EMPLOYEE),
            training_id=fill(layout.text(row, "training_id"), UNKNOWN_TRAINING),
            enrollment_date=fill(layout.text(row, "enrollment_date"), today_iso),
            completion_status=fill(layout.text(row, "completion_status"), NOT_AVAILABLE),
            # Not completed yet is a legitimate blank, so no date placeholder here
            date_obtained=fill(layout.text(row, "date_obtained"), ""),
            score=fill(layout.text(row, "score"), ""),
        )

    return _parse_rows(rows, layout, build)
