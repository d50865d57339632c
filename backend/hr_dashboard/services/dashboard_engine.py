"""
dashboard_engine.py: KPI cards, chart series and tables for the dashboard views.

Covers:
  - Employees: headcount, unique departments, department distribution
  - Trainings: total investment, completions, mean satisfaction, mean
    occupancy, status distribution, cost by category
  - Participation: enrollments, completions, failures, rows with names
  - Performance: metric count, employees with feedback, individual trend

Foreign identifiers are resolved through a dict index built once per view;
an unresolved identifier is shown as-is.
"""

from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from hr_dashboard.models.records import (
    Employee,
    Enrollment,
    PerformanceMetric,
    Training,
    TrainingStatus,
)
from hr_dashboard.models.view_models import (
    ChartDataItem,
    EmployeesView,
    EnrollmentRow,
    KPICard,
    ParticipationView,
    PerformanceRow,
    PerformanceView,
    TrainingsView,
    TrendPoint,
)
from hr_dashboard.services.analysis_service import employees_with_feedback, trainings_with_notes


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

COMPLETED_ENROLLMENT = "Concluído"
FAILED_ENROLLMENT = "Reprovado"
SATISFACTION_SCALE = 5
MISSING_LABEL = "N/A"
BR_DATE_FORMAT = "%d/%m/%Y"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def format_brl(value: float) -> str:
    """1234.5 → "R$ 1.234,50" (pt-BR grouping and decimal comma)."""
    us = f"{value:,.2f}"
    return "R$ " + us.replace(",", "\0").replace(".", ",").replace("\0", ".")


def build_index(records: Iterable, key: str, label: str) -> Dict[str, Optional[str]]:
    """Map ``key`` → ``label`` once per load; later duplicates do not override."""
    index: Dict[str, Optional[str]] = {}
    for record in records:
        identifier = getattr(record, key)
        if identifier is not None and identifier not in index:
            index[identifier] = getattr(record, label)
    return index


def _distribution(df: pd.DataFrame, by: str, value: Optional[str] = None) -> List[ChartDataItem]:
    keys = df[by].fillna(MISSING_LABEL).astype(str)
    grouped = df.groupby(keys, sort=False)
    series = grouped[value].sum() if value else grouped.size()
    return [ChartDataItem(name=str(name), value=float(total)) for name, total in series.items()]


# ---------------------------------------------------------------------------
# DashboardEngine
# ---------------------------------------------------------------------------

class DashboardEngine:
    """Pure view computations; no I/O."""

    # ── Employees ─────────────────────────────────────────────────────────────

    def employees_view(self, employees: Sequence[Employee]) -> EmployeesView:
        if not employees:
            return EmployeesView(kpis=[], department_distribution=[], employees=[])

        df = pd.DataFrame([e.model_dump() for e in employees])
        kpis = [
            KPICard(title="Total de Funcionários", value=len(employees)),
            KPICard(title="Departamentos Únicos", value=int(df["department"].nunique(dropna=False))),
        ]
        return EmployeesView(
            kpis=kpis,
            department_distribution=_distribution(df, "department"),
            employees=list(employees),
        )

    # ── Trainings ─────────────────────────────────────────────────────────────

    def training_kpis(self, trainings: Sequence[Training]) -> List[KPICard]:
        if not trainings:
            return []

        df = pd.DataFrame([t.model_dump() for t in trainings])
        total_investment = float(df["cost"].sum())

        completed = df[df["status"] == TrainingStatus.COMPLETED]
        scored = pd.to_numeric(completed["satisfaction_score"], errors="coerce").dropna()
        mean_satisfaction = (
            f"{float(scored.mean()):.1f}/{SATISFACTION_SCALE}" if len(scored) else MISSING_LABEL
        )

        participants = pd.to_numeric(df["number_of_participants"], errors="coerce")
        capacity = pd.to_numeric(df["max_participants"], errors="coerce")
        has_capacity = participants.notna() & capacity.notna() & (capacity > 0)
        if has_capacity.any():
            ratio = (participants[has_capacity] / capacity[has_capacity]).mean()
            mean_occupancy = f"{float(ratio) * 100:.0f}%"
        else:
            mean_occupancy = MISSING_LABEL

        return [
            KPICard(title="Investimento Total", value=format_brl(total_investment)),
            KPICard(title="Treinamentos Concluídos", value=len(completed)),
            KPICard(title="Média de Satisfação", value=mean_satisfaction),
            KPICard(title="Taxa de Ocupação Média", value=mean_occupancy),
        ]

    def status_distribution(self, trainings: Sequence[Training]) -> List[ChartDataItem]:
        """Every status appears, zero-initialised, in enum order."""
        if not trainings:
            return []
        counts = {status.value: 0 for status in TrainingStatus}
        for training in trainings:
            counts[training.status.value] += 1
        return [ChartDataItem(name=name, value=float(count)) for name, count in counts.items()]

    def cost_by_category(self, trainings: Sequence[Training]) -> List[ChartDataItem]:
        if not trainings:
            return []
        df = pd.DataFrame([t.model_dump() for t in trainings])
        return _distribution(df, "category", value="cost")

    def trainings_view(self, trainings: Sequence[Training]) -> TrainingsView:
        return TrainingsView(
            kpis=self.training_kpis(trainings),
            status_distribution=self.status_distribution(trainings),
            cost_by_category=self.cost_by_category(trainings),
            trainings_with_notes=trainings_with_notes(trainings),
            trainings=list(trainings),
        )

    # ── Participation ─────────────────────────────────────────────────────────

    def participation_view(
        self,
        enrollments: Sequence[Enrollment],
        employees: Sequence[Employee],
        trainings: Sequence[Training],
    ) -> ParticipationView:
        kpis: List[KPICard] = []
        if enrollments:
            statuses = pd.Series([e.completion_status for e in enrollments], dtype="object")
            kpis = [
                KPICard(title="Total de Inscrições", value=len(enrollments)),
                KPICard(title="Conclusões", value=int((statuses == COMPLETED_ENROLLMENT).sum())),
                KPICard(title="Reprovações", value=int((statuses == FAILED_ENROLLMENT).sum())),
            ]

        employee_names = build_index(employees, "employee_id", "name")
        training_names = build_index(trainings, "training_id", "training_name")
        rows = [
            EnrollmentRow(
                enrollment=e,
                employee_name=employee_names.get(e.employee_id) or e.employee_id,
                training_name=training_names.get(e.training_id) or e.training_id,
            )
            for e in enrollments
        ]
        return ParticipationView(kpis=kpis, rows=rows)

    # ── Performance ───────────────────────────────────────────────────────────

    def performance_trend(self, metrics: Sequence[PerformanceMetric], employee_id: str) -> List[TrendPoint]:
        own = [pm for pm in metrics if pm.employee_id == employee_id]
        if not own:
            return []
        df = pd.DataFrame([pm.model_dump() for pm in own])
        when = df["metric_date"]
        # Sheet dates are ISO or pt-BR dd/mm/yyyy
        df["_when"] = pd.to_datetime(when, errors="coerce", format="ISO8601").fillna(
            pd.to_datetime(when, errors="coerce", format=BR_DATE_FORMAT)
        )
        df = df.sort_values("_when", kind="stable", na_position="last")
        return [
            TrendPoint(date=row.metric_date, value=float(row.metric_value), metric_type=row.metric_type)
            for row in df.itertuples(index=False)
        ]

    def default_trend_employee(
        self, employees: Sequence[Employee], metrics: Sequence[PerformanceMetric]
    ) -> str:
        measured = {pm.employee_id for pm in metrics}
        first = next((e for e in employees if e.employee_id in measured), None)
        return first.employee_id if first and first.employee_id else ""

    def performance_view(
        self,
        metrics: Sequence[PerformanceMetric],
        employees: Sequence[Employee],
        selected_employee_id: Optional[str] = None,
    ) -> PerformanceView:
        with_feedback = employees_with_feedback(employees, metrics)
        kpis = [
            KPICard(title="Total de Métricas", value=len(metrics)),
            KPICard(title="Feedbacks para Análise", value=len(with_feedback)),
        ]
        if selected_employee_id is None:
            selected_employee_id = self.default_trend_employee(employees, metrics)

        names = build_index(employees, "employee_id", "name")
        rows = [
            PerformanceRow(metric=pm, employee_name=names.get(pm.employee_id) or pm.employee_id)
            for pm in metrics
        ]
        return PerformanceView(
            kpis=kpis,
            employees_with_feedback=with_feedback,
            selected_employee_id=selected_employee_id,
            trend=self.performance_trend(metrics, selected_employee_id) if selected_employee_id else [],
            rows=rows,
        )
