"""Response payloads for the dashboard views and AI analyses."""
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from hr_dashboard.models.records import Employee, Enrollment, PerformanceMetric, Training


class KPICard(BaseModel):
    title: str
    value: Union[int, float, str]
    change: Optional[str] = Field(None, description='e.g. "+5%"')
    change_type: Optional[Literal["positive", "negative", "neutral"]] = None


class ChartDataItem(BaseModel):
    name: str
    value: float


class TrendPoint(BaseModel):
    date: Optional[str]
    value: float
    metric_type: Optional[str] = None


class EmployeesView(BaseModel):
    kpis: List[KPICard]
    department_distribution: List[ChartDataItem]
    employees: List[Employee]


class TrainingsView(BaseModel):
    kpis: List[KPICard]
    status_distribution: List[ChartDataItem]
    cost_by_category: List[ChartDataItem]
    trainings_with_notes: List[Training]
    trainings: List[Training]


class EnrollmentRow(BaseModel):
    enrollment: Enrollment
    employee_name: Optional[str]
    training_name: Optional[str]


class ParticipationView(BaseModel):
    kpis: List[KPICard]
    rows: List[EnrollmentRow]


class PerformanceRow(BaseModel):
    metric: PerformanceMetric
    employee_name: Optional[str]


class PerformanceView(BaseModel):
    kpis: List[KPICard]
    employees_with_feedback: List[Employee]
    selected_employee_id: str = ""
    trend: List[TrendPoint]
    rows: List[PerformanceRow]


class AnalysisResult(BaseModel):
    subject_id: str
    source_text: str
    analysis: str
