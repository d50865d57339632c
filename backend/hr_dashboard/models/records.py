from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TrainingStatus(str, Enum):
    """Training status values exactly as they are typed in the spreadsheet."""

    PLANNED = "Planejado"
    SCHEDULED = "Agendado"
    IN_PROGRESS = "Em Andamento"
    COMPLETED = "Concluído"
    CANCELLED = "Cancelado"
    FAILED = "Reprovado"


DEFAULT_TRAINING_STATUS = TrainingStatus.PLANNED


class _Record(BaseModel):
    """
    Immutable snapshot of one spreadsheet row.

    String fields are Optional because the passthrough fallback policy keeps
    missing cells as None; the placeholder policy always fills them.
    """

    model_config = ConfigDict(frozen=True)


class Employee(_Record):
    employee_id: Optional[str] = None
    name: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    hire_date: Optional[str] = Field(None, description="Calendar date as typed in the sheet")
    last_training_date: Optional[str] = None
    total_training_hours: Optional[int] = None


class Training(_Record):
    training_id: Optional[str] = None
    training_name: Optional[str] = None
    category: Optional[str] = None
    duration_hours: float = Field(0.0, ge=0)
    cost: float = Field(0.0, ge=0, description="Currency amount in BRL")
    provider: Optional[str] = None
    training_date: Optional[str] = Field(None, description="Start date")
    status: TrainingStatus = DEFAULT_TRAINING_STATUS
    target_audience: Optional[str] = None
    number_of_participants: Optional[int] = None
    max_participants: Optional[int] = None
    satisfaction_score: Optional[float] = Field(None, description="0-5 scale")
    effectiveness_notes: Optional[str] = None
    prerequisites: List[str] = Field(default_factory=list)


class PerformanceMetric(_Record):
    performance_id: Optional[str] = None
    employee_id: Optional[str] = None
    metric_type: Optional[str] = None
    metric_value: float = 0.0
    metric_date: Optional[str] = None
    period_type: Optional[str] = None
    feedback: Optional[str] = None


class Enrollment(_Record):
    enrollment_id: Optional[str] = None
    employee_id: Optional[str] = None
    training_id: Optional[str] = None
    enrollment_date: Optional[str] = None
    completion_status: Optional[str] = None
    date_obtained: Optional[str] = None
    score: Optional[str] = Field(None, description="Free text, not strictly numeric")
