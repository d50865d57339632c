"""
AI analysis of free-text HR notes.

Builds the HR-analyst prompts for an employee's performance feedback and for
a training's effectiveness notes, and runs each through the Gemini client
exactly once per request.
"""
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from hr_dashboard.models.records import Employee, PerformanceMetric, Training
from hr_dashboard.models.view_models import AnalysisResult
from hr_dashboard.services.data_access import HRDataService
from hr_dashboard.services.errors import NothingToAnalyzeError
from hr_dashboard.services.gemini_client import GeminiClient

logger = logging.getLogger("hr-dashboard.analysis")


FEEDBACK_PROMPT = (
    "Como um analista de RH, analise os seguintes feedbacks de performance para um "
    "funcionário. Resuma os pontos chave, identifique temas recorrentes (positivos e "
    "negativos) e sugira pontos para discussão em uma reunião de 1-on-1. Formate a "
    "resposta com clareza usando Markdown (use ** para negrito e * para listas). "
    "Feedbacks:\n\n{feedback}"
)

EFFECTIVENESS_PROMPT = """Você é um especialista em RH analisando a eficácia de um treinamento corporativo. Com base nas notas a seguir, forneça uma análise estruturada. Use Markdown para formatação (negrito com ** e listas com *).
Estruture sua resposta com os seguintes tópicos:
- **Resumo Executivo:** Um parágrafo conciso sobre a eficácia geral.
- **Pontos Fortes:** Principais sucessos ou resultados positivos observados.
- **Áreas de Melhoria:** Pontos onde o treinamento pode ser otimizado.
- **Ações Sugeridas:** Recomendações práticas para futuras sessões.

**Notas de Eficácia:**
---
{notes}
---
"""


def format_br_date(value: Optional[str]) -> str:
    """ISO date → dd/mm/yyyy; anything unparseable is returned as typed."""
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value[:10]).strftime("%d/%m/%Y")
    except ValueError:
        return value


def _has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def collect_employee_feedback(metrics: Sequence[PerformanceMetric], employee_id: str) -> str:
    lines = [
        f'Feedback em {format_br_date(pm.metric_date)}: "{pm.feedback}"'
        for pm in metrics
        if pm.employee_id == employee_id and _has_text(pm.feedback)
    ]
    return "\n".join(lines)


def build_feedback_prompt(feedback_text: str) -> str:
    return FEEDBACK_PROMPT.format(feedback=feedback_text)


def build_effectiveness_prompt(notes: str) -> str:
    return EFFECTIVENESS_PROMPT.format(notes=notes)


def employees_with_feedback(
    employees: Sequence[Employee], metrics: Sequence[PerformanceMetric]
) -> List[Employee]:
    ids = {pm.employee_id for pm in metrics if _has_text(pm.feedback)}
    return [e for e in employees if e.employee_id in ids]


def trainings_with_notes(trainings: Sequence[Training]) -> List[Training]:
    return [t for t in trainings if _has_text(t.effectiveness_notes)]


class AnalysisService:
    def __init__(self, data_service: HRDataService, gemini_client: GeminiClient):
        self.data = data_service
        self.gemini = gemini_client

    async def analyze_employee_feedback(self, employee_id: str) -> AnalysisResult:
        metrics = await self.data.get_performance_metrics()
        feedback = collect_employee_feedback(metrics, employee_id)
        if not feedback:
            raise NothingToAnalyzeError("Nenhum feedback para analisar.")

        logger.info(f"Analyzing feedback for employee {employee_id}")
        analysis = await self.gemini.generate(build_feedback_prompt(feedback))
        return AnalysisResult(subject_id=employee_id, source_text=feedback, analysis=analysis)

    async def analyze_training_effectiveness(self, training_id: str) -> AnalysisResult:
        trainings = await self.data.get_trainings()
        training = next((t for t in trainings_with_notes(trainings) if t.training_id == training_id), None)
        if training is None:
            raise NothingToAnalyzeError("Nenhuma nota de eficácia para analisar.")

        logger.info(f"Analyzing effectiveness notes for training {training_id}")
        notes = training.effectiveness_notes
        analysis = await self.gemini.generate(build_effectiveness_prompt(notes))
        return AnalysisResult(subject_id=training_id, source_text=notes, analysis=analysis)
