"""
AI analysis routes.

Each POST triggers exactly one Gemini call. Nothing de-duplicates repeated
requests for the same subject.
"""
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from hr_dashboard.api.deps import get_analysis_service, get_data_service
from hr_dashboard.models.records import Employee, Training
from hr_dashboard.models.view_models import AnalysisResult
from hr_dashboard.services.analysis_service import (
    AnalysisService,
    employees_with_feedback,
    trainings_with_notes,
)
from hr_dashboard.services.data_access import HRDataService

router = APIRouter(prefix="/api/analysis", tags=["AI Analysis"])


class FeedbackAnalysisRequest(BaseModel):
    employee_id: str = Field(..., min_length=1)


class EffectivenessAnalysisRequest(BaseModel):
    training_id: str = Field(..., min_length=1)


@router.get("/feedback/employees", response_model=List[Employee])
async def feedback_candidates(data: HRDataService = Depends(get_data_service)):
    """Employees with at least one non-blank feedback entry."""
    loaded = await data.load_all("employees", "performance")
    return employees_with_feedback(loaded["employees"], loaded["performance"])


@router.get("/effectiveness/trainings", response_model=List[Training])
async def effectiveness_candidates(data: HRDataService = Depends(get_data_service)):
    """Trainings with non-blank effectiveness notes."""
    return trainings_with_notes(await data.get_trainings())


@router.post("/feedback", response_model=AnalysisResult)
async def analyze_feedback(
    req: FeedbackAnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    return await service.analyze_employee_feedback(req.employee_id)


@router.post("/effectiveness", response_model=AnalysisResult)
async def analyze_effectiveness(
    req: EffectivenessAnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    return await service.analyze_training_effectiveness(req.training_id)
