"""
Dashboard view routes: one payload per view.

GET /api/views/employees                        KPIs, department chart, table
GET /api/views/trainings                        KPIs, status/cost charts, table
GET /api/views/participation                    KPIs, enrollments with names
GET /api/views/performance                      KPIs, trend, metrics with names
GET /api/views/performance/trend/{employee_id}  one employee's trend

Views that need several sheets load them concurrently; any failing sheet
fails the whole view.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends

from hr_dashboard.api.deps import get_data_service, get_engine
from hr_dashboard.models.view_models import (
    EmployeesView,
    ParticipationView,
    PerformanceView,
    TrainingsView,
    TrendPoint,
)
from hr_dashboard.services.dashboard_engine import DashboardEngine
from hr_dashboard.services.data_access import HRDataService

router = APIRouter(prefix="/api/views", tags=["Dashboard Views"])


@router.get("/employees", response_model=EmployeesView)
async def employees_view(
    data: HRDataService = Depends(get_data_service),
    engine: DashboardEngine = Depends(get_engine),
):
    employees = await data.get_employees()
    return engine.employees_view(employees)


@router.get("/trainings", response_model=TrainingsView)
async def trainings_view(
    data: HRDataService = Depends(get_data_service),
    engine: DashboardEngine = Depends(get_engine),
):
    trainings = await data.get_trainings()
    return engine.trainings_view(trainings)


@router.get("/participation", response_model=ParticipationView)
async def participation_view(
    data: HRDataService = Depends(get_data_service),
    engine: DashboardEngine = Depends(get_engine),
):
    loaded = await data.load_all("enrollments", "employees", "trainings")
    return engine.participation_view(loaded["enrollments"], loaded["employees"], loaded["trainings"])


@router.get("/performance", response_model=PerformanceView)
async def performance_view(
    employee_id: Optional[str] = None,
    data: HRDataService = Depends(get_data_service),
    engine: DashboardEngine = Depends(get_engine),
):
    """``employee_id`` picks the trend series; defaults to the first employee with metrics."""
    loaded = await data.load_all("performance", "employees")
    return engine.performance_view(loaded["performance"], loaded["employees"], employee_id)


@router.get("/performance/trend/{employee_id}", response_model=List[TrendPoint])
async def performance_trend(
    employee_id: str,
    data: HRDataService = Depends(get_data_service),
    engine: DashboardEngine = Depends(get_engine),
):
    metrics = await data.get_performance_metrics()
    return engine.performance_trend(metrics, employee_id)
