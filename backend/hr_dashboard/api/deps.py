"""FastAPI dependency injection: settings and service wiring."""
from functools import lru_cache

from fastapi import Depends

from hr_dashboard.config import DashboardSettings
from hr_dashboard.services.analysis_service import AnalysisService
from hr_dashboard.services.dashboard_engine import DashboardEngine
from hr_dashboard.services.data_access import HRDataService
from hr_dashboard.services.gemini_client import GeminiClient


@lru_cache
def get_settings() -> DashboardSettings:
    """Process-wide settings, read once. Tests override this dependency."""
    return DashboardSettings.from_env()


def get_data_service(settings: DashboardSettings = Depends(get_settings)) -> HRDataService:
    return HRDataService(settings)


def get_gemini_client(settings: DashboardSettings = Depends(get_settings)) -> GeminiClient:
    return GeminiClient(settings)


def get_analysis_service(
    data: HRDataService = Depends(get_data_service),
    gemini: GeminiClient = Depends(get_gemini_client),
) -> AnalysisService:
    return AnalysisService(data, gemini)


def get_engine() -> DashboardEngine:
    return DashboardEngine()
