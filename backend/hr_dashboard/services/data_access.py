"""
Data access façade: one retrieval operation per entity.

Each operation fetches the entity's fixed sheet range and runs the matching
row parser. No joins happen here; callers resolve foreign identifiers.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from hr_dashboard.config import DashboardSettings
from hr_dashboard.models.records import Employee, Enrollment, PerformanceMetric, Training
from hr_dashboard.services import row_parsers
from hr_dashboard.services.row_parsers import FallbackPolicy
from hr_dashboard.services.sheets_client import SheetsClient

logger = logging.getLogger("hr-dashboard.data")

ENTITIES = ("employees", "trainings", "performance", "enrollments")


class HRDataService:
    def __init__(self, settings: DashboardSettings, sheets_client: Optional[SheetsClient] = None):
        self.settings = settings
        self.sheets = sheets_client or SheetsClient(settings)
        self.policy = FallbackPolicy(settings.fallback_policy)
        self.layouts = row_parsers.layouts_for(settings.schema_revision)

    async def get_employees(self) -> List[Employee]:
        layout = self.layouts["employees"]
        rows = await self.sheets.fetch_range(layout.range_spec)
        return row_parsers.parse_employees(rows, self.policy, layout)

    async def get_trainings(self) -> List[Training]:
        layout = self.layouts["trainings"]
        rows = await self.sheets.fetch_range(layout.range_spec)
        return row_parsers.parse_trainings(rows, self.policy, layout)

    async def get_performance_metrics(self) -> List[PerformanceMetric]:
        layout = self.layouts["performance"]
        rows = await self.sheets.fetch_range(layout.range_spec)
        return row_parsers.parse_performance_metrics(rows, self.policy, layout)

    async def get_enrollments(self) -> List[Enrollment]:
        layout = self.layouts["enrollments"]
        rows = await self.sheets.fetch_range(layout.range_spec)
        return row_parsers.parse_enrollments(rows, self.policy, layout)

    async def load_all(self, *names: str) -> Dict[str, List[Any]]:
        """
        Load several entities concurrently and return them keyed by name.

        All-complete join: the first failing load propagates and nothing is
        returned, so a view never commits partial data.
        """
        loaders = {
            "employees": self.get_employees,
            "trainings": self.get_trainings,
            "performance": self.get_performance_metrics,
            "enrollments": self.get_enrollments,
        }
        unknown = [name for name in names if name not in loaders]
        if unknown:
            raise ValueError(f"Unknown entities: {unknown}. Expected any of {ENTITIES}")

        results = await asyncio.gather(*(loaders[name]() for name in names))
        logger.debug(f"Composite load finished: {', '.join(names)}")
        return dict(zip(names, results))
