"""Controller: Rankings and the dashboard summary."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from app.core.dependencies import get_dashboard_service, get_report_service
from app.core.exceptions import ValidationError
from app.services.dashboard_service import DashboardService
from app.services.report_service import ReportService

router = APIRouter(prefix="/api", tags=["Reports"])


@router.get("/ranking")
def get_ranking(
    period: Optional[str] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
    week: Optional[int] = None,
    service: ReportService = Depends(get_report_service),
):
    """Top users by closed duration; ``month`` is zero-based."""
    try:
        ranking = service.ranking(period, year, month, week)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return {"success": True, "ranking": ranking}


@router.get("/dashboard/summary")
async def get_dashboard_summary(service: DashboardService = Depends(get_dashboard_service)):
    summary = await service.summary()
    return {"success": True, **summary}
