from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from portal.dependencies import get_dashboard_service
from portal.response import success_response
from portal.schemas.views import registration_view, trend_view
from portal.services.dashboard_service import DashboardService

router = APIRouter(prefix="/v1/dashboard", tags=["dashboard"])


@router.get("/summary")
async def summary(service: DashboardService = Depends(get_dashboard_service)) -> dict:
    result = await service.summary()
    return success_response(
        {
            "totals": result.totals,
            "appointment_trend": trend_view(result.appointment_trend),
            "registrations": registration_view(result.registrations),
        },
        meta={},
    )


@router.get("/appointments")
async def appointment_overview(
    limit: int = Query(default=100, ge=1, le=500),
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    result = await service.appointment_overview(limit=limit)
    return success_response(asdict(result), meta={})
