from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from portal.clients.care_api_client import ADMIN_RESOURCES
from portal.dependencies import get_dashboard_service
from portal.errors import ApiError
from portal.response import page_meta, success_response
from portal.schemas.views import VerificationApproveRequest, VerificationRejectRequest
from portal.services.dashboard_service import DashboardService

router = APIRouter(prefix="/v1/admin", tags=["admin"])


@router.get("/verifications/pending")
async def pending_verifications(service: DashboardService = Depends(get_dashboard_service)) -> dict:
    items = await service.pending_verifications()
    return success_response(items, meta={"count": len(items)})


@router.get("/verifications/{doctor_id}")
async def verification_detail(
    doctor_id: str,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    return success_response(await service.verification_detail(doctor_id), meta={})


@router.post("/verifications/{doctor_id}/approve")
async def approve_verification(
    doctor_id: str,
    payload: VerificationApproveRequest,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    return success_response(await service.approve_verification(doctor_id, payload.notes), meta={})


@router.post("/verifications/{doctor_id}/reject")
async def reject_verification(
    doctor_id: str,
    payload: VerificationRejectRequest,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    result = await service.reject_verification(doctor_id, payload.reason, payload.notes)
    return success_response(result, meta={})


@router.patch("/users/{user_id}/toggle-status")
async def toggle_user_status(
    user_id: str,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    return success_response(await service.toggle_user_status(user_id), meta={})


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    await service.delete_user(user_id)
    return success_response({"user_id": user_id, "deleted": True}, meta={})


@router.get("/{resource}")
async def list_resource(
    resource: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    q: str = Query(default="", max_length=200),
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    if resource not in ADMIN_RESOURCES:
        raise ApiError("VALIDATION_ERROR", f"unsupported admin resource '{resource}'", 422)
    listing = await service.list_resource(resource, page=page, limit=limit, query=q)
    return success_response(listing.items, meta=page_meta(listing.pagination, len(listing.items)))
