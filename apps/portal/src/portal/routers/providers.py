from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from portal.dependencies import get_provider_directory
from portal.response import success_response
from portal.schemas.views import marker_view, provider_view
from portal.services.provider_directory import ProviderDirectoryService

router = APIRouter(prefix="/v1/providers", tags=["providers"])


@router.get("/match")
async def match_providers(
    symptoms: str = Query(default="", max_length=500),
    service: ProviderDirectoryService = Depends(get_provider_directory),
) -> dict:
    result = await service.match(symptoms)
    view = None
    if result.view is not None:
        view = {"lat": result.view.center.lat, "lng": result.view.center.lng, "zoom": result.view.zoom}
    return success_response(
        {
            "providers": [provider_view(provider) for provider in result.providers],
            "markers": [marker_view(marker) for marker in result.markers],
            "view": view,
        },
        meta={"count": len(result.providers)},
    )
