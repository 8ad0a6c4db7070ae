from __future__ import annotations

from care_engine.models import SortKey
from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError

from portal.dependencies import get_catalog_page_size, get_catalog_service
from portal.errors import ApiError
from portal.response import page_meta, success_response
from portal.schemas.envelope import Pagination
from portal.schemas.views import (
    CatalogQueryParams,
    DiseaseRecommendationRequest,
    facet_options_view,
    product_view,
)
from portal.services.catalog_service import CatalogService

router = APIRouter(prefix="/v1/catalog", tags=["catalog"])


@router.get("/facets")
async def facets(
    category: str | None = Query(default=None),
    service: CatalogService = Depends(get_catalog_service),
) -> dict:
    options = await service.facet_options(category=category)
    return success_response(facet_options_view(options), meta={})


@router.get("/products")
async def products(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1, le=100),
    category: str | None = Query(default=None),
    brands: list[str] = Query(default=[]),
    min_price: float = Query(default=0.0, ge=0),
    max_price: float | None = Query(default=None, ge=0),
    sort: str = Query(default=SortKey.RELEVANCE.value),
    service: CatalogService = Depends(get_catalog_service),
    default_page_size: int = Depends(get_catalog_page_size),
) -> dict:
    try:
        params = CatalogQueryParams(
            page=page,
            limit=limit or default_page_size,
            category=category,
            brands=brands,
            min_price=min_price,
            max_price=max_price,
            sort=SortKey.parse(sort),
        )
    except ValidationError as exc:
        message = "; ".join(err["msg"] for err in exc.errors())
        raise ApiError("VALIDATION_ERROR", message, 422) from exc
    result = await service.browse(params.to_facet_state(), category=params.category)
    meta = page_meta(Pagination(page=result.page, pages=result.pages), len(result.products))
    meta["server_count"] = result.server_count
    return success_response([product_view(product) for product in result.products], meta=meta)


@router.post("/recommendations/disease")
async def disease_recommendations(
    payload: DiseaseRecommendationRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> dict:
    items = await service.disease_recommendations(payload.disease)
    return success_response([product_view(product) for product in items], meta={"count": len(items)})


@router.get("/recommendations/personalized")
async def personalized_recommendations(service: CatalogService = Depends(get_catalog_service)) -> dict:
    items = await service.personalized_recommendations()
    return success_response([product_view(product) for product in items], meta={"count": len(items)})
