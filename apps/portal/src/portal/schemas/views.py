from __future__ import annotations

from dataclasses import asdict
from typing import Any

from care_engine.models import (
    FacetOptions,
    FacetState,
    PriceRange,
    Product,
    Provider,
    RegistrationPoint,
    SortKey,
    TrendPoint,
)
from pydantic import BaseModel, Field, model_validator

from portal.services.map_session import Marker


class CatalogQueryParams(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    category: str | None = None
    brands: list[str] = Field(default_factory=list)
    min_price: float = Field(default=0.0, ge=0)
    max_price: float | None = Field(default=None, ge=0)
    sort: SortKey = SortKey.RELEVANCE

    @model_validator(mode="after")
    def _check_price_bounds(self) -> CatalogQueryParams:
        if self.max_price and self.min_price > self.max_price:
            raise ValueError("min_price must be <= max_price")
        return self

    def to_facet_state(self) -> FacetState:
        return FacetState(
            price_range=PriceRange(minimum=self.min_price, maximum=self.max_price),
            selected_brands=frozenset(brand for brand in self.brands if brand),
            sort_key=self.sort,
            page=self.page,
            page_size=self.limit,
        )


class DiseaseRecommendationRequest(BaseModel):
    disease: str = ""


class AppointmentRequest(BaseModel):
    doctor_id: str = ""
    date: str = ""
    time: str = ""


class VerificationApproveRequest(BaseModel):
    notes: str = ""


class VerificationRejectRequest(BaseModel):
    reason: str = ""
    notes: str = ""


def provider_view(provider: Provider) -> dict[str, Any]:
    payload = asdict(provider)
    payload["address_line"] = provider.address.single_line()
    return payload


def product_view(product: Product) -> dict[str, Any]:
    payload = asdict(product)
    payload["images"] = list(product.images)
    return payload


def marker_view(marker: Marker) -> dict[str, Any]:
    return {
        "marker_id": marker.marker_id,
        "provider_id": marker.provider_id,
        "title": marker.title,
        "lat": marker.position.lat,
        "lng": marker.position.lng,
    }


def facet_options_view(options: FacetOptions) -> dict[str, Any]:
    return {
        "categories": list(options.categories),
        "brands": list(options.brands),
        "price_range": [options.price_range.minimum, options.price_range.maximum],
    }


def trend_view(points: list[TrendPoint]) -> list[dict[str, Any]]:
    return [asdict(point) for point in points]


def registration_view(points: list[RegistrationPoint]) -> list[dict[str, Any]]:
    return [asdict(point) for point in points]
