from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from care_engine.catalog import clamp_page, derive_facet_options, query_catalog
from care_engine.models import FacetOptions, FacetState, Product

from portal.clients.care_api_client import Page
from portal.errors import ApiError, UserInputError

logger = logging.getLogger(__name__)


class ProductGateway(Protocol):
    async def list_products(self, page: int, limit: int, category: str | None = None) -> Page: ...

    async def personalized_recommendations(self) -> list[Product]: ...

    async def disease_recommendations(self, disease: str) -> list[Product]: ...


@dataclass(frozen=True)
class CatalogPage:
    products: list[Product]
    page: int
    pages: int
    server_count: int


class CatalogService:
    def __init__(self, gateway: ProductGateway, facet_sample_size: int = 200) -> None:
        self._gateway = gateway
        self._facet_sample_size = facet_sample_size

    async def facet_options(self, category: str | None = None) -> FacetOptions:
        try:
            sample = await self._gateway.list_products(page=1, limit=self._facet_sample_size, category=category)
        except ApiError as exc:
            logger.warning("catalog_facet_sample_failed", extra={"code": exc.code, "category": category})
            return derive_facet_options([])
        return derive_facet_options(sample.items)

    async def browse(self, facets: FacetState, category: str | None = None) -> CatalogPage:
        try:
            server_page = await self._gateway.list_products(
                page=facets.page,
                limit=facets.page_size,
                category=category,
            )
        except ApiError as exc:
            logger.warning("catalog_page_failed", extra={"code": exc.code, "page": facets.page})
            return CatalogPage(products=[], page=1, pages=1, server_count=0)

        pages = server_page.pagination.pages
        products = query_catalog(server_page.items, facets)
        logger.debug(
            "catalog_page_refined",
            extra={"page": facets.page, "server_count": len(server_page.items), "shown_count": len(products)},
        )
        return CatalogPage(
            products=products,
            page=clamp_page(server_page.pagination.page, pages),
            pages=pages,
            server_count=len(server_page.items),
        )

    async def disease_recommendations(self, disease: str) -> list[Product]:
        text = disease.strip()
        if not text:
            raise UserInputError("disease is required")
        try:
            return await self._gateway.disease_recommendations(text)
        except ApiError as exc:
            logger.warning("catalog_disease_recommendations_failed", extra={"code": exc.code})
            return []

    async def personalized_recommendations(self) -> list[Product]:
        try:
            return await self._gateway.personalized_recommendations()
        except ApiError as exc:
            logger.warning("catalog_personalized_recommendations_failed", extra={"code": exc.code})
            return []
