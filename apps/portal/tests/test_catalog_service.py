from __future__ import annotations

import pytest
from care_engine.models import FacetState, PriceRange, Product, SortKey

from portal.clients.care_api_client import Page
from portal.errors import ApiError, UserInputError
from portal.schemas.envelope import Pagination
from portal.services.catalog_service import CatalogService

PRODUCTS = [
    Product(id="p-1", name="Mask", category="Protective", brand="Acme", price=50.0, sold_count=2),
    Product(id="p-2", name="Gloves", category="Protective", brand="Medix", price=100.0, sold_count=9),
    Product(id="p-3", name="Thermometer", category="Devices", brand="Acme", price=150.0, sold_count=5),
]


class FakeProductGateway:
    def __init__(self, pages: int = 3, error: ApiError | None = None) -> None:
        self.calls: list[tuple[int, int, str | None]] = []
        self.diseases: list[str] = []
        self._pages = pages
        self._error = error

    async def list_products(self, page: int, limit: int, category: str | None = None) -> Page:
        self.calls.append((page, limit, category))
        if self._error:
            raise self._error
        return Page(items=list(PRODUCTS), pagination=Pagination(page=page, pages=self._pages))

    async def personalized_recommendations(self) -> list[Product]:
        if self._error:
            raise self._error
        return PRODUCTS[:1]

    async def disease_recommendations(self, disease: str) -> list[Product]:
        self.diseases.append(disease)
        if self._error:
            raise self._error
        return PRODUCTS[1:]


@pytest.mark.asyncio
async def test_facet_options_come_from_the_larger_sample() -> None:
    gateway = FakeProductGateway()
    options = await CatalogService(gateway, facet_sample_size=200).facet_options()

    assert gateway.calls == [(1, 200, None)]
    assert options.categories == ("Protective", "Devices")
    assert options.brands == ("Acme", "Medix")
    assert options.price_range == PriceRange(minimum=50.0, maximum=150.0)


@pytest.mark.asyncio
async def test_browse_refines_only_the_fetched_page() -> None:
    gateway = FakeProductGateway(pages=4)
    facets = FacetState(
        price_range=PriceRange(minimum=100.0, maximum=150.0),
        sort_key=SortKey.PRICE_DESC,
        page=2,
        page_size=20,
    )

    result = await CatalogService(gateway).browse(facets, category="Protective")

    assert gateway.calls == [(2, 20, "Protective")]
    assert [product.id for product in result.products] == ["p-3", "p-2"]
    assert (result.page, result.pages, result.server_count) == (2, 4, 3)


@pytest.mark.asyncio
async def test_browse_degrades_to_empty_on_upstream_failure() -> None:
    gateway = FakeProductGateway(error=ApiError("UPSTREAM_TIMEOUT", "Upstream timeout", 504))

    result = await CatalogService(gateway).browse(FacetState())

    assert result.products == []
    assert result.pages == 1


@pytest.mark.asyncio
async def test_disease_recommendations_require_text() -> None:
    gateway = FakeProductGateway()

    with pytest.raises(UserInputError):
        await CatalogService(gateway).disease_recommendations("   ")

    assert gateway.diseases == []


@pytest.mark.asyncio
async def test_disease_recommendations_trim_input() -> None:
    gateway = FakeProductGateway()

    items = await CatalogService(gateway).disease_recommendations("  diabetes ")

    assert gateway.diseases == ["diabetes"]
    assert [item.id for item in items] == ["p-2", "p-3"]


@pytest.mark.asyncio
async def test_personalized_recommendations_degrade_to_empty() -> None:
    gateway = FakeProductGateway(error=ApiError("UPSTREAM_FAILURE", "Upstream request failed", 502))

    assert await CatalogService(gateway).personalized_recommendations() == []
