from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import Any

from care_engine.models import FacetOptions, FacetState, PriceRange, Product, SortKey


def coerce_number(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def coerce_price(product: Product) -> float:
    return coerce_number(product.price)


def filter_by_brands(products: Iterable[Product], brands: frozenset[str]) -> list[Product]:
    if not brands:
        return list(products)
    return [product for product in products if product.brand in brands]


def filter_by_price(products: Iterable[Product], price_range: PriceRange) -> list[Product]:
    return [product for product in products if price_range.contains(coerce_price(product))]


def sort_products(products: Sequence[Product], sort_key: SortKey) -> list[Product]:
    if sort_key is SortKey.PRICE_ASC:
        return sorted(products, key=coerce_price)
    if sort_key is SortKey.PRICE_DESC:
        return sorted(products, key=coerce_price, reverse=True)
    if sort_key is SortKey.POPULARITY:
        return sorted(products, key=lambda product: coerce_number(product.sold_count), reverse=True)
    return list(products)


def query_catalog(server_page: Sequence[Product], facets: FacetState) -> list[Product]:
    filtered = filter_by_brands(server_page, facets.selected_brands)
    filtered = filter_by_price(filtered, facets.price_range)
    return sort_products(filtered, facets.sort_key)


def _distinct(values: Iterable[str | None]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for value in values:
        if value:
            seen.setdefault(value, None)
    return tuple(seen)


def derive_facet_options(sample: Sequence[Product]) -> FacetOptions:
    prices = [coerce_price(product) for product in sample]
    price_range = PriceRange(minimum=min(prices), maximum=max(prices)) if prices else PriceRange()
    return FacetOptions(
        categories=_distinct(product.category for product in sample),
        brands=_distinct(product.brand for product in sample),
        price_range=price_range,
    )


def clamp_page(page: int, total_pages: int) -> int:
    upper = max(1, total_pages)
    return min(max(1, page), upper)
