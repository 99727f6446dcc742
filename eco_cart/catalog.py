from __future__ import annotations

import math
from typing import Iterable, Sequence

from .models import (
    ALL_CATEGORIES,
    SORT_PRICE_HIGH,
    SORT_PRICE_LOW,
    CatalogPage,
    CatalogQuery,
    CatalogView,
    Product,
)


def filter_by_category(products: Iterable[Product], category: str) -> list[Product]:
    if category == ALL_CATEGORIES:
        return list(products)
    return [p for p in products if p.category == category]


def matches_search(product: Product, term: str) -> bool:
    t = term.casefold()
    return t in product.name.casefold() or t in (product.description or "").casefold()


def search(products: Iterable[Product], term: str) -> list[Product]:
    if not term:
        return list(products)
    return [p for p in products if matches_search(p, term)]


def sort_products(products: Iterable[Product], sort_by: str) -> list[Product]:
    """Order products by a sort policy.

    ``price_low`` / ``price_high`` order by fiat price; anything else (``popular``,
    or a policy we don't implement like ``rating``) keeps the incoming order.
    Python's sort is stable, so equal prices keep their relative order in both
    directions.
    """
    out = list(products)
    if sort_by == SORT_PRICE_LOW:
        out.sort(key=lambda p: p.fiat_price)
    elif sort_by == SORT_PRICE_HIGH:
        out.sort(key=lambda p: -p.fiat_price)
    return out


def paginate(products: Sequence[Product], page: int, page_size: int) -> list[Product]:
    # No clamping here: anything outside the range is just an empty page.
    if page < 1 or page_size < 1:
        return []
    start = (page - 1) * page_size
    return list(products[start:start + page_size])


def query_catalog(products: Iterable[Product], q: CatalogQuery) -> CatalogPage:
    result = filter_by_category(products, q.category)
    result = search(result, q.search_term)
    total = len(result)
    result = sort_products(result, q.sort_by)
    return CatalogPage(total_matching=total, page_items=paginate(result, q.page, q.page_size))


def available_categories(products: Iterable[Product]) -> list[str]:
    cats = [ALL_CATEGORIES]
    for p in products:
        if p.category not in cats:
            cats.append(p.category)
    return cats


def total_pages(total_matching: int, page_size: int) -> int:
    if page_size < 1:
        return 1
    return max(1, math.ceil(total_matching / page_size))


def clamp_page(page: int, total_matching: int, page_size: int) -> int:
    return min(max(1, page), total_pages(total_matching, page_size))


def build_catalog_view(products: Sequence[Product], q: CatalogQuery) -> CatalogView:
    result = query_catalog(products, q)
    return CatalogView(
        total_matching=result.total_matching,
        page_items=result.page_items,
        available_categories=available_categories(products),
        page=q.page,
        total_pages=total_pages(result.total_matching, q.page_size),
    )
