from __future__ import annotations

from dataclasses import dataclass, field

AVAILABLE = "available"
SOLD_OUT = "sold_out"

UNCATEGORIZED = "uncategorized"
ALL_CATEGORIES = "all"

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/150"
DEFAULT_SUSTAINABILITY_SCORE = 85

SORT_POPULAR = "popular"
SORT_PRICE_LOW = "price_low"
SORT_PRICE_HIGH = "price_high"

DEFAULT_PAGE_SIZE = 12


@dataclass(frozen=True)
class Product:
    """A normalized catalog product, priced in fiat and in EcoTokens."""

    id: str
    name: str
    description: str | None = None
    fiat_price: float = 0
    token_price: float = 0
    category: str = UNCATEGORIZED
    image_url: str = PLACEHOLDER_IMAGE_URL
    sustainability_score: float = DEFAULT_SUSTAINABILITY_SCORE
    status: str = AVAILABLE  # AVAILABLE or SOLD_OUT

    @property
    def sold_out(self) -> bool:
        return self.status == SOLD_OUT


@dataclass(frozen=True)
class CatalogQuery:
    category: str = ALL_CATEGORIES
    search_term: str = ""
    sort_by: str = SORT_POPULAR
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class CatalogPage:
    # Count after filtering, before slicing.
    total_matching: int
    page_items: list[Product] = field(default_factory=list)


@dataclass(frozen=True)
class CatalogView:
    total_matching: int
    page_items: list[Product]
    available_categories: list[str]
    page: int
    total_pages: int


@dataclass(frozen=True)
class Checkout:
    tokens_applied: float
    final_total: float
