from __future__ import annotations

import logging
import math
from typing import Any, Iterable

from .models import (
    DEFAULT_SUSTAINABILITY_SCORE,
    PLACEHOLDER_IMAGE_URL,
    SOLD_OUT,
    AVAILABLE,
    UNCATEGORIZED,
    Product,
)

logger = logging.getLogger(__name__)


def parse_amount(value: Any) -> float | None:
    """Parse a price-like value: ints, floats, and numeric strings like '300'."""
    # bool is an int subclass; a True price is malformed, not 1
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        num = float(value)
    elif isinstance(value, str):
        try:
            num = float(value.strip())
        except ValueError:
            return None
    else:
        return None

    if math.isnan(num) or math.isinf(num):
        return None
    return num


def _price(value: Any) -> float:
    num = parse_amount(value)
    if num is None or num < 0:
        return 0
    # keep whole amounts integral so totals print as 300, not 300.0
    return int(num) if num.is_integer() else num


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _first_image(images: Any) -> str:
    # only the first image is used; an empty first slot means no image
    if isinstance(images, (list, tuple)) and images:
        first = images[0]
        if isinstance(first, str) and first.strip():
            return first
    return PLACEHOLDER_IMAGE_URL


def normalize_product(raw: Any) -> Product:
    """Map a raw marketplace record to a Product. Never raises."""
    if not isinstance(raw, dict):
        raw = {}

    price = raw.get("price")
    if not isinstance(price, dict):
        price = {}

    _id = raw.get("_id")
    if _id is None or _id == "":
        _id = raw.get("id")

    description = raw.get("description")

    category = raw.get("category")
    if not isinstance(category, str) or not category:
        category = UNCATEGORIZED

    # a zero score counts as missing
    score = parse_amount(raw.get("sustainabilityScore"))
    if not score:
        score = DEFAULT_SUSTAINABILITY_SCORE
    elif score.is_integer():
        score = int(score)

    return Product(
        id=_text(_id),
        name=_text(raw.get("name")),
        description=str(description) if description is not None else None,
        fiat_price=_price(price.get("fiatAmount")),
        token_price=_price(price.get("tokenAmount")),
        category=category,
        image_url=_first_image(raw.get("images")),
        sustainability_score=score,
        status=SOLD_OUT if raw.get("status") == SOLD_OUT else AVAILABLE,
    )


def normalize_catalog(raws: Iterable[Any]) -> list[Product]:
    """Normalize a batch of raw records into a catalog snapshot.

    Records without an id are dropped, and so are repeats of an id already
    seen; the first occurrence wins. Input order is preserved.
    """
    out: list[Product] = []
    seen: set[str] = set()
    for idx, raw in enumerate(raws):
        product = normalize_product(raw)
        if not product.id:
            logger.warning("Dropping product record %d without an id (name=%r)", idx, product.name)
            continue
        if product.id in seen:
            logger.warning("Dropping duplicate product id %s at record %d", product.id, idx)
            continue
        seen.add(product.id)
        out.append(product)
    return out
