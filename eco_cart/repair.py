from __future__ import annotations

import logging
import copy
from dataclasses import dataclass
from typing import Any, Iterable

from .normalize import parse_amount

logger = logging.getLogger(__name__)

# Factory records selling below this were entered with cost and selling
# prices shifted by one column.
DEFAULT_SELLING_PRICE_THRESHOLD = 200


@dataclass(frozen=True)
class PricingFix:
    product_id: str
    name: str
    cost_price: float
    old_selling_price: float
    old_token_price: float | None
    new_selling_price: float
    new_token_price: float


def _record_id(rec: dict[str, Any]) -> str:
    return str(rec.get("_id") or rec.get("id") or "")


def plan_pricing_fixes(
    records: Iterable[dict[str, Any]],
    *,
    threshold: float = DEFAULT_SELLING_PRICE_THRESHOLD,
) -> list[PricingFix]:
    """Find factory product records whose pricing columns are shifted.

    A record selling under ``threshold`` gets its cost price promoted to the
    selling price, and the old selling price becomes the EcoToken price.
    """
    fixes: list[PricingFix] = []
    for rec in records:
        pricing = rec.get("pricing") if isinstance(rec, dict) else None
        product_id = _record_id(rec) if isinstance(pricing, dict) else ""
        if not product_id:
            continue

        selling = parse_amount(pricing.get("sellingPrice"))
        cost = parse_amount(pricing.get("costPrice"))
        if selling is None or cost is None:
            logger.debug("Skipping %s: non-numeric pricing", product_id)
            continue
        if selling >= threshold:
            continue

        info = rec.get("productInfo")
        info = info if isinstance(info, dict) else {}
        fixes.append(
            PricingFix(
                product_id=product_id,
                name=str(info.get("name") or ""),
                cost_price=cost,
                old_selling_price=selling,
                old_token_price=parse_amount(pricing.get("ecoTokenDiscount")),
                new_selling_price=cost,
                new_token_price=selling,
            )
        )
    return fixes


def apply_pricing_fixes(
    records: Iterable[dict[str, Any]],
    fixes: Iterable[PricingFix],
) -> list[dict[str, Any]]:
    """Return copies of ``records`` with ``fixes`` applied; inputs are untouched."""
    by_id = {f.product_id: f for f in fixes}
    out: list[dict[str, Any]] = []
    for rec in records:
        rec = copy.deepcopy(rec)
        if not isinstance(rec, dict) or not isinstance(rec.get("pricing"), dict):
            out.append(rec)
            continue
        fix = by_id.get(_record_id(rec))
        if fix is not None:
            rec["pricing"]["sellingPrice"] = fix.new_selling_price
            rec["pricing"]["ecoTokenDiscount"] = fix.new_token_price
            logger.info(
                "Fixed %s: selling %s -> %s, tokens %s -> %s",
                fix.name or fix.product_id,
                fix.old_selling_price,
                fix.new_selling_price,
                fix.old_token_price,
                fix.new_token_price,
            )
        out.append(rec)
    return out
