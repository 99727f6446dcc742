from __future__ import annotations

import json
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from pathlib import Path

from .cart import Cart, cart_total, token_total
from .models import Checkout


@dataclass
class LineReport:
    product_id: str
    name: str
    quantity: int
    fiat_price: float
    token_price: float
    fiat_subtotal: float
    token_subtotal: float


@dataclass
class CheckoutReport:
    timestamp: str
    lines: int
    units: int
    cart_total: float
    token_total: float
    token_balance: float
    token_to_fiat_rate: float
    tokens_applied: float
    final_total: float
    floored: bool
    items: list[LineReport]

    def summary_text(self) -> str:
        lines = [
            f"Checkout: {self.timestamp}",
            f"Lines: {self.lines}  Units: {self.units}",
            "",
        ]
        for i, it in enumerate(self.items, 1):
            lines.append(f"  {i}. {it.name} x{it.quantity}")
            lines.append(f"     ₹{it.fiat_subtotal} + {it.token_subtotal} EcoTokens")
        lines += [
            "",
            f"Subtotal: ₹{self.cart_total} + {self.token_total} EcoTokens",
            f"EcoTokens applied: {self.tokens_applied} (balance {self.token_balance}, 1 token = ₹{self.token_to_fiat_rate})",
            f"Total: ₹{self.final_total}" + ("  (floored at 0)" if self.floored else ""),
        ]
        return "\n".join(lines)

    def write_json(self, path: str = "artifacts/checkout_report.json") -> str:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(asdict(self), indent=2, ensure_ascii=False))
        return str(out)


def build_checkout_report(
    cart: Cart,
    checkout: Checkout,
    *,
    token_balance: float,
    token_to_fiat_rate: float,
    floor_at_zero: bool = False,
) -> CheckoutReport:
    items = [
        LineReport(
            product_id=line.product.id,
            name=line.product.name,
            quantity=line.quantity,
            fiat_price=line.product.fiat_price,
            token_price=line.product.token_price,
            fiat_subtotal=line.quantity * line.product.fiat_price,
            token_subtotal=line.quantity * line.product.token_price,
        )
        for line in cart
    ]
    subtotal = cart_total(cart)
    raw_final = subtotal - checkout.tokens_applied * token_to_fiat_rate
    return CheckoutReport(
        timestamp=datetime.now(timezone.utc).isoformat(),
        lines=len(items),
        units=sum(i.quantity for i in items),
        cart_total=subtotal,
        token_total=token_total(cart),
        token_balance=token_balance,
        token_to_fiat_rate=token_to_fiat_rate,
        tokens_applied=checkout.tokens_applied,
        final_total=checkout.final_total,
        floored=floor_at_zero and raw_final < 0,
        items=items,
    )
