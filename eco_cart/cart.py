from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterator

from .models import Product


class InvariantViolation(ValueError):
    """A cart value was built in a state the cart operations never produce."""


@dataclass(frozen=True)
class CartLine:
    product: Product
    quantity: int = 1

    def __post_init__(self):
        if self.quantity < 1:
            raise InvariantViolation(
                f"Cart line for {self.product.id} must have quantity >= 1, got {self.quantity}"
            )


@dataclass
class Cart:
    """One session's cart: lines in insertion order, at most one per product id.

    A Cart is owned by a single session. Pass it explicitly to the functions
    below; don't share one instance across sessions.
    """

    lines: list[CartLine] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)


@dataclass(frozen=True)
class CartView:
    lines: list[CartLine]
    cart_total: float
    token_total: float


def _index_of(cart: Cart, product_id: str) -> int | None:
    for i, line in enumerate(cart.lines):
        if line.product.id == product_id:
            return i
    return None


def add_to_cart(cart: Cart, product: Product) -> None:
    """Add one unit of ``product``.

    Callers must not add sold-out products; this function doesn't look at
    ``product.status``.
    """
    i = _index_of(cart, product.id)
    if i is None:
        cart.lines.append(CartLine(product=product, quantity=1))
        return
    line = cart.lines[i]
    cart.lines[i] = replace(line, quantity=line.quantity + 1)


def remove_from_cart(cart: Cart, product_id: str) -> None:
    cart.lines[:] = [line for line in cart.lines if line.product.id != product_id]


def update_quantity(cart: Cart, product_id: str, new_quantity: int) -> None:
    """Set a line's quantity exactly. Zero or less removes the line."""
    if new_quantity <= 0:
        remove_from_cart(cart, product_id)
        return
    i = _index_of(cart, product_id)
    if i is None:
        return
    cart.lines[i] = replace(cart.lines[i], quantity=new_quantity)


def cart_total(cart: Cart) -> float:
    return sum(line.quantity * line.product.fiat_price for line in cart.lines)


def token_total(cart: Cart) -> float:
    return sum(line.quantity * line.product.token_price for line in cart.lines)


def cart_view(cart: Cart) -> CartView:
    return CartView(
        lines=list(cart.lines),
        cart_total=cart_total(cart),
        token_total=token_total(cart),
    )
