from __future__ import annotations

from .cart import Cart, cart_total, token_total
from .models import Checkout

# Fiat units one EcoToken is worth at checkout.
DEFAULT_TOKEN_TO_FIAT_RATE = 5


def resolve_checkout(
    cart_total: float,
    token_total: float,
    user_token_balance: float,
    token_to_fiat_rate: float = DEFAULT_TOKEN_TO_FIAT_RATE,
    *,
    floor_at_zero: bool = False,
) -> Checkout:
    """Work out how many tokens the user can apply and what's left to pay.

    Tokens applied are capped by both what the cart asks for and what the
    user holds. The final total is the raw difference unless
    ``floor_at_zero`` is set, in which case it never goes below 0.
    """
    tokens_applied = max(0, min(token_total, user_token_balance))
    final_total = cart_total - tokens_applied * token_to_fiat_rate
    if floor_at_zero and final_total < 0:
        final_total = 0
    return Checkout(tokens_applied=tokens_applied, final_total=final_total)


def checkout_cart(
    cart: Cart,
    user_token_balance: float,
    token_to_fiat_rate: float = DEFAULT_TOKEN_TO_FIAT_RATE,
    *,
    floor_at_zero: bool = False,
) -> Checkout:
    return resolve_checkout(
        cart_total(cart),
        token_total(cart),
        user_token_balance,
        token_to_fiat_rate,
        floor_at_zero=floor_at_zero,
    )
