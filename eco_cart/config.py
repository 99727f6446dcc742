from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Mapping

from .models import DEFAULT_PAGE_SIZE
from .pricing import DEFAULT_TOKEN_TO_FIAT_RATE


REQUIRED_KEYS = [
    "ECO_CART_API_URL",
]

OPTIONAL_KEYS = [
    "ECO_CART_API_TOKEN",
    "ECO_CART_TOKEN_RATE",
    "ECO_CART_PAGE_SIZE",
    "ECO_CART_FLOOR_FINAL_TOTAL",
    "ECO_CART_REPORT_PATH",
]

DEFAULT_REPORT_PATH = "artifacts/checkout_report.json"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    api_url: str = ""
    api_token: str | None = None
    token_to_fiat_rate: float = DEFAULT_TOKEN_TO_FIAT_RATE
    page_size: int = DEFAULT_PAGE_SIZE
    # Clamp negative checkout totals to 0 instead of reporting them as-is.
    floor_final_total: bool = False
    report_path: str = DEFAULT_REPORT_PATH

    @staticmethod
    def load_from_env(env: Mapping[str, str] | None = None, *, require_api: bool = False) -> "Config":
        env = os.environ if env is None else env

        if require_api:
            for k in REQUIRED_KEYS:
                if not env.get(k, "").strip():
                    raise RuntimeError(f"Missing environment variable: {k}")

        rate = _number(env, "ECO_CART_TOKEN_RATE", DEFAULT_TOKEN_TO_FIAT_RATE)
        if rate < 0:
            raise RuntimeError(f"ECO_CART_TOKEN_RATE must be >= 0, got {rate}")

        page_size = _number(env, "ECO_CART_PAGE_SIZE", DEFAULT_PAGE_SIZE)
        if not isinstance(page_size, int) or page_size < 1:
            raise RuntimeError(f"ECO_CART_PAGE_SIZE must be a whole number >= 1, got {page_size}")

        return Config(
            api_url=env.get("ECO_CART_API_URL", "").strip().rstrip("/"),
            api_token=env.get("ECO_CART_API_TOKEN") or None,
            token_to_fiat_rate=rate,
            page_size=page_size,
            floor_final_total=env.get("ECO_CART_FLOOR_FINAL_TOTAL", "").strip().lower() in _TRUTHY,
            report_path=env.get("ECO_CART_REPORT_PATH") or DEFAULT_REPORT_PATH,
        )


def _number(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a number, got {raw!r}")
    if not math.isfinite(val):
        raise RuntimeError(f"{key} must be a finite number, got {raw!r}")
    return int(val) if val.is_integer() else val
