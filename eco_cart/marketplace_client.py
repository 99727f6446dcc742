from __future__ import annotations

import logging
from typing import Any

import requests

from .http import HttpClient
from .models import Product
from .normalize import normalize_catalog, parse_amount

logger = logging.getLogger(__name__)

PRODUCTS_PATH = "/api/marketplace"
CURRENT_USER_PATH = "/api/auth/me"

# the API has wrapped the product list under each of these over time
PRODUCT_LIST_KEYS = ("items", "data", "products")


class SourceFetchError(RuntimeError):
    """The product list could not be fetched. No partial data is returned."""


class MarketplaceClient:
    def __init__(self, *, api_url: str, token: str | None = None, http: HttpClient | None = None):
        self.http = http or HttpClient(base_url=api_url, token=token)

    def fetch_all_products(self) -> list[dict[str, Any]]:
        data = self._get_json(PRODUCTS_PATH)
        items = unwrap_product_list(data)
        if items is None:
            raise SourceFetchError(f"Unexpected product payload from {PRODUCTS_PATH}: {type(data).__name__}")
        return items

    def get_token_balance(self) -> float:
        """EcoToken balance of the signed-in user; 0 when unauthenticated."""
        if not self.http.token:
            return 0
        try:
            resp = self.http.get(CURRENT_USER_PATH)
        except requests.RequestException as e:
            logger.warning("Could not fetch wallet balance: %s", e)
            return 0
        if resp.status_code in (401, 403):
            logger.info("Not authenticated; using a token balance of 0")
            return 0
        if resp.status_code >= 400:
            logger.warning("Wallet lookup failed with HTTP %s", resp.status_code)
            return 0
        try:
            user = resp.json()
        except ValueError:
            logger.warning("Wallet lookup returned invalid JSON")
            return 0
        return _balance_from_user(user)

    def _get_json(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        try:
            resp = self.http.get(path, params=params)
        except requests.RequestException as e:
            raise SourceFetchError(f"Request to {path} failed: {e}") from e
        if resp.status_code >= 400:
            raise SourceFetchError(f"Marketplace API error {resp.status_code} for {path}: {resp.text[:500]}")
        try:
            return resp.json()
        except ValueError as e:
            raise SourceFetchError(f"Failed to decode JSON from marketplace for {path}: {e}") from e


def unwrap_product_list(data: Any) -> list[Any] | None:
    """Return the product list from a bare list or a wrapped payload, else None."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for k in PRODUCT_LIST_KEYS:
            if isinstance(data.get(k), list):
                return data[k]
    return None


def _balance_from_user(user: Any) -> float:
    for key in ("user", "data"):
        if isinstance(user, dict) and isinstance(user.get(key), dict):
            user = user[key]
            break
    if not isinstance(user, dict):
        return 0
    wallet = user.get("ecoWallet")
    if not isinstance(wallet, dict):
        return 0
    balance = parse_amount(wallet.get("currentBalance"))
    return balance if balance is not None else 0


def load_catalog(client: MarketplaceClient) -> tuple[list[Product], SourceFetchError | None]:
    """Fetch and normalize the catalog snapshot.

    On a fetch failure the snapshot is empty and the error is handed back so
    the caller can surface it.
    """
    try:
        raws = client.fetch_all_products()
    except SourceFetchError as e:
        logger.error("Failed to load products: %s", e)
        return [], e
    products = normalize_catalog(raws)
    logger.info("Loaded %d products (%d raw records)", len(products), len(raws))
    return products, None
