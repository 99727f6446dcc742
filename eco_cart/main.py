from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path

from .cart import Cart, add_to_cart, cart_view, update_quantity
from .catalog import build_catalog_view, clamp_page
from .config import OPTIONAL_KEYS, REQUIRED_KEYS, Config
from .logger import setup_logging
from .marketplace_client import MarketplaceClient, SourceFetchError, load_catalog, unwrap_product_list
from .models import SORT_POPULAR, SORT_PRICE_HIGH, SORT_PRICE_LOW, CatalogQuery, Product
from .normalize import normalize_catalog
from .pricing import checkout_cart
from .repair import DEFAULT_SELLING_PRICE_THRESHOLD, apply_pricing_fixes, plan_pricing_fixes
from .report import build_checkout_report

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="eco-cart")
    p.add_argument("--version", action="store_true", help="Print version and exit")

    sub = p.add_subparsers(dest="cmd", required=False)

    p_config = sub.add_parser("config", help="Config commands")
    sub_config = p_config.add_subparsers(dest="config_cmd", required=True)
    sub_config.add_parser("keys", help="List environment variables read by eco-cart")
    sub_config.add_parser("check", help="Validate the environment config")

    p_catalog = sub.add_parser("catalog", help="Show one page of the filtered, sorted catalog")
    _add_input_arg(p_catalog)
    p_catalog.add_argument("--category", default="all")
    p_catalog.add_argument("--search", default="", help="Case-insensitive name/description search")
    p_catalog.add_argument(
        "--sort",
        default=SORT_POPULAR,
        choices=[SORT_POPULAR, SORT_PRICE_LOW, SORT_PRICE_HIGH, "rating"],
    )
    p_catalog.add_argument("--page", type=int, default=1)
    p_catalog.add_argument("--page-size", type=int, default=0, help="Items per page (0=config default)")

    p_cats = sub.add_parser("categories", help="List catalog categories")
    _add_input_arg(p_cats)

    p_checkout = sub.add_parser("checkout", help="Build a cart and price it in fiat + EcoTokens")
    _add_input_arg(p_checkout)
    p_checkout.add_argument("--add", action="append", default=[], metavar="ID", help="Add one unit (repeatable)")
    p_checkout.add_argument("--qty", action="append", default=[], metavar="ID=N", help="Set a line's quantity")
    p_checkout.add_argument("--balance", type=float, default=None, help="EcoToken balance (default: from API)")
    p_checkout.add_argument("--floor", action="store_true", help="Never report a total below 0")
    p_checkout.add_argument("--out", default=None, help="Report JSON path")

    p_repair = sub.add_parser("repair-pricing", help="Fix shifted cost/selling/token prices in factory records")
    p_repair.add_argument("file", help="JSON file with factory product records")
    p_repair.add_argument("--threshold", type=float, default=DEFAULT_SELLING_PRICE_THRESHOLD)
    p_repair.add_argument("--out", default=None, help="Write fixed records here (default: dry run)")

    return p


def _add_input_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument("--input", default=None, help="Read raw products from a JSON file instead of the API")


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    setup_logging()

    if args.version:
        print(__version__)
        return 0

    if args.cmd is None:
        p.print_help()
        return 0

    try:
        if args.cmd == "config":
            return _run_config(args)
        if args.cmd == "catalog":
            return _run_catalog(args)
        if args.cmd == "categories":
            return _run_categories(args)
        if args.cmd == "checkout":
            return _run_checkout(args)
        if args.cmd == "repair-pricing":
            return _run_repair(args)
    except (RuntimeError, OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    raise RuntimeError("unreachable")


def _run_config(args) -> int:
    if args.config_cmd == "keys":
        for k in REQUIRED_KEYS:
            print(k)
        for k in OPTIONAL_KEYS:
            print(f"{k} (optional)")
        return 0

    cfg = Config.load_from_env(require_api=True)
    print(f"OK: api={cfg.api_url} rate={cfg.token_to_fiat_rate} page_size={cfg.page_size}")
    return 0


def _load_products(args, cfg: Config) -> tuple[list[Product], MarketplaceClient | None]:
    if args.input:
        data = json.loads(Path(args.input).read_text(encoding="utf-8"))
        items = unwrap_product_list(data)
        if items is None:
            raise ValueError(f"{args.input} holds no product list")
        return normalize_catalog(items), None

    if not cfg.api_url:
        raise RuntimeError("Missing environment variable: ECO_CART_API_URL (or pass --input)")
    client = MarketplaceClient(api_url=cfg.api_url, token=cfg.api_token)
    products, err = load_catalog(client)
    if err is not None:
        raise SourceFetchError("Failed to load products. Please try again later.")
    return products, client


def _run_catalog(args) -> int:
    cfg = Config.load_from_env()
    products, _ = _load_products(args, cfg)

    q = CatalogQuery(
        category=args.category,
        search_term=args.search,
        sort_by=args.sort,
        page=args.page,
        page_size=args.page_size or cfg.page_size,
    )
    view = build_catalog_view(products, q)
    page = clamp_page(q.page, view.total_matching, q.page_size)
    if page != q.page:
        q = replace(q, page=page)
        view = build_catalog_view(products, q)

    print(f"{view.total_matching} matching  (page {view.page} of {view.total_pages})")
    if not view.page_items:
        print("No products found. Try different filters.")
        return 0
    for i, prod in enumerate(view.page_items, (q.page - 1) * q.page_size + 1):
        tag = "  [sold out]" if prod.sold_out else ""
        print(f"{i}. {prod.name}  ({prod.id}){tag}")
        print(f"   ₹{prod.fiat_price} + {prod.token_price} EcoTokens  ♻ {prod.sustainability_score}  [{prod.category}]")
    return 0


def _run_categories(args) -> int:
    cfg = Config.load_from_env()
    products, _ = _load_products(args, cfg)
    view = build_catalog_view(products, CatalogQuery())
    for cat in view.available_categories:
        print(cat)
    return 0


def _run_checkout(args) -> int:
    cfg = Config.load_from_env()
    products, client = _load_products(args, cfg)
    by_id = {prod.id: prod for prod in products}

    cart = Cart()
    for pid in args.add:
        prod = by_id.get(pid)
        if prod is None:
            print(f"SKIP: unknown product {pid}")
            continue
        if prod.sold_out:
            print(f"SKIP: {prod.name} is sold out")
            continue
        add_to_cart(cart, prod)

    for pair in args.qty:
        pid, sep, n = pair.partition("=")
        if not sep:
            raise ValueError(f"--qty expects ID=N, got {pair!r}")
        update_quantity(cart, pid, int(n))

    if args.balance is not None:
        balance = args.balance
    elif client is not None:
        balance = client.get_token_balance()
    else:
        balance = 0

    floor = args.floor or cfg.floor_final_total
    view = cart_view(cart)
    checkout = checkout_cart(cart, balance, cfg.token_to_fiat_rate, floor_at_zero=floor)
    logger.debug("Cart %d lines, ₹%s + %s tokens", len(view.lines), view.cart_total, view.token_total)

    report = build_checkout_report(
        cart,
        checkout,
        token_balance=balance,
        token_to_fiat_rate=cfg.token_to_fiat_rate,
        floor_at_zero=floor,
    )
    print(report.summary_text())
    path = report.write_json(args.out or cfg.report_path)
    print(f"\nReport written to {path}")
    return 0


def _run_repair(args) -> int:
    records = json.loads(Path(args.file).read_text(encoding="utf-8"))
    if not isinstance(records, list):
        raise ValueError(f"{args.file} must contain a JSON list of product records")

    fixes = plan_pricing_fixes(records, threshold=args.threshold)
    print(f"Found {len(fixes)} products that need pricing fixes:")
    for fix in fixes:
        print(f"  {fix.name or fix.product_id}")
        print(f"    selling ₹{fix.old_selling_price} -> ₹{fix.new_selling_price}")
        print(f"    tokens  {fix.old_token_price} -> {fix.new_token_price}")

    if args.out is None:
        print("Dry run: no file written (pass --out to save).")
        return 0

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(apply_pricing_fixes(records, fixes), indent=2, ensure_ascii=False))
    print(f"Fixed records written to {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
