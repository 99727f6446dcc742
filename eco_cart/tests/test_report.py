import json

from eco_cart.cart import Cart, add_to_cart
from eco_cart.models import Product
from eco_cart.pricing import checkout_cart
from eco_cart.report import build_checkout_report


def _cart():
    cart = Cart()
    clock = Product(id="clock", name="Bamboo Wall Clock", fiat_price=300, token_price=100)
    add_to_cart(cart, clock)
    add_to_cart(cart, clock)
    add_to_cart(cart, Product(id="bag", name="Jute Tote Bag", fiat_price=150, token_price=20))
    return cart


def test_report_counts_and_totals():
    cart = _cart()
    checkout = checkout_cart(cart, 50, 5)
    report = build_checkout_report(cart, checkout, token_balance=50, token_to_fiat_rate=5)

    assert report.lines == 2
    assert report.units == 3
    assert report.cart_total == 750
    assert report.token_total == 220
    assert report.tokens_applied == 50
    assert report.final_total == 500
    assert not report.floored
    assert report.items[0].fiat_subtotal == 600


def test_report_marks_floored_total():
    cart = _cart()
    checkout = checkout_cart(cart, 1000, 5, floor_at_zero=True)
    report = build_checkout_report(cart, checkout, token_balance=1000, token_to_fiat_rate=5, floor_at_zero=True)

    assert report.final_total == 0
    assert report.floored
    assert "floored" in report.summary_text()


def test_summary_and_json(tmp_path):
    cart = _cart()
    report = build_checkout_report(cart, checkout_cart(cart, 0), token_balance=0, token_to_fiat_rate=5)

    text = report.summary_text()
    assert "Bamboo Wall Clock x2" in text
    assert "Total: ₹750" in text

    path = report.write_json(str(tmp_path / "out" / "report.json"))
    data = json.loads(open(path, encoding="utf-8").read())
    assert data["final_total"] == 750
    assert data["items"][1]["product_id"] == "bag"
