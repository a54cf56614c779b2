from __future__ import annotations

import pytest

from storefront.models import CartItem, Coupon, MenuItem
from storefront.pricing import (
    CouponMinimumError,
    InvalidCouponError,
    compute_bill,
    coupon_discount,
    find_coupon,
    gst_for,
    item_total,
    quote,
    validate_coupon,
)


def lines_worth(total: int) -> list[CartItem]:
    return [CartItem(item=MenuItem(id="x", name="Thali", price=total, category="Other"), quantity=1)]


def test_item_total_sums_price_times_quantity():
    lines = [
        CartItem(item=MenuItem(id="1", name="Puri", price=80, category="Recommended"), quantity=2),
        CartItem(item=MenuItem(id="3", name="Roti", price=30, category="Breads"), quantity=3),
    ]
    assert item_total(lines) == 250


def test_empty_cart_prices_to_fees_only():
    bill = compute_bill([])
    assert bill.item_total == 0
    assert bill.gst == 0
    assert bill.final_total == bill.platform_fee == 5


@pytest.mark.parametrize(
    "total, expected",
    [(0, 0), (100, 5), (110, 6), (130, 7), (129, 6), (250, 13)],
)
def test_gst_rounds_half_up(total, expected):
    assert gst_for(total) == expected


def test_bill_adds_fees_and_tax():
    bill = compute_bill(lines_worth(200), delivery_fee=20)
    assert bill.item_total == 200
    assert bill.gst == 10
    assert bill.final_total == 200 + 5 + 20 + 10


def test_welcome50_rejected_below_minimum():
    with pytest.raises(CouponMinimumError):
        validate_coupon("WELCOME50", 80)


def test_welcome50_percent_discount_is_capped():
    coupon = validate_coupon("welcome50", 300)
    assert coupon_discount(coupon, 300) == 100

    bill = compute_bill(lines_worth(300), coupon=coupon)
    assert bill.discount == 100
    assert bill.final_total == 300 + 5 + 15 - 100
    assert bill.coupon == coupon


def test_tiffin20_flat_discount_at_threshold():
    coupon = validate_coupon("TIFFIN20", 200)
    bill = compute_bill(lines_worth(200), coupon=coupon)
    assert bill.discount == 20


def test_tiffin20_rejected_one_below_threshold():
    with pytest.raises(CouponMinimumError):
        validate_coupon("TIFFIN20", 199)


def test_unknown_coupon_is_invalid():
    with pytest.raises(InvalidCouponError):
        validate_coupon("FREEFOOD", 1000)
    assert find_coupon("  tiffin20 ") is not None
    assert find_coupon("") is None


def test_coupon_below_minimum_adds_no_discount_to_bill():
    coupon = find_coupon("TIFFIN20")
    bill = compute_bill(lines_worth(150), coupon=coupon)
    assert bill.discount == 0
    assert bill.coupon is None


def test_discount_never_drives_total_negative():
    huge = Coupon(code="HUGE", discount_amount=10_000)
    bill = compute_bill(lines_worth(50), coupon=huge)
    assert bill.final_total == 0
    assert bill.discount == 50 + 5 + 3


@pytest.mark.parametrize("total", [0, 1, 19, 150, 199, 200, 333, 1999])
@pytest.mark.parametrize("code", [None, "WELCOME50", "TIFFIN20"])
def test_total_identity_holds(total, code):
    coupon = find_coupon(code) if code else None
    bill = compute_bill(lines_worth(total), coupon=coupon, delivery_fee=15)
    assert bill.final_total >= 0
    assert bill.final_total == bill.item_total + bill.platform_fee + bill.delivery_fee + bill.gst - bill.discount


def test_quote_uses_stored_delivery_fee(store):
    store.set_delivery_fee(30)
    bill = quote(store, lines_worth(300), "WELCOME50")
    assert bill.delivery_fee == 30
    assert bill.final_total == 300 + 5 + 30 + 15 - 100


def test_quote_rejects_bad_coupon(store):
    with pytest.raises(InvalidCouponError):
        quote(store, lines_worth(300), "NOPE")
