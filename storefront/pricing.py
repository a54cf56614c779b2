"""Bill computation and coupon validation.

Everything here is a pure function of its arguments. ``quote`` is the one
place that reads the delivery fee, and the ``Bill`` it returns is the object
that gets committed at checkout, so a preview and the charged amount can
never disagree.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from storefront.config import GST_PERCENT, PLATFORM_FEE
from storefront.data import COUPONS
from storefront.models import Bill, CartItem, Coupon

if TYPE_CHECKING:
    from storefront.persistence import Store


class CouponError(ValueError):
    """A coupon code was rejected; no discount applies."""


class InvalidCouponError(CouponError):
    def __init__(self, code: str) -> None:
        super().__init__("Invalid Coupon Code")
        self.code = code


class CouponMinimumError(CouponError):
    def __init__(self, coupon: Coupon) -> None:
        super().__init__(f"Minimum order value is {coupon.min_order}")
        self.coupon = coupon


def _round_half_up(numerator: int, denominator: int) -> int:
    # Non-negative operands only.
    return (2 * numerator + denominator) // (2 * denominator)


def item_total(lines: Iterable[CartItem]) -> int:
    return sum(line.price * line.quantity for line in lines)


def gst_for(total: int) -> int:
    """Tax on the item total, rounded half-up to a whole unit."""
    return _round_half_up(total * GST_PERCENT, 100)


def find_coupon(code: str, coupons: Iterable[Coupon] = COUPONS) -> Coupon | None:
    wanted = code.strip().upper()
    if not wanted:
        return None
    for coupon in coupons:
        if coupon.code.upper() == wanted:
            return coupon
    return None


def validate_coupon(code: str, total: int, coupons: Iterable[Coupon] = COUPONS) -> Coupon:
    """Return the coupon for ``code`` or raise a ``CouponError``."""
    coupon = find_coupon(code, coupons)
    if coupon is None:
        raise InvalidCouponError(code)
    if total < coupon.min_order:
        raise CouponMinimumError(coupon)
    return coupon


def coupon_discount(coupon: Coupon, total: int) -> int:
    """Raw discount for ``coupon`` before clamping against the bill."""
    if total < coupon.min_order:
        return 0
    if coupon.discount_amount:
        return coupon.discount_amount
    if coupon.discount_percent:
        discount = _round_half_up(total * coupon.discount_percent, 100)
        if coupon.max_discount is not None:
            discount = min(discount, coupon.max_discount)
        return discount
    return 0


def compute_bill(lines: Iterable[CartItem], coupon: Coupon | None = None, delivery_fee: int = 0) -> Bill:
    lines = list(lines)
    total = item_total(lines)
    gst = gst_for(total)
    gross = total + PLATFORM_FEE + delivery_fee + gst

    discount = 0
    applied = None
    if coupon is not None:
        discount = coupon_discount(coupon, total)
        if discount > 0:
            applied = coupon
    discount = max(0, min(discount, gross))

    return Bill(
        item_total=total,
        platform_fee=PLATFORM_FEE,
        delivery_fee=delivery_fee,
        gst=gst,
        discount=discount,
        final_total=max(0, gross - discount),
        coupon=applied,
    )


def quote(store: Store, lines: Iterable[CartItem], coupon_code: str | None = None) -> Bill:
    """Price a cart against the stored delivery fee.

    Raises ``CouponError`` when ``coupon_code`` is given but not applicable.
    """
    lines = list(lines)
    coupon = None
    if coupon_code:
        coupon = validate_coupon(coupon_code, item_total(lines))
    return compute_bill(lines, coupon=coupon, delivery_fee=store.get_delivery_fee())
