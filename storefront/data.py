"""Static catalog and coupon data."""

from __future__ import annotations

from storefront.constant import CATEGORY_IMAGES, COUPONS as _COUPONS_RAW, INITIAL_MENU as _INITIAL_MENU_RAW
from storefront.models import Coupon, MenuItem

DEFAULT_MENU: list[MenuItem] = [MenuItem.from_dict(raw) for raw in _INITIAL_MENU_RAW]

COUPONS: list[Coupon] = [Coupon.from_dict(raw) for raw in _COUPONS_RAW]

DEFAULT_CATEGORY_IMAGES: dict[str, str] = dict(CATEGORY_IMAGES)
