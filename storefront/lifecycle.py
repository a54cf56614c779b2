"""Order creation, checkout handshake and status transitions."""

from __future__ import annotations

import logging
import random
import re
import string
from datetime import datetime
from typing import Awaitable, Callable, Iterable

from storefront.cart import Cart
from storefront.config import CUTOFF_HOUR
from storefront.models import Bill, CartItem, Order, OrderStatus, PaymentResult, UserDetails, UserProfile
from storefront.persistence import Store, now_ms
from storefront.pricing import quote

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

_ID_ALPHABET = string.ascii_uppercase + string.digits

PaymentCollector = Callable[[Bill], Awaitable[PaymentResult]]


class EmptyCartError(ValueError):
    def __init__(self) -> None:
        super().__init__("Cart is empty")


class OrderingClosedError(ValueError):
    def __init__(self) -> None:
        super().__init__(f"Orders close at {CUTOFF_HOUR}:00. Please order again tomorrow.")


class PaymentError(Exception):
    """The payment collaborator declined, failed, or returned no reference."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Payment Failed: {reason}")
        self.reason = reason


def generate_order_id(existing_ids: Iterable[str] = ()) -> str:
    """Return an operator-friendly id like ``#ORD-8X29`` not in ``existing_ids``."""
    taken = set(existing_ids)
    while True:
        candidate = "#ORD-" + "".join(random.choices(_ID_ALPHABET, k=4))
        if candidate not in taken:
            return candidate


def is_ordering_closed(now: datetime | None = None) -> bool:
    now = now or datetime.now()
    return now.hour >= CUTOFF_HOUR


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def place_order(
    store: Store,
    lines: Iterable[CartItem],
    details: UserDetails,
    bill: Bill,
    payment_reference: str,
    now: int | None = None,
) -> Order:
    """Persist a new PENDING order for an already priced and paid cart."""
    items = tuple(lines)
    if not items:
        raise EmptyCartError()
    if not payment_reference:
        raise ValueError("A payment reference is required to place an order")

    existing = store.get_orders(now=now)
    timestamp = now_ms() if now is None else now
    if existing:
        # Keep creation time monotonic across the persisted sequence.
        timestamp = max(timestamp, existing[0].timestamp)

    order = Order(
        id=generate_order_id(previous.id for previous in existing),
        items=items,
        total_amount=bill.final_total,
        user_details=details,
        status=OrderStatus.PENDING,
        timestamp=timestamp,
        payment_id=payment_reference,
    )
    store.save_order(order)
    store.save_last_order(list(items))
    return order


async def checkout(
    store: Store,
    cart: Cart,
    details: UserDetails,
    collect_payment: PaymentCollector,
    coupon_code: str | None = None,
    now: datetime | None = None,
) -> Order:
    """Price the cart once, collect payment for that exact bill, then place the order.

    On any failure the cart and stored orders are left untouched.
    """
    if cart.is_empty():
        raise EmptyCartError()
    if is_ordering_closed(now):
        raise OrderingClosedError()

    lines = cart.lines
    bill = quote(store, lines, coupon_code)
    logger.info("collecting payment of %d for %d line(s)", bill.final_total, len(lines))

    result = await collect_payment(bill)
    if not result.ok:
        logger.warning("payment failed: %s", result.reason)
        raise PaymentError(result.reason or "payment was not completed")
    if not result.payment_reference:
        logger.warning("payment succeeded without a reference; no order created")
        raise PaymentError("no payment reference returned")

    created_at = int(now.timestamp() * 1000) if now is not None else None
    order = place_order(store, lines, details, bill, result.payment_reference, now=created_at)
    _remember_customer(store, details, created_at)
    cart.clear()
    return order


def _remember_customer(store: Store, details: UserDetails, now: int | None) -> UserProfile:
    current = store.get_current_user()
    if current is not None and current.id == details.phone:
        joined_at = current.joined_at
    else:
        joined_at = now_ms() if now is None else now
    profile = UserProfile(id=details.phone, details=details, joined_at=joined_at)
    store.save_current_user(profile)
    return profile


def login(
    store: Store,
    name: str,
    phone: str,
    address: str,
    email: str | None = None,
    now: int | None = None,
) -> UserProfile:
    """Create or refresh the session profile for ``phone``."""
    digits = re.sub(r"\D", "", phone)
    if len(digits) < 10:
        raise ValueError("Please enter a valid 10-digit mobile number")
    if not name.strip():
        raise ValueError("Please enter your name")

    details = UserDetails(name=name.strip(), phone=digits, address=address.strip(), email=email or None)
    return _remember_customer(store, details, now)


def update_order_status(store: Store, order_id: str, status: OrderStatus) -> bool:
    """Set ``status`` on a persisted order, leaving every other field intact.

    Returns False, and changes nothing, when no order has ``order_id``.
    """
    status = OrderStatus(status)
    updated = store.update_order_record(order_id, lambda record: {**record, "status": status.value})
    if updated is None:
        logger.warning("status update for unknown order %s ignored", order_id)
        return False
    logger.info("order %s -> %s", order_id, status.value)
    return True
