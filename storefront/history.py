"""Read-only queries over the retained order collection."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Iterable

from storefront.models import DashboardStats, Order, OrderStatus

ALL_STATUSES = "ALL"

_END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class HistoryFilter:
    """Criteria for the history view. Empty fields match everything."""

    text: str = ""
    start: date | None = None
    end: date | None = None
    status: str = ALL_STATUSES
    phone: str | None = None

    def with_status(self, status: OrderStatus | str) -> HistoryFilter:
        value = status.value if isinstance(status, OrderStatus) else status
        return replace(self, status=value)

    def is_empty(self) -> bool:
        return (
            not self.text
            and self.start is None
            and self.end is None
            and self.status == ALL_STATUSES
            and self.phone is None
        )


def order_datetime(order: Order) -> datetime:
    """Creation instant of ``order`` in local time."""
    return datetime.fromtimestamp(order.timestamp / 1000)


def parse_day(text: str) -> date:
    """Parse a ``YYYY-MM-DD`` calendar day."""
    return datetime.strptime(text.strip(), "%Y-%m-%d").date()


def search_orders(orders: Iterable[Order], text: str) -> list[Order]:
    """Live order list search on order id or customer name."""
    query = text.strip().lower()
    if not query:
        return list(orders)
    return [
        order
        for order in orders
        if query in order.id.lower() or query in order.user_details.name.lower()
    ]


def _matches(order: Order, flt: HistoryFilter) -> bool:
    placed = order_datetime(order)
    if flt.start is not None and placed < datetime.combine(flt.start, time.min):
        return False
    if flt.end is not None and placed > datetime.combine(flt.end, _END_OF_DAY):
        return False
    if flt.status != ALL_STATUSES and order.status.value != flt.status:
        return False
    if flt.phone is not None and order.user_details.phone != flt.phone:
        return False

    text = flt.text.strip()
    if text:
        name_hit = text.lower() in order.user_details.name.lower()
        phone_hit = text in order.user_details.phone
        if not (name_hit or phone_hit):
            return False
    return True


def filter_history(orders: Iterable[Order], flt: HistoryFilter) -> list[Order]:
    return [order for order in orders if _matches(order, flt)]


def customer_order_counts(orders: Iterable[Order]) -> Counter[str]:
    return Counter(order.user_details.phone for order in orders)


def repeat_order_count(orders: Iterable[Order], phone: str) -> int:
    return sum(1 for order in orders if order.user_details.phone == phone)


def customer_label(count: int) -> str:
    if count > 1:
        return f"Repeat ({count})"
    return "First order"


def customer_history_filter(order: Order) -> HistoryFilter:
    """History criteria scoped to exactly the customer who placed ``order``."""
    return HistoryFilter(phone=order.user_details.phone)


def dashboard_stats(orders: Iterable[Order], today: date | None = None) -> DashboardStats:
    """Today's sales and order count, plus the best-selling item overall."""
    orders = list(orders)
    today = today or date.today()
    todays = [order for order in orders if order_datetime(order).date() == today]

    item_counts: Counter[str] = Counter()
    for order in orders:
        for line in order.items:
            item_counts[line.name] += line.quantity

    top_item = "N/A"
    if item_counts:
        top_item = item_counts.most_common(1)[0][0]

    status_counts = Counter(order.status.value for order in orders)
    return DashboardStats(
        total_sales=sum(order.total_amount for order in todays),
        order_count=len(todays),
        top_item=top_item,
        status_counts=dict(status_counts),
    )
